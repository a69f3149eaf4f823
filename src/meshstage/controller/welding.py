"""
Vertex Welding
==============
Collapses repeated (position, texcoord, normal) references into one shared
vertex record and assigns it a compact, model-local combined index.

One AttributeDeduplicator serves exactly one model: a new model gets a new
instance, so its combined indices start again at 0.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from meshstage.config import DEFAULT_NORMAL, DEFAULT_TEX_COORD
from meshstage.model.geometry_primitives import Vec2, Vec3


@dataclass(frozen=True)
class FaceVertex:
    """
    0-based references of one face corner into the file-wide attribute pools.
    None marks an omitted texcoord/normal.
    """
    position: int
    tex_coord: Optional[int] = None
    normal: Optional[int] = None


class AttributeDeduplicator:
    def __init__(
        self,
        position_pool: Sequence[Vec3],
        tex_coord_pool: Sequence[Vec2],
        normal_pool: Sequence[Vec3],
    ) -> None:
        # Pools are only read; they keep growing while the file is scanned
        self._position_pool = position_pool
        self._tex_coord_pool = tex_coord_pool
        self._normal_pool = normal_pool

        self._combined: Dict[FaceVertex, int] = {}
        self.positions: List[Vec3] = []
        self.tex_coords: List[Vec2] = []
        self.normals: List[Vec3] = []
        self.next_index = 0

    def __len__(self) -> int:
        return self.next_index

    def __contains__(self, ref: object) -> bool:
        return ref in self._combined

    def add(self, ref: FaceVertex) -> int:
        """
        Returns the combined index of `ref`, appending a new vertex record
        the first time the combination is seen.

        Raises:
            IndexError: If a reference lies outside its pool.
        """
        existing = self._combined.get(ref)
        if existing is not None:
            return existing

        position = self._lookup(self._position_pool, ref.position, "position")
        if ref.tex_coord is None:
            tex_coord = Vec2(*DEFAULT_TEX_COORD)
        else:
            tex_coord = self._lookup(self._tex_coord_pool, ref.tex_coord, "texture coordinate")
        if ref.normal is None:
            normal = Vec3(*DEFAULT_NORMAL)
        else:
            normal = self._lookup(self._normal_pool, ref.normal, "normal")

        combined_index = self.next_index
        self.next_index += 1
        self._combined[ref] = combined_index
        self.positions.append(position)
        self.tex_coords.append(tex_coord)
        self.normals.append(normal)
        return combined_index

    @staticmethod
    def _lookup(pool: Sequence, index: int, label: str):
        if not 0 <= index < len(pool):
            raise IndexError(f"{label} index {index + 1} out of range (1..{len(pool)})")
        return pool[index]
