"""
Mesh Model
==========
Read-only geometry produced by the OBJ parser.

A MeshModel keeps one record per welded vertex in parallel arrays
(positions, texture coordinates, normals) and a triangle list of
model-local indices into them. `transformed_vertices` is the bridge to GPU
upload code: it interleaves the arrays as [x, y, z, u, v, nx, ny, nz] per
vertex, with positions mapped through a model matrix.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Union, TYPE_CHECKING

import numpy as np

from meshstage.config import VERTEX_COMPONENTS
from meshstage.model.geometry_primitives import Mat4, Vec2, Vec3

if TYPE_CHECKING:
    import numpy.typing as npt

AttributeInput = Union[Sequence[Vec3], Sequence[Vec2], "npt.ArrayLike"]


def _attribute_array(values: AttributeInput, components: int, label: str) -> npt.NDArray[np.float64]:
    """Converts a sequence of Vec2/Vec3 (or an array) to a read-only (N, components) array."""
    rows = [tuple(v) for v in values]
    if not rows:
        array = np.empty((0, components), dtype=np.float64)
    else:
        array = np.array(rows, dtype=np.float64)
    if array.ndim != 2 or array.shape[1] != components:
        raise ValueError(f"Expected {label} of shape (N, {components}), got {array.shape}.")
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class MeshModel:
    """
    Immutable triangle mesh with one attribute record per welded vertex.

    Invariants (checked on construction):
        - positions, tex_coords and normals have the same length N
        - len(indices) is a multiple of 3
        - every index lies in [0, N)
    """
    name: str = ""
    positions: npt.NDArray[np.float64] = field(default_factory=tuple)  # type: ignore[assignment]
    tex_coords: npt.NDArray[np.float64] = field(default_factory=tuple)  # type: ignore[assignment]
    normals: npt.NDArray[np.float64] = field(default_factory=tuple)  # type: ignore[assignment]
    indices: npt.NDArray[np.uint32] = field(default_factory=tuple)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        positions = _attribute_array(self.positions, 3, "positions")
        tex_coords = _attribute_array(self.tex_coords, 2, "tex_coords")
        normals = _attribute_array(self.normals, 3, "normals")

        n = positions.shape[0]
        if tex_coords.shape[0] != n or normals.shape[0] != n:
            raise ValueError(
                f"Model '{self.name}': attribute counts differ "
                f"(positions={n}, tex_coords={tex_coords.shape[0]}, normals={normals.shape[0]})."
            )

        raw_indices = np.asarray(self.indices, dtype=np.int64).reshape(-1)
        if raw_indices.size % 3 != 0:
            raise ValueError(f"Model '{self.name}': index count {raw_indices.size} is not a multiple of 3.")
        if raw_indices.size and (raw_indices.min() < 0 or raw_indices.max() >= n):
            raise ValueError(
                f"Model '{self.name}': indices must lie in [0, {n}), "
                f"got range [{raw_indices.min()}, {raw_indices.max()}]."
            )
        indices = raw_indices.astype(np.uint32)
        indices.flags.writeable = False

        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "tex_coords", tex_coords)
        object.__setattr__(self, "normals", normals)
        object.__setattr__(self, "indices", indices)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, "
            f"vertices={self.vertex_count}, triangles={self.triangle_count})"
        )

    @classmethod
    def empty(cls, name: str = "") -> MeshModel:
        """An empty mesh, for callers that explicitly want a fallback for missing models."""
        return cls(name=name)

    @property
    def vertex_count(self) -> int:
        """Number of welded vertex records (N)."""
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.size // 3)

    def transformed_vertices(self, matrix: Optional[Mat4] = None) -> VertexStream:
        """Interleaved vertex data with positions mapped through `matrix` (identity by default)."""
        return VertexStream(self, matrix if matrix is not None else Mat4.identity())

    def vertices(self) -> VertexStream:
        """Untransformed interleaved vertex data."""
        return self.transformed_vertices()


class VertexStream:
    """
    Lazily evaluated, restartable view of a model's interleaved vertex data.

    Iterating yields 8 floats per vertex; every new iteration starts over.
    Use `to_array` when a contiguous buffer is needed.
    """
    def __init__(self, model: MeshModel, matrix: Mat4) -> None:
        self.model = model
        self.matrix = matrix

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model.name!r}, vertices={self.vertex_count})"

    @property
    def vertex_count(self) -> int:
        return self.model.vertex_count

    def __len__(self) -> int:
        return self.vertex_count * VERTEX_COMPONENTS

    def __iter__(self) -> Iterator[float]:
        model = self.model
        for i in range(model.vertex_count):
            position = self.matrix.transform_point(Vec3(*model.positions[i]))
            yield from position
            for value in model.tex_coords[i]:
                yield float(value)
            for value in model.normals[i]:
                yield float(value)

    def to_array(self, dtype: npt.DTypeLike = np.float32) -> npt.NDArray:
        """Flat interleaved buffer of length 8 * N."""
        model = self.model
        if model.vertex_count == 0:
            return np.empty(0, dtype=dtype)
        positions = self.matrix.transform_points(model.positions)
        interleaved = np.hstack([positions, model.tex_coords, model.normals])
        return interleaved.astype(dtype).reshape(-1)
