"""
Stage Composition
=================
A Stage groups named mesh instances (actors) that share one ModelRegistry.

Why is this file needed?
------------------------
1. Merging: static scenery ("setpieces") is concatenated into a single
   vertex/index buffer pair so the renderer can draw it with one call.
2. Lookup: individually drawn actors (including the camera) are kept in a
   name-keyed mapping and queried one array per actor.

Index offsets during merging are counted in vertex records, not in floats:
a setpiece with N vertices occupies 8 * N floats but only N index slots.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, Iterable, List, Optional, TYPE_CHECKING

import numpy as np

from meshstage.config import CAMERA_ACTOR_NAME, DEFAULT_MODEL_NAME, VERTEX_COMPONENTS
from meshstage.model.geometry_primitives import Mat4
from meshstage.model.mesh import MeshModel, VertexStream
from meshstage.model.registry import ModelRegistry
from meshstage.model.transform import Transform

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass
class StageActor:
    """An instance of a registered model placed in worldspace."""
    name: str = ""
    model_name: str = DEFAULT_MODEL_NAME
    transform: Transform = field(default_factory=Transform)

    def model(self, registry: ModelRegistry, fallback: Optional[MeshModel] = None) -> MeshModel:
        """Resolves `model_name`; raises ModelNotFoundError unless a fallback is given."""
        return registry.resolve(self.model_name, fallback=fallback)

    def vertices(self, registry: ModelRegistry, fallback: Optional[MeshModel] = None) -> VertexStream:
        """Model-space vertices, ignoring this actor's transform."""
        return self.model(registry, fallback).vertices()

    def indices(self, registry: ModelRegistry, fallback: Optional[MeshModel] = None) -> npt.NDArray[np.uint32]:
        return self.model(registry, fallback).indices

    def transformed_vertices(
        self,
        registry: ModelRegistry,
        matrix: Optional[Mat4] = None,
        fallback: Optional[MeshModel] = None,
    ) -> VertexStream:
        return self.model(registry, fallback).transformed_vertices(matrix)


@dataclass
class StageBuffers:
    """Merged setpiece geometry, ready for upload."""
    vertices: npt.NDArray[np.float32]
    indices: npt.NDArray[np.uint32]

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.size // VERTEX_COMPONENTS)

    @property
    def index_count(self) -> int:
        """Number of indices to draw."""
        return int(self.indices.size)


class Stage:
    def __init__(
        self,
        name: str,
        registry: ModelRegistry,
        setpieces: Iterable[StageActor] = (),
        actors: Optional[Dict[str, StageActor]] = None,
    ) -> None:
        """
        Initialize the Stage.

        Args:
            name: Stage name.
            registry: Source of the models the actors refer to.
            setpieces: Actors merged into the shared buffer, in merge order.
            actors: Individually queried actors keyed by name. A 'camera'
                entry using the default model is added when missing.
        """
        self.name = name
        self.registry = registry
        self.setpieces: List[StageActor] = list(setpieces)
        self.actors: Dict[str, StageActor] = dict(actors) if actors else {}
        if CAMERA_ACTOR_NAME not in self.actors:
            self.actors[CAMERA_ACTOR_NAME] = StageActor(CAMERA_ACTOR_NAME, DEFAULT_MODEL_NAME)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(name={self.name!r}, "
            f"setpieces={len(self.setpieces)}, actors={list(self.actors)})"
        )

    @property
    def camera(self) -> StageActor:
        return self.actors[CAMERA_ACTOR_NAME]

    def recompute_transforms(self) -> None:
        """Refreshes the model matrix of every setpiece and actor."""
        for actor in self.setpieces:
            actor.transform.recompute()
        for actor in self.actors.values():
            actor.transform.recompute()

    # --- Merged setpiece buffers ---

    def merged_vertices(self, fallback: Optional[MeshModel] = None) -> npt.NDArray[np.float32]:
        """Setpiece vertices in world space, concatenated in setpiece order."""
        chunks = [
            actor.transformed_vertices(self.registry, actor.transform.model_matrix, fallback).to_array()
            for actor in self.setpieces
        ]
        if not chunks:
            return np.empty(0, dtype=np.float32)
        return np.concatenate(chunks)

    def merged_indices(self, fallback: Optional[MeshModel] = None) -> npt.NDArray[np.uint32]:
        """Setpiece indices, each shifted by the vertex count of the setpieces before it."""
        chunks = []
        offset = 0
        for actor in self.setpieces:
            model = actor.model(self.registry, fallback)
            chunks.append(model.indices.astype(np.uint32) + np.uint32(offset))
            offset += model.vertex_count
        if not chunks:
            return np.empty(0, dtype=np.uint32)
        return np.concatenate(chunks)

    def build_buffers(self, fallback: Optional[MeshModel] = None) -> StageBuffers:
        buffers = StageBuffers(
            vertices=self.merged_vertices(fallback),
            indices=self.merged_indices(fallback),
        )
        logger.debug(
            f"Stage '{self.name}': merged {len(self.setpieces)} setpieces into "
            f"{buffers.vertex_count} vertices / {buffers.index_count} indices."
        )
        return buffers

    # --- Per-actor queries ---

    def _queried_actors(self, include_camera: bool) -> List[StageActor]:
        return [
            actor for key, actor in self.actors.items()
            if include_camera or key != CAMERA_ACTOR_NAME
        ]

    def actor_vertices(
        self,
        include_camera: bool = False,
        fallback: Optional[MeshModel] = None,
    ) -> List[npt.NDArray[np.float32]]:
        """One model-space vertex array per actor, in insertion order."""
        return [
            actor.vertices(self.registry, fallback).to_array()
            for actor in self._queried_actors(include_camera)
        ]

    def actor_indices(
        self,
        include_camera: bool = False,
        fallback: Optional[MeshModel] = None,
    ) -> List[npt.NDArray[np.uint32]]:
        """One index array per actor, each local to its own model."""
        return [
            actor.indices(self.registry, fallback)
            for actor in self._queried_actors(include_camera)
        ]
