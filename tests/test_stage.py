import numpy as np
import pytest

from meshstage.config import VERTEX_COMPONENTS
from meshstage.model.geometry_primitives import Vec3
from meshstage.model.mesh import MeshModel
from meshstage.model.registry import ModelNotFoundError, ModelRegistry
from meshstage.model.stage import Stage, StageActor


def test_camera_is_created(registry):
    stage = Stage("Main", registry)
    assert list(stage.actors) == ["camera"]
    assert stage.camera.model_name == "Cube"


def test_supplied_camera_is_kept(registry):
    camera = StageActor("camera", "A")
    stage = Stage("Main", registry, actors={"camera": camera})
    assert stage.camera is camera


def test_merge_offsets_by_vertex_count(registry):
    stage = Stage("Main", registry, setpieces=[StageActor("a", "A"), StageActor("b", "B")])
    assert stage.merged_indices().tolist() == [0, 1, 2, 3, 4, 5, 3, 5, 6]

    vertices = stage.merged_vertices()
    assert vertices.size == 7 * VERTEX_COMPONENTS
    # position x of record i is its model-local index, B's records follow A's
    xs = vertices.reshape(-1, VERTEX_COMPONENTS)[:, 0]
    assert xs.tolist() == [0, 1, 2, 0, 1, 2, 3]


def test_merged_indices_address_matching_records(registry):
    stage = Stage("Main", registry, setpieces=[
        StageActor("b1", "B"), StageActor("a", "A"), StageActor("b2", "B"),
    ])
    buffers = stage.build_buffers()
    assert buffers.vertex_count == 11
    assert buffers.index_count == 15
    assert buffers.indices.max() < buffers.vertex_count
    # the last setpiece's indices are shifted by 4 + 3 vertex records
    assert buffers.indices[-6:].tolist() == [7, 8, 9, 7, 9, 10]


def test_merge_uses_current_model_matrix(registry):
    actor = StageActor("a", "A")
    stage = Stage("Main", registry, setpieces=[actor])
    actor.transform.translation = Vec3(0.0, 10.0, 0.0)

    before = stage.merged_vertices().reshape(-1, VERTEX_COMPONENTS)
    assert before[:, 1].tolist() == [0, 0, 0]

    stage.recompute_transforms()
    after = stage.merged_vertices().reshape(-1, VERTEX_COMPONENTS)
    assert after[:, 1].tolist() == [10, 10, 10]


def test_empty_stage_buffers(registry):
    stage = Stage("Empty", registry)
    buffers = stage.build_buffers()
    assert buffers.vertices.dtype == np.float32
    assert buffers.indices.dtype == np.uint32
    assert buffers.vertex_count == buffers.index_count == 0


def test_actor_queries_skip_camera_by_default(registry):
    stage = Stage("Main", registry, actors={"hero": StageActor("hero", "B")})
    indices = stage.actor_indices()
    assert [i.tolist() for i in indices] == [[0, 1, 2, 0, 2, 3]]
    assert [v.size for v in stage.actor_vertices()] == [4 * VERTEX_COMPONENTS]

    with_camera = stage.actor_indices(include_camera=True)
    assert len(with_camera) == 2


def test_actor_vertices_are_not_transformed(registry):
    hero = StageActor("hero", "A")
    hero.transform.translation = Vec3(100.0, 0.0, 0.0)
    hero.transform.recompute()
    stage = Stage("Main", registry, actors={"hero": hero})
    xs = stage.actor_vertices()[0].reshape(-1, VERTEX_COMPONENTS)[:, 0]
    assert xs.tolist() == [0, 1, 2]


def test_missing_model_fails_for_vertices_and_indices(registry):
    stage = Stage("Main", registry, setpieces=[StageActor("ghost", "Missing")])
    with pytest.raises(ModelNotFoundError):
        stage.merged_vertices()
    with pytest.raises(ModelNotFoundError):
        stage.merged_indices()

    actor = StageActor("ghost", "Missing")
    with pytest.raises(ModelNotFoundError):
        actor.vertices(registry)
    with pytest.raises(ModelNotFoundError):
        actor.indices(registry)


def test_missing_model_with_explicit_fallback(registry):
    stage = Stage("Main", registry, setpieces=[StageActor("ghost", "Missing"), StageActor("a", "A")])
    fallback = MeshModel.empty("placeholder")
    assert stage.merged_indices(fallback=fallback).tolist() == [0, 1, 2]
    assert stage.merged_vertices(fallback=fallback).size == 3 * VERTEX_COMPONENTS


def test_camera_without_default_model_only_fails_when_queried():
    stage = Stage("Main", ModelRegistry())
    assert stage.actor_indices() == []
    with pytest.raises(ModelNotFoundError):
        stage.actor_indices(include_camera=True)


def test_missing_actor_model_fails_for_actor_queries(registry):
    stage = Stage("Main", registry, actors={"ghost": StageActor("ghost", "Missing")})
    with pytest.raises(ModelNotFoundError) as vertices_error:
        stage.actor_vertices()
    with pytest.raises(ModelNotFoundError) as indices_error:
        stage.actor_indices()
    assert vertices_error.value.model_name == indices_error.value.model_name == "Missing"
