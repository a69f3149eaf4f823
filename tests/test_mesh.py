import numpy as np
import pytest

from meshstage.model.geometry_primitives import Mat4, Vec2, Vec3
from meshstage.model.mesh import MeshModel


@pytest.fixture
def triangle() -> MeshModel:
    return MeshModel(
        name="Tri",
        positions=[Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0)],
        tex_coords=[Vec2(0, 0), Vec2(1, 0), Vec2(0, 1)],
        normals=[Vec3(0, 0, 1)] * 3,
        indices=[0, 1, 2],
    )


def test_interleaved_layout(triangle):
    stream = triangle.vertices()
    assert len(stream) == 24
    assert list(stream)[8:16] == [1.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0]


def test_stream_is_restartable(triangle):
    stream = triangle.transformed_vertices()
    assert list(stream) == list(stream)


def test_transform_applies_to_positions_only(triangle):
    stream = triangle.transformed_vertices(Mat4.from_translation(Vec3(5.0, 0.0, 0.0)))
    values = list(stream)
    assert values[0:3] == [5.0, 0.0, 0.0]
    assert values[3:8] == [0.0, 0.0, 0.0, 0.0, 1.0]


def test_to_array_matches_iteration(triangle):
    matrix = Mat4.from_scale(Vec3(2.0, 3.0, 4.0))
    stream = triangle.transformed_vertices(matrix)
    array = stream.to_array()
    assert array.dtype == np.float32
    np.testing.assert_allclose(array, list(stream))


def test_arrays_are_read_only(triangle):
    with pytest.raises(ValueError):
        triangle.positions[0, 0] = 9.0
    with pytest.raises(ValueError):
        triangle.indices[0] = 2


def test_empty_model():
    model = MeshModel.empty("Nothing")
    assert model.vertex_count == 0
    assert list(model.vertices()) == []
    assert model.vertices().to_array().size == 0


@pytest.mark.parametrize("kwargs", [
    dict(positions=[(0, 0, 0)], tex_coords=[], normals=[(0, 1, 0)], indices=[]),
    dict(positions=[(0, 0, 0)], tex_coords=[(0, 0)], normals=[(0, 1, 0)], indices=[0, 0]),
    dict(positions=[(0, 0, 0)], tex_coords=[(0, 0)], normals=[(0, 1, 0)], indices=[0, 0, 1]),
    dict(positions=[(0, 0, 0)], tex_coords=[(0, 0)], normals=[(0, 1, 0)], indices=[0, 0, -1]),
    dict(positions=[(0, 0)], tex_coords=[(0, 0)], normals=[(0, 1, 0)], indices=[]),
])
def test_invariants_are_enforced(kwargs):
    with pytest.raises(ValueError):
        MeshModel(name="Broken", **kwargs)
