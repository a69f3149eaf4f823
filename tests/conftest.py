from __future__ import annotations

import pytest

from meshstage.model.mesh import MeshModel
from meshstage.model.registry import ModelRegistry

TRIANGLE_OBJ = """\
v 0 0 0
v 1 0 0
v 0 1 0
f 1 2 3
"""

TWO_OBJECTS_OBJ = """\
# two independent objects sharing the file-wide pools
v 0 0 0
v 1 0 0
v 0 1 0
v 1 1 0
vt 0 0
vt 1 0
vt 0 1
vn 0 0 1
o A
f 1/1/1 2/2/1 3/3/1
o B
f 2/2/1 4/1/1 3/3/1
f 2/2/1 3/3/1 1/1/1
"""


def grid_model(name: str, vertex_count: int, indices: list[int]) -> MeshModel:
    """Model whose i-th position is (i, 0, 0), to make merged buffers easy to check."""
    return MeshModel(
        name=name,
        positions=[(float(i), 0.0, 0.0) for i in range(vertex_count)],
        tex_coords=[(0.0, 0.0)] * vertex_count,
        normals=[(0.0, 1.0, 0.0)] * vertex_count,
        indices=indices,
    )


@pytest.fixture
def model_a() -> MeshModel:
    return grid_model("A", 3, [0, 1, 2])


@pytest.fixture
def model_b() -> MeshModel:
    return grid_model("B", 4, [0, 1, 2, 0, 2, 3])


@pytest.fixture
def registry(model_a: MeshModel, model_b: MeshModel) -> ModelRegistry:
    return ModelRegistry([model_a, model_b, grid_model("Cube", 3, [0, 1, 2])])
