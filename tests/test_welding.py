import pytest

from meshstage.controller.welding import AttributeDeduplicator, FaceVertex
from meshstage.model.geometry_primitives import Vec2, Vec3


@pytest.fixture
def pools():
    positions = [Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0)]
    tex_coords = [Vec2(0.25, 0.75)]
    normals = [Vec3(0, 0, 1)]
    return positions, tex_coords, normals


def test_same_reference_is_welded(pools):
    welder = AttributeDeduplicator(*pools)
    first = welder.add(FaceVertex(1, 0, 0))
    second = welder.add(FaceVertex(1, 0, 0))
    assert first == second == 0
    assert len(welder.positions) == 1
    assert len(welder) == 1


def test_new_references_get_consecutive_indices(pools):
    welder = AttributeDeduplicator(*pools)
    assert [welder.add(FaceVertex(i)) for i in (2, 0, 1)] == [0, 1, 2]
    assert welder.positions == [Vec3(0, 1, 0), Vec3(0, 0, 0), Vec3(1, 0, 0)]
    assert welder.next_index == 3


def test_absent_attributes_use_defaults(pools):
    welder = AttributeDeduplicator(*pools)
    welder.add(FaceVertex(0))
    assert welder.tex_coords == [Vec2(0.0, 0.0)]
    assert welder.normals == [Vec3(0.0, 1.0, 0.0)]


def test_absent_is_distinct_from_index_zero(pools):
    welder = AttributeDeduplicator(*pools)
    without = welder.add(FaceVertex(0, None, None))
    with_attrs = welder.add(FaceVertex(0, 0, 0))
    assert without != with_attrs
    assert welder.tex_coords == [Vec2(0.0, 0.0), Vec2(0.25, 0.75)]
    assert welder.normals == [Vec3(0.0, 1.0, 0.0), Vec3(0, 0, 1)]


def test_pools_are_not_modified(pools):
    positions, tex_coords, normals = pools
    welder = AttributeDeduplicator(positions, tex_coords, normals)
    welder.add(FaceVertex(0, 0, 0))
    welder.add(FaceVertex(2))
    assert len(positions) == 3 and len(tex_coords) == 1 and len(normals) == 1


def test_out_of_range_reference_raises(pools):
    welder = AttributeDeduplicator(*pools)
    with pytest.raises(IndexError):
        welder.add(FaceVertex(0, 5, None))
    assert len(welder) == 0


def test_separate_welders_have_separate_index_spaces(pools):
    a = AttributeDeduplicator(*pools)
    b = AttributeDeduplicator(*pools)
    a.add(FaceVertex(0))
    a.add(FaceVertex(1))
    assert b.add(FaceVertex(1)) == 0
    assert FaceVertex(1) in a and FaceVertex(0) not in b
