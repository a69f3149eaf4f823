import argparse
import logging

import h5py
import pytest

from meshstage.main import main, parse_translation
from meshstage.model.geometry_primitives import Vec3

from tests.conftest import TWO_OBJECTS_OBJ


@pytest.fixture(autouse=True)
def restore_package_logger():
    yield
    logger = logging.getLogger("meshstage")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


def test_parse_translation():
    assert parse_translation("Barrel=1,2,-3") == ("Barrel", Vec3(1.0, 2.0, -3.0))
    with pytest.raises(argparse.ArgumentTypeError):
        parse_translation("Barrel=1,2")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_translation("1,2,3")


def test_main_writes_buffers(tmp_path):
    obj = tmp_path / "two.obj"
    obj.write_text(TWO_OBJECTS_OBJ, encoding="utf-8")
    out = tmp_path / "stage.h5"

    code = main([str(obj), "--setpiece", "A", "--setpiece", "B", "--buffers-out", str(out)])

    assert code == 0
    with h5py.File(out, "r") as f:
        assert f["indices"][:].tolist() == [0, 1, 2, 3, 4, 5, 3, 5, 6]


def test_main_applies_translation(tmp_path):
    obj = tmp_path / "two.obj"
    obj.write_text(TWO_OBJECTS_OBJ, encoding="utf-8")
    out = tmp_path / "stage.h5"

    code = main([str(obj), "--setpiece", "A", "--translate", "A=0,0,5", "--buffers-out", str(out)])

    assert code == 0
    with h5py.File(out, "r") as f:
        vertices = f["vertices"][:].reshape(-1, 8)
    assert vertices[:, 2].tolist() == [5, 5, 5]


def test_main_reports_missing_model(tmp_path):
    obj = tmp_path / "two.obj"
    obj.write_text(TWO_OBJECTS_OBJ, encoding="utf-8")
    assert main([str(obj), "--setpiece", "Missing"]) == 1


def test_main_reports_parse_error(tmp_path):
    obj = tmp_path / "bad.obj"
    obj.write_text("v 0 0 zero\n", encoding="utf-8")
    assert main([str(obj)]) == 1


def test_main_reports_undecodable_file(tmp_path):
    obj = tmp_path / "latin1.obj"
    obj.write_bytes(b"o Caf\xe9\n")
    assert main([str(obj)]) == 1
