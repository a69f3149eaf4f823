"""
Input/Output Manager
Loads OBJ files into a ModelRegistry, caches parsed registries in HDF5 (.h5)
files and exports merged stage buffers for external GPU upload code.
"""
from __future__ import annotations

import logging
import os
from importlib.metadata import version, PackageNotFoundError
from typing import List, Optional, TYPE_CHECKING

import h5py
import numpy as np

from meshstage.config import VERTEX_COMPONENTS, VERTEX_LAYOUT, VERTEX_STRIDE_BYTES
from meshstage.controller.obj_parser import ObjParseError, ObjParser
from meshstage.model.mesh import MeshModel
from meshstage.model.registry import ModelRegistry

if TYPE_CHECKING:
    from meshstage.model.stage import Stage

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("meshstage")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

MODELS_GROUP = "models"
ATTRIBUTE_DATASETS = ("positions", "tex_coords", "normals", "indices")


def _compression(data: np.ndarray) -> Optional[str]:
    # Chunked (compressed) datasets cannot be empty
    return "gzip" if data.size else None


class IOManager:

    # ---- OBJ LOADING ----

    @staticmethod
    def load_obj_file(filepath: str, registry: Optional[ModelRegistry] = None) -> List[MeshModel]:
        """
        Parses an OBJ file from disk and registers every model it defines.

        Raises:
            FileNotFoundError: If `filepath` does not exist.
            ObjParseError: If the file contains malformed numbers or references,
                or is not UTF-8 text.
        """
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"OBJ file not found: {filepath}")

        logger.info(f"Loading OBJ file: {filepath}")
        try:
            with open(filepath, "r", encoding="utf-8-sig") as f:
                raw = f.read()
        except UnicodeDecodeError as e:
            raise ObjParseError(os.path.basename(filepath), 0, f"file is not valid UTF-8 text ({e.reason})") from e

        parser = ObjParser(filename=os.path.basename(filepath))
        models = parser.parse(raw)

        if registry is not None:
            registry.register_all(models)
        logger.info(
            f"Loaded {len(models)} model(s) from {filepath}"
            + (f" with {len(parser.warnings)} warning(s)." if parser.warnings else ".")
        )
        return models

    @staticmethod
    def load_obj_directory(directory: str, registry: Optional[ModelRegistry] = None) -> List[MeshModel]:
        """Loads every '*.obj' file of `directory`, in file name order."""
        if not os.path.isdir(directory):
            raise FileNotFoundError(f"Model directory not found: {directory}")

        models: List[MeshModel] = []
        for filename in sorted(os.listdir(directory)):
            if filename.lower().endswith(".obj"):
                models.extend(IOManager.load_obj_file(os.path.join(directory, filename), registry))
        if not models:
            logger.warning(f"No OBJ models found in {directory}")
        return models

    # ---- REGISTRY CACHE (HDF5) ----

    @staticmethod
    def save_registry(registry: ModelRegistry, filepath: str) -> None:
        logger.info(f"Saving {len(registry)} model(s) to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                grp_models = f.create_group(MODELS_GROUP)

                # Model names may contain '/', so groups are numbered and the name is an attribute
                for i, model in enumerate(registry):
                    grp = grp_models.create_group(f"{i:05d}")
                    grp.attrs["name"] = model.name
                    grp.create_dataset("positions", data=model.positions)
                    grp.create_dataset("tex_coords", data=model.tex_coords)
                    grp.create_dataset("normals", data=model.normals)
                    grp.create_dataset("indices", data=model.indices)
                    logger.debug(f"Saved model '{model.name}' ({model.vertex_count} vertices).")

            logger.info(f"Registry saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save registry: {e}")
            raise e

    @staticmethod
    def load_registry(filepath: str, registry: Optional[ModelRegistry] = None) -> ModelRegistry:
        """Reads models written by `save_registry`, adding them to `registry` (or a new one)."""
        logger.info(f"Loading registry from: {filepath}")
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Registry file not found: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ValueError(msg)

        registry = registry if registry is not None else ModelRegistry()
        with h5py.File(filepath, "r") as f:
            saved_version = f.attrs.get("version", "unknown")
            if isinstance(saved_version, bytes):
                saved_version = saved_version.decode("utf-8")
            logger.debug(f"Registry file version: {saved_version}")

            if MODELS_GROUP not in f:
                logger.warning(f"No models stored in {filepath}")
                return registry

            grp_models = f[MODELS_GROUP]
            for key in sorted(grp_models.keys()):
                grp = grp_models[key]
                missing = [name for name in ATTRIBUTE_DATASETS if name not in grp]
                if missing:
                    raise ValueError(f"Model group '{key}' in '{filepath}' is missing datasets {missing}.")

                name = grp.attrs.get("name", "")
                if isinstance(name, bytes):
                    name = name.decode("utf-8")
                registry.register(MeshModel(
                    name=str(name),
                    positions=grp["positions"][:],
                    tex_coords=grp["tex_coords"][:],
                    normals=grp["normals"][:],
                    indices=grp["indices"][:],
                ))

        logger.info(f"Registry loaded from: {filepath} ({len(registry)} model(s))")
        return registry

    # ---- EXPORT HELPERS ----

    @staticmethod
    def export_stage_buffers(stage: Stage, filepath: str) -> None:
        """
        Writes the merged setpiece buffers of `stage` with their layout description.
        """
        buffers = stage.build_buffers()
        logger.info(
            f"Exporting stage '{stage.name}' buffers "
            f"({buffers.vertex_count} vertices, {buffers.index_count} indices) to: {filepath}"
        )
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["stage_name"] = stage.name
                f.attrs["vertex_components"] = VERTEX_COMPONENTS
                f.attrs["vertex_stride_bytes"] = VERTEX_STRIDE_BYTES

                dset_vertices = f.create_dataset("vertices", data=buffers.vertices, compression=_compression(buffers.vertices))
                for attribute, (components, offset) in VERTEX_LAYOUT.items():
                    dset_vertices.attrs[attribute] = np.array([components, offset], dtype=np.int64)
                f.create_dataset("indices", data=buffers.indices, compression=_compression(buffers.indices))

            logger.info(f"Stage buffers exported to: {filepath}")

        except Exception as e:
            logger.exception("Failed to export stage buffers")
            raise e
