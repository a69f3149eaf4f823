"""
Application Initialization
==========================
Command line entry point: loads OBJ models, composes a stage and writes the
merged buffers.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Sets up logging.
2. Instantiates the ModelRegistry and fills it from OBJ files.
3. Builds the Stage from the requested setpieces and passes it the registry.
4. Hands the results to the IOManager for export.
"""
from __future__ import annotations

import argparse
import logging
import os
from typing import Dict, List, Optional, Sequence

from meshstage.config import MODELS_PATH
from meshstage.controller.obj_parser import ObjParseError
from meshstage.logging_config import setup_logging
from meshstage.model.geometry_primitives import Vec3
from meshstage.model.io import IOManager
from meshstage.model.registry import ModelNotFoundError, ModelRegistry
from meshstage.model.stage import Stage, StageActor

logger = logging.getLogger(__name__)


def parse_translation(text: str) -> tuple[str, Vec3]:
    """Parses 'MODEL=x,y,z' into the model name and offset."""
    name, sep, coords = text.rpartition("=")
    parts = coords.split(",")
    if not sep or not name or len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected MODEL=x,y,z, got '{text}'")
    try:
        x, y, z = (float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid coordinates in '{text}'") from None
    return name, Vec3(x, y, z)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="meshstage",
        description="Load OBJ models and merge them into one stage vertex/index buffer.",
    )
    parser.add_argument(
        "inputs", nargs="*", default=[MODELS_PATH],
        help="OBJ files or directories of OBJ files (default: bundled models)",
    )
    parser.add_argument(
        "--setpiece", action="append", default=[], metavar="MODEL",
        help="Model to merge into the stage buffer; repeat to add more, in merge order",
    )
    parser.add_argument(
        "--translate", action="append", default=[], type=parse_translation, metavar="MODEL=x,y,z",
        help="Place every setpiece of MODEL at the given offset",
    )
    parser.add_argument("--stage-name", default="Main")
    parser.add_argument("--registry-out", help="Write the parsed models to this HDF5 file")
    parser.add_argument("--buffers-out", help="Write the merged stage buffers to this HDF5 file")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_models(inputs: Sequence[str], registry: ModelRegistry) -> None:
    for path in inputs:
        if os.path.isdir(path):
            IOManager.load_obj_directory(path, registry)
        else:
            IOManager.load_obj_file(path, registry)


def build_stage(
    name: str,
    registry: ModelRegistry,
    setpiece_models: Sequence[str],
    translations: Dict[str, Vec3],
) -> Stage:
    setpieces: List[StageActor] = []
    for i, model_name in enumerate(setpiece_models):
        actor = StageActor(name=f"{model_name}#{i}", model_name=model_name)
        if model_name in translations:
            actor.transform.translation = translations[model_name]
        setpieces.append(actor)

    stage = Stage(name, registry, setpieces=setpieces)
    stage.recompute_transforms()
    return stage


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    registry = ModelRegistry()
    try:
        load_models(args.inputs, registry)
    except (FileNotFoundError, ObjParseError) as e:
        logger.error(f"Failed to load models: {e}")
        return 1

    for model in registry:
        logger.info(f"  {model.name or '<unnamed>'}: {model.vertex_count} vertices, {model.triangle_count} triangles")

    if args.registry_out:
        IOManager.save_registry(registry, args.registry_out)

    # Default to merging everything that was loaded
    setpiece_models = args.setpiece or registry.names()
    stage = build_stage(args.stage_name, registry, setpiece_models, dict(args.translate))

    try:
        buffers = stage.build_buffers()
    except ModelNotFoundError as e:
        logger.error(f"Cannot build stage '{stage.name}': {e}")
        return 1

    logger.info(
        f"Stage '{stage.name}': {len(stage.setpieces)} setpiece(s), "
        f"{buffers.vertex_count} vertices, {buffers.index_count} indices."
    )

    if args.buffers_out:
        IOManager.export_stage_buffers(stage, args.buffers_out)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
