"""
meshstage
=========
OBJ mesh ingestion with vertex welding, and stage composition that merges
several mesh instances into one draw-ready vertex/index buffer pair.
"""
from meshstage.controller.obj_parser import ObjParser, ObjParseError, ParseWarning, load_obj
from meshstage.model.mesh import MeshModel, VertexStream
from meshstage.model.registry import ModelRegistry, ModelNotFoundError
from meshstage.model.stage import Stage, StageActor, StageBuffers
from meshstage.model.transform import Transform

__all__ = [
    "ObjParser",
    "ObjParseError",
    "ParseWarning",
    "load_obj",
    "MeshModel",
    "VertexStream",
    "ModelRegistry",
    "ModelNotFoundError",
    "Stage",
    "StageActor",
    "StageBuffers",
    "Transform",
]
