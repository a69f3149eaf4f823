"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths and magic numbers (default model,
   vertex layout) scattered throughout the code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find bundled assets (the default models) when the app is frozen.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    MODELS_PATH (str): Absolute path to the bundled OBJ models.
    VERTEX_LAYOUT (dict): Interleaved vertex buffer layout for GPU upload.
"""
import sys
import os
from pathlib import Path
from typing import Dict, Tuple


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/meshstage/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
MODELS_PATH: str = os.path.join(ASSETS_PATH, "models")

# Model every new actor (and the stage camera) refers to unless told otherwise
DEFAULT_MODEL_NAME: str = "Cube"
CAMERA_ACTOR_NAME: str = "camera"

# Substituted for face vertices that omit the texcoord / normal reference
DEFAULT_TEX_COORD: Tuple[float, float] = (0.0, 0.0)
DEFAULT_NORMAL: Tuple[float, float, float] = (0.0, 1.0, 0.0)

# Interleaved vertex record: position (3) + texcoord (2) + normal (3)
POSITION_COMPONENTS = 3
TEX_COORD_COMPONENTS = 2
NORMAL_COMPONENTS = 3
VERTEX_COMPONENTS = POSITION_COMPONENTS + TEX_COORD_COMPONENTS + NORMAL_COMPONENTS

FLOAT_BYTES = 4  # float32 buffers
VERTEX_STRIDE_BYTES = VERTEX_COMPONENTS * FLOAT_BYTES

# attribute name -> (component count, byte offset inside one vertex record)
VERTEX_LAYOUT: Dict[str, Tuple[int, int]] = {
    "position": (POSITION_COMPONENTS, 0),
    "tex_coord": (TEX_COORD_COMPONENTS, POSITION_COMPONENTS * FLOAT_BYTES),
    "normal": (NORMAL_COMPONENTS, (POSITION_COMPONENTS + TEX_COORD_COMPONENTS) * FLOAT_BYTES),
}
