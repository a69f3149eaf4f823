"""
OBJ Parser
==========
Line-oriented reader for Wavefront OBJ text.

Why is this file needed?
------------------------
1. Pools: 'v', 'vt' and 'vn' lines fill file-wide attribute pools that face
   lines refer to by 1-based index.
2. Welding: every face corner is routed through an AttributeDeduplicator
   owned by the current model, so each model gets compact indices from 0.
3. Splitting: every 'o <name>' line starts a new MeshModel.

Recoverable problems (unknown tokens, faces that are not triangles) are
collected as ParseWarning records and logged; the line is skipped.
Malformed numbers and bad index references raise ObjParseError.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import List, Optional, Sequence

from meshstage.controller.welding import AttributeDeduplicator, FaceVertex
from meshstage.model.geometry_primitives import Vec2, Vec3
from meshstage.model.mesh import MeshModel

logger = logging.getLogger(__name__)

LOG_PREFIX = "[.obj parse]"
FACE_VERTEX_COUNT = 3
UTF8_BOM = "\ufeff"


@dataclass(frozen=True)
class ParseWarning:
    """A skipped line, with enough context to find it in the source file."""
    filename: str
    line_number: int
    message: str
    token: Optional[str] = None

    def __str__(self) -> str:
        return f"{LOG_PREFIX} {self.filename}:{self.line_number}: {self.message}"


class ObjParseError(ValueError):
    """Unrecoverable problem in an OBJ file; parsing of the file is aborted."""
    def __init__(self, filename: str, line_number: int, message: str) -> None:
        super().__init__(f"{filename}:{line_number}: {message}")
        self.filename = filename
        self.line_number = line_number


@dataclass
class _ModelBuilder:
    """Per-model accumulator: name, welded attributes and triangle indices."""
    name: str
    welder: AttributeDeduplicator
    indices: List[int] = field(default_factory=list)

    @property
    def has_content(self) -> bool:
        return bool(self.name) or bool(self.indices)

    def build(self) -> MeshModel:
        return MeshModel(
            name=self.name,
            positions=self.welder.positions,
            tex_coords=self.welder.tex_coords,
            normals=self.welder.normals,
            indices=self.indices,
        )


class ObjParser:
    def __init__(self, filename: str = "<string>") -> None:
        self.filename = filename
        self.warnings: List[ParseWarning] = []

        self._positions: List[Vec3] = []
        self._tex_coords: List[Vec2] = []
        self._normals: List[Vec3] = []
        self._current: _ModelBuilder = self._new_builder("")
        self._models: List[MeshModel] = []

    def parse(self, raw: str) -> List[MeshModel]:
        """
        Parses the full text of one OBJ file.

        Each call starts from empty pools, so the result depends only on `raw`.

        Returns:
            The finalized models, in file order.

        Raises:
            ObjParseError: On malformed coordinates or face references.
        """
        self._reset()

        # Exporters on Windows often prefix the text with a UTF-8 byte-order mark
        if raw.startswith(UTF8_BOM):
            raw = raw[len(UTF8_BOM):]

        for line_number, line in enumerate(raw.splitlines(), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            tokens = stripped.split()
            keyword, args = tokens[0], tokens[1:]

            if keyword == "o":
                self._finalize_current()
                self._current = self._new_builder(" ".join(args).strip())
            elif keyword == "v":
                self._positions.append(Vec3(*self._parse_floats(args, 3, 3, line_number, keyword)))
            elif keyword == "vn":
                self._normals.append(Vec3(*self._parse_floats(args, 3, 3, line_number, keyword)))
            elif keyword == "vt":
                u, v = self._parse_floats(args, 1, 2, line_number, keyword)
                self._tex_coords.append(Vec2(u, v))
            elif keyword == "f":
                self._parse_face(args, line_number, stripped)
            else:
                self._warn(line_number, f"unknown element token '{keyword}'", token=keyword)

        self._finalize_current()
        models = self._models
        logger.debug(
            f"{LOG_PREFIX} {self.filename}: {len(models)} model(s), "
            f"{len(self.warnings)} warning(s)."
        )
        return models

    # --- State ---

    def _reset(self) -> None:
        self.warnings = []
        self._positions = []
        self._tex_coords = []
        self._normals = []
        self._models = []
        self._current = self._new_builder("")

    def _new_builder(self, name: str) -> _ModelBuilder:
        # Fresh welder per model keeps index spaces isolated
        welder = AttributeDeduplicator(self._positions, self._tex_coords, self._normals)
        return _ModelBuilder(name=name, welder=welder)

    def _finalize_current(self) -> None:
        if self._current.has_content:
            self._models.append(self._current.build())

    def _warn(self, line_number: int, message: str, token: Optional[str] = None) -> None:
        warning = ParseWarning(self.filename, line_number, message, token)
        self.warnings.append(warning)
        logger.warning(str(warning))

    # --- Line handlers ---

    def _parse_floats(
        self,
        args: Sequence[str],
        required: int,
        count: int,
        line_number: int,
        keyword: str,
    ) -> List[float]:
        """Reads `count` floats, of which the first `required` must be present; missing ones are 0.0."""
        if len(args) < required:
            raise ObjParseError(
                self.filename, line_number,
                f"'{keyword}' expects at least {required} values, got {len(args)}",
            )
        values = []
        for text in args[:count]:
            try:
                values.append(float(text))
            except ValueError:
                raise ObjParseError(
                    self.filename, line_number, f"invalid number '{text}' in '{keyword}' element",
                ) from None
        values.extend([0.0] * (count - len(values)))
        return values

    def _parse_face(self, args: Sequence[str], line_number: int, text: str) -> None:
        if len(args) != FACE_VERTEX_COUNT:
            self._warn(line_number, f"can't load non-triangular faces ({text})", token="f")
            return

        # Resolve every corner first so a bad reference never leaves a partial triangle
        refs = [self._parse_face_vertex(token, line_number) for token in args]

        builder = self._current
        for ref in refs:
            builder.indices.append(builder.welder.add(ref))

    def _parse_face_vertex(self, token: str, line_number: int) -> FaceVertex:
        parts = token.split("/")
        if len(parts) > 3:
            raise ObjParseError(self.filename, line_number, f"malformed face vertex '{token}'")
        parts += [""] * (3 - len(parts))

        position = self._resolve_index(parts[0], self._positions, "position", token, line_number)
        if position is None:
            raise ObjParseError(self.filename, line_number, f"face vertex '{token}' has no position index")
        tex_coord = self._resolve_index(parts[1], self._tex_coords, "texture coordinate", token, line_number)
        normal = self._resolve_index(parts[2], self._normals, "normal", token, line_number)
        return FaceVertex(position, tex_coord, normal)

    def _resolve_index(
        self,
        text: str,
        pool: Sequence,
        label: str,
        token: str,
        line_number: int,
    ) -> Optional[int]:
        """Converts a 1-based (or negative, relative) OBJ index to a 0-based pool index."""
        if text == "":
            return None
        try:
            value = int(text)
        except ValueError:
            raise ObjParseError(
                self.filename, line_number, f"invalid {label} index '{text}' in face vertex '{token}'",
            ) from None

        if value > 0:
            index = value - 1
        elif value < 0:
            index = len(pool) + value
        else:
            raise ObjParseError(self.filename, line_number, f"{label} index 0 is not valid in face vertex '{token}'")

        if not 0 <= index < len(pool):
            raise ObjParseError(
                self.filename, line_number,
                f"{label} index {value} out of range ({len(pool)} defined) in face vertex '{token}'",
            )
        return index


def load_obj(filename: str, raw: str) -> List[MeshModel]:
    """Parses `raw` (the text of `filename`) into MeshModels."""
    return ObjParser(filename).parse(raw)
