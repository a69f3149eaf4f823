"""
Geometric Primitives for mesh data and actor transforms.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterator, Optional, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vec2:
    """A 2D vector, used for texture coordinates."""
    x: float = 0.0
    y: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y], dtype=np.float64)


@dataclass(frozen=True)
class Vec3:
    """
    A vector in 3D space representing a position, direction or scale.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vec3:
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __truediv__(self, scalar: float) -> Vec3:
        if scalar == 0.0: raise ZeroDivisionError
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vec3:
        return Vec3(-self.x, -self.y, -self.z)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def normalize(self) -> Vec3:
        mag = self.magnitude
        if mag == 0.0: return Vec3(0.0, 0.0, 0.0)
        return self / mag

    def dot(self, other: Vec3) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vec3) -> Vec3:
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


@dataclass(frozen=True)
class Quaternion:
    """
    Unit quaternion (x, y, z, w) describing a rotation. Defaults to identity.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z
        yield self.w

    @classmethod
    def identity(cls) -> Quaternion:
        return cls()

    @classmethod
    def from_axis_angle(cls, axis: Vec3, angle_rad: float) -> Quaternion:
        """Rotation of `angle_rad` radians around `axis` (need not be normalized)."""
        unit = axis.normalize()
        if unit.magnitude == 0.0:
            raise ValueError("Rotation axis must be non-zero.")
        half = angle_rad * 0.5
        s = math.sin(half)
        return cls(unit.x * s, unit.y * s, unit.z * s, math.cos(half))

    def __mul__(self, other: Quaternion) -> Quaternion:
        return self.multiply(other)

    def multiply(self, other: Quaternion) -> Quaternion:
        """Hamilton product `self * other` (apply `other` first, then `self`)."""
        ax, ay, az, aw = self
        bx, by, bz, bw = other
        return Quaternion(
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
            aw * bw - ax * bx - ay * by - az * bz,
        )

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2 + self.w**2)

    def normalize(self) -> Quaternion:
        mag = self.magnitude
        if mag == 0.0: return Quaternion()
        return Quaternion(self.x / mag, self.y / mag, self.z / mag, self.w / mag)

    # Local-axis rotations, i.e. `self * rotation_about_axis(angle)`
    def rotate_x(self, angle_rad: float) -> Quaternion:
        return self.multiply(Quaternion.from_axis_angle(Vec3(1.0, 0.0, 0.0), angle_rad))

    def rotate_y(self, angle_rad: float) -> Quaternion:
        return self.multiply(Quaternion.from_axis_angle(Vec3(0.0, 1.0, 0.0), angle_rad))

    def rotate_z(self, angle_rad: float) -> Quaternion:
        return self.multiply(Quaternion.from_axis_angle(Vec3(0.0, 0.0, 1.0), angle_rad))

    def to_matrix(self) -> npt.NDArray[np.float64]:
        """3x3 rotation matrix (column-vector convention)."""
        x, y, z, w = self
        xx, yy, zz = x * x, y * y, z * z
        xy, xz, yz = x * y, x * z, y * z
        wx, wy, wz = w * x, w * y, w * z
        return np.array([
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ], dtype=np.float64)


def _frozen_matrix(values: Optional[npt.ArrayLike]) -> npt.NDArray[np.float64]:
    if values is None:
        matrix = np.eye(4, dtype=np.float64)
    else:
        matrix = np.array(values, dtype=np.float64)
    if matrix.shape != (4, 4):
        raise ValueError(f"Expected shape (4, 4), got {matrix.shape}.")
    matrix.flags.writeable = False
    return matrix


@dataclass(frozen=True, eq=False)
class Mat4:
    """
    4x4 affine matrix acting on column vectors: p' = M @ [x, y, z, 1].

    The wrapped array is read-only; every operation returns a new Mat4.
    """
    values: npt.NDArray[np.float64] = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", _frozen_matrix(self.values))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mat4):
            return NotImplemented
        return bool(np.array_equal(self.values, other.values))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.values.tolist()})"

    def __matmul__(self, other: Mat4) -> Mat4:
        return Mat4(self.values @ other.values)

    @classmethod
    def identity(cls) -> Mat4:
        return cls()

    @classmethod
    def from_translation(cls, translation: Vec3) -> Mat4:
        matrix = np.eye(4)
        matrix[:3, 3] = translation.to_array()
        return cls(matrix)

    @classmethod
    def from_rotation(cls, rotation: Quaternion) -> Mat4:
        matrix = np.eye(4)
        matrix[:3, :3] = rotation.to_matrix()
        return cls(matrix)

    @classmethod
    def from_scale(cls, scale: Vec3) -> Mat4:
        return cls(np.diag([scale.x, scale.y, scale.z, 1.0]))

    @classmethod
    def from_rotation_translation_scale(cls, rotation: Quaternion, translation: Vec3, scale: Vec3) -> Mat4:
        """Composed model matrix: Translation * Rotation * Scale."""
        return cls.from_translation(translation) @ cls.from_rotation(rotation) @ cls.from_scale(scale)

    @property
    def is_identity(self) -> bool:
        return bool(np.array_equal(self.values, np.eye(4)))

    def transform_point(self, point: Vec3) -> Vec3:
        """Transforms a position, dividing by the homogeneous w when it is non-zero."""
        x, y, z, w = self.values @ np.array([point.x, point.y, point.z, 1.0])
        if w == 0.0:
            w = 1.0
        return Vec3(float(x / w), float(y / w), float(z / w))

    def transform_points(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Vectorised `transform_point` for an (N, 3) array."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))])
        transformed = homogeneous @ self.values.T
        w = transformed[:, 3:4]
        w = np.where(w == 0.0, 1.0, w)
        return transformed[:, :3] / w

    def to_array(self) -> npt.NDArray[np.float64]:
        return self.values.copy()
