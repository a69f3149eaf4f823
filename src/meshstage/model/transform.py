from __future__ import annotations

from dataclasses import dataclass, field

from meshstage.model.geometry_primitives import Mat4, Quaternion, Vec3


@dataclass
class Transform:
    """
    Position, rotation and scale of an actor in a stage.

    `model_matrix` is derived state: it is identity until the first call to
    `recompute()` and is NOT refreshed when the components change. Call
    `recompute()` after mutating translation, rotation or scale.
    """
    translation: Vec3 = field(default_factory=Vec3)
    rotation: Quaternion = field(default_factory=Quaternion)
    scale: Vec3 = field(default_factory=lambda: Vec3(1.0, 1.0, 1.0))
    model_matrix: Mat4 = field(default_factory=Mat4.identity)

    def recompute(self) -> Mat4:
        """Builds a fresh Translation * Rotation * Scale matrix and stores it on `model_matrix`."""
        self.model_matrix = Mat4.from_rotation_translation_scale(self.rotation, self.translation, self.scale)
        return self.model_matrix

    # --- Translation ---

    @property
    def pos_x(self) -> float:
        return self.translation.x

    @pos_x.setter
    def pos_x(self, value: float) -> None:
        self.translation = Vec3(value, self.translation.y, self.translation.z)

    @property
    def pos_y(self) -> float:
        return self.translation.y

    @pos_y.setter
    def pos_y(self, value: float) -> None:
        self.translation = Vec3(self.translation.x, value, self.translation.z)

    @property
    def pos_z(self) -> float:
        return self.translation.z

    @pos_z.setter
    def pos_z(self, value: float) -> None:
        self.translation = Vec3(self.translation.x, self.translation.y, value)

    def translate(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> None:
        self.translation = self.translation + Vec3(dx, dy, dz)

    # --- Rotation ---

    def rotate_x(self, angle_rad: float) -> None:
        """Adds a rotation about the local X axis to the current rotation."""
        self.rotation = self.rotation.rotate_x(angle_rad)

    def rotate_y(self, angle_rad: float) -> None:
        self.rotation = self.rotation.rotate_y(angle_rad)

    def rotate_z(self, angle_rad: float) -> None:
        self.rotation = self.rotation.rotate_z(angle_rad)

    def set_rotation_x(self, angle_rad: float) -> None:
        """Replaces the rotation with `angle_rad` about X alone."""
        self.rotation = Quaternion.identity().rotate_x(angle_rad)

    def set_rotation_y(self, angle_rad: float) -> None:
        self.rotation = Quaternion.identity().rotate_y(angle_rad)

    def set_rotation_z(self, angle_rad: float) -> None:
        self.rotation = Quaternion.identity().rotate_z(angle_rad)

    # --- Scale ---

    @property
    def scale_x(self) -> float:
        return self.scale.x

    @scale_x.setter
    def scale_x(self, value: float) -> None:
        self.scale = Vec3(value, self.scale.y, self.scale.z)

    @property
    def scale_y(self) -> float:
        return self.scale.y

    @scale_y.setter
    def scale_y(self, value: float) -> None:
        self.scale = Vec3(self.scale.x, value, self.scale.z)

    @property
    def scale_z(self) -> float:
        return self.scale.z

    @scale_z.setter
    def scale_z(self, value: float) -> None:
        self.scale = Vec3(self.scale.x, self.scale.y, value)
