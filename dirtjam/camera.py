"""Free-flying 3D camera with keyboard and mouse controls."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np


def _vec(value) -> np.ndarray:
    return np.asarray(value, dtype=np.float64).reshape(3).copy()


def _normalize(vector: np.ndarray) -> np.ndarray:
    with np.errstate(invalid="ignore", divide="ignore"):
        return vector / np.linalg.norm(vector)


def rotate_vector(vector, axis, angle: float) -> np.ndarray:
    """Rotate ``vector`` by ``angle`` radians around ``axis`` (right-handed)."""
    v = _vec(vector)
    k = _normalize(_vec(axis))
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    return v * cos_a + np.cross(k, v) * sin_a + k * np.dot(k, v) * (1.0 - cos_a)


@dataclass
class Camera:
    """A perspective camera described by its position, target and up vector."""

    position: np.ndarray = field(default_factory=lambda: np.array([0.0, -10.0, 0.0]))
    target: np.ndarray = field(default_factory=lambda: np.zeros(3))
    up: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    fovy: float = math.radians(45.0)
    z_near: float = 0.01
    z_far: float = 10000.0

    def __post_init__(self) -> None:
        self.position = _vec(self.position)
        self.target = _vec(self.target)
        self.up = _vec(self.up)

    def forward(self) -> np.ndarray:
        """Unit vector from the position towards the target."""
        return _normalize(self.target - self.position)

    def upward(self) -> np.ndarray:
        """Unit up vector."""
        return _normalize(self.up)

    def right(self) -> np.ndarray:
        """Unit vector pointing to the camera's right."""
        return _normalize(np.cross(self.forward(), self.upward()))

    def _translate(self, offset: np.ndarray) -> None:
        self.position = self.position + offset
        self.target = self.target + offset

    def move_forward(self, distance: float, in_world_plane: bool) -> None:
        """Move along the view direction, optionally kept in the horizontal plane."""
        direction = self.forward()
        if in_world_plane:
            direction[1] = 0.0
            direction = _normalize(direction)
        self._translate(distance * direction)

    def move_up(self, distance: float) -> None:
        """Move along the up vector."""
        self._translate(distance * self.upward())

    def move_right(self, distance: float, in_world_plane: bool) -> None:
        """Move sideways, optionally kept in the horizontal plane."""
        direction = self.right()
        if in_world_plane:
            direction[1] = 0.0
            direction = _normalize(direction)
        self._translate(distance * direction)

    def move_to_target(self, delta: float) -> None:
        """Change the distance to the target by ``delta``, never below 0.001."""
        distance = float(np.linalg.norm(self.target - self.position)) + delta
        distance = max(distance, 0.001)
        self.position = self.target - distance * self.forward()

    def yaw(self, angle: float, around_target: bool) -> None:
        """Turn around the up vector."""
        view = rotate_vector(self.target - self.position, self.upward(), angle)
        if around_target:
            self.position = self.target - view
        else:
            self.target = self.position + view

    def pitch(self, angle: float, around_target: bool, lock_view: bool, rotate_up: bool) -> None:
        """Tilt around the right vector, optionally clamped short of the up axis."""
        if around_target:
            raise ValueError("pitching around the target is not supported")
        up = self.upward()
        view = self.target - self.position
        if lock_view:
            scale = np.linalg.norm(self.up) * np.linalg.norm(view)
            with np.errstate(invalid="ignore"):
                max_up = float(np.arccos(np.dot(up, view) / scale)) - 0.001
                max_down = -float(np.arccos(np.dot(-self.up, view) / scale)) + 0.001
            if angle > max_up:
                angle = max_up
            if angle < max_down:
                angle = max_down
        view = rotate_vector(view, self.right(), angle)
        self.target = self.position + view
        if rotate_up:
            self.up = rotate_vector(self.up, self.right(), angle)

    def roll(self, angle: float) -> None:
        """Rotate the up vector around the view direction."""
        self.up = rotate_vector(self.up, self.forward(), angle)

    def view_projection(self, aspect: float) -> np.ndarray:
        """Row-major 4x4 matrix mapping world space to OpenGL clip space."""
        f = _normalize(self.target - self.position)
        s = _normalize(np.cross(f, self.up))
        u = np.cross(s, f)
        eye = self.position
        view = np.array(
            [
                [s[0], s[1], s[2], -np.dot(s, eye)],
                [u[0], u[1], u[2], -np.dot(u, eye)],
                [-f[0], -f[1], -f[2], np.dot(f, eye)],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )
        focal = 1.0 / math.tan(0.5 * self.fovy)
        inv_depth = 1.0 / (self.z_near - self.z_far)
        projection = np.array(
            [
                [focal / aspect, 0.0, 0.0, 0.0],
                [0.0, focal, 0.0, 0.0],
                [0.0, 0.0, (self.z_near + self.z_far) * inv_depth,
                 2.0 * self.z_near * self.z_far * inv_depth],
                [0.0, 0.0, -1.0, 0.0],
            ]
        )
        return projection @ view


@dataclass(frozen=True)
class InputState:
    """Input gathered for one frame.

    Key names: up, down, left, right, q, e, w, a, s, d, space,
    left_control, kp_add, kp_subtract.
    """

    dt: float = 0.0
    keys_down: frozenset = frozenset()
    keys_pressed: frozenset = frozenset()
    mouse_left_down: bool = False
    mouse_delta: tuple = (0.0, 0.0)
    mouse_wheel: float = 0.0
    screen_width: float = 1.0


def update_camera(camera: Camera, state: InputState) -> None:
    """Apply one frame of keyboard and mouse control to ``camera``."""
    lock_view = True
    around_target = False
    rotate_up = True
    in_world_plane = False
    speed = state.dt
    down = state.keys_down

    if "down" in down:
        camera.pitch(-speed, around_target, lock_view, rotate_up)
    if "up" in down:
        camera.pitch(speed, around_target, lock_view, rotate_up)
    if "right" in down:
        camera.yaw(-speed, around_target)
    if "left" in down:
        camera.yaw(speed, around_target)
    if "q" in down:
        camera.roll(-speed)
    if "e" in down:
        camera.roll(speed)

    dx, dy = (component / state.screen_width * 700.0 for component in state.mouse_delta)
    if state.mouse_left_down:
        if dx > 0.0:
            camera.move_right(speed, in_world_plane)
        if dx < 0.0:
            camera.move_right(-speed, in_world_plane)
        if dy > 0.0:
            camera.move_up(-speed)
        if dy < 0.0:
            camera.move_up(speed)
    else:
        camera.yaw(-dx, around_target)
        camera.pitch(-dy, around_target, lock_view, rotate_up)

    if "w" in down:
        camera.move_forward(speed, in_world_plane)
    if "a" in down:
        camera.move_right(-speed, in_world_plane)
    if "s" in down:
        camera.move_forward(-speed, in_world_plane)
    if "d" in down:
        camera.move_right(speed, in_world_plane)
    if "space" in down:
        camera.move_up(speed)
    if "left_control" in down:
        camera.move_up(-speed)

    camera.move_to_target(-state.mouse_wheel)

    if "kp_subtract" in state.keys_pressed:
        camera.move_to_target(2.0)
    if "kp_add" in state.keys_pressed:
        camera.move_to_target(-2.0)