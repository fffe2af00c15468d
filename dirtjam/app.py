"""The Dirt Jam viewer: a window flying over endless noise terrain."""

from __future__ import annotations

import argparse
import math
import random

import numpy as np

from .camera import Camera, InputState, rotate_vector, update_camera
from .heightmap import ChunkField
from .noise import simplex_fbm

_LIGHT_SPEED = 0.3
_GRID_SLICES = 20
_GRID_SPACING = 0.1
_GRID_AXES_COLOR = (0.0, 0.0, 0.0, 1.0)
_GRID_OTHER_COLOR = (130 / 255, 130 / 255, 130 / 255, 1.0)


def advance_light(light_dir, direction: float, dt: float) -> tuple[np.ndarray, float]:
    """Swing the light around the z axis, reversing once it dips below y = 0.

    Returns the new light direction and the new swing direction.
    """
    light = np.asarray(light_dir, dtype=np.float64)
    if light[1] < 0.0:
        direction = -direction
    light = rotate_vector(light, (0.0, 0.0, 1.0), _LIGHT_SPEED * direction * dt)
    return light, direction


class DirtJamWindow:
    """Scene state of the viewer, and the window loop that drives it."""

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = random.getrandbits(32)
        self.camera = Camera(position=(3.0, 0.8, 0.0), target=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0))
        self.field = ChunkField(simplex_fbm(seed, 5, 0.013, 2.0, 0.5), (50, 50), 45.0)
        light = np.array([10.0, 2.0, 0.0])
        self.light_dir = light / np.linalg.norm(light)
        self.light_direction = 1.0
        self.fly_forward = True
        self.wireframe = False

    def frame(self, state: InputState) -> bool:
        """Advance the scene by one frame of input. Returns True to quit."""
        if self.fly_forward:
            self.camera.move_forward(state.dt, True)
        update_camera(self.camera, state)
        down = state.keys_down
        if "escape" in down:
            return True
        if "t" in state.keys_pressed:
            self.fly_forward = not self.fly_forward
        if "left_shift" in down and "w" in down:
            self.wireframe = True
        if "right_shift" in down and "w" in down:
            self.wireframe = False
        self.light_dir, self.light_direction = advance_light(
            self.light_dir, self.light_direction, state.dt
        )
        return False

    def run(self) -> None:
        """Open a fullscreen window and run until it is closed."""
        import pyglet
        from pyglet import gl
        from pyglet.window import key, mouse

        from .render import TerrainRenderer

        config = gl.Config(double_buffer=True, depth_size=24,
                           major_version=3, minor_version=3, forward_compatible=True)
        window = pyglet.window.Window(fullscreen=True, caption="Dirt Jam",
                                      vsync=True, config=config)
        renderer = TerrainRenderer()
        grid = _Grid()
        fps = pyglet.window.FPSDisplay(window)
        label = pyglet.text.Label("", x=10, y=window.height - 50, font_size=14,
                                  color=(255, 255, 255, 255))

        key_names = {
            key.UP: "up", key.DOWN: "down", key.LEFT: "left", key.RIGHT: "right",
            key.Q: "q", key.E: "e", key.W: "w", key.A: "a", key.S: "s", key.D: "d",
            key.T: "t", key.SPACE: "space", key.LCTRL: "left_control",
            key.LSHIFT: "left_shift", key.RSHIFT: "right_shift",
            key.NUM_ADD: "kp_add", key.NUM_SUBTRACT: "kp_subtract",
            key.ESCAPE: "escape",
        }
        keys_down: set[str] = set()
        keys_pressed: set[str] = set()
        mouse_state = {"left": False, "dx": 0.0, "dy": 0.0, "wheel": 0.0}

        @window.event
        def on_key_press(symbol, modifiers):
            name = key_names.get(symbol)
            if name is not None:
                keys_down.add(name)
                keys_pressed.add(name)
            return pyglet.event.EVENT_HANDLED

        @window.event
        def on_key_release(symbol, modifiers):
            keys_down.discard(key_names.get(symbol))

        @window.event
        def on_mouse_motion(x, y, dx, dy):
            mouse_state["dx"] += dx
            mouse_state["dy"] += dy

        @window.event
        def on_mouse_drag(x, y, dx, dy, buttons, modifiers):
            mouse_state["dx"] += dx
            mouse_state["dy"] += dy

        @window.event
        def on_mouse_press(x, y, button, modifiers):
            if button == mouse.LEFT:
                mouse_state["left"] = True

        @window.event
        def on_mouse_release(x, y, button, modifiers):
            if button == mouse.LEFT:
                mouse_state["left"] = False

        @window.event
        def on_mouse_scroll(x, y, scroll_x, scroll_y):
            mouse_state["wheel"] += scroll_y

        @window.event
        def on_resize(width, height):
            label.y = height - 50

        @window.event
        def on_draw():
            gl.glClearColor(0.0, 0.0, 0.0, 1.0)
            window.clear()
            mode = gl.GL_LINE if self.wireframe else gl.GL_FILL
            gl.glPolygonMode(gl.GL_FRONT_AND_BACK, mode)
            aspect = window.width / max(window.height, 1)
            grid.draw(self.camera.view_projection(aspect))
            renderer.draw(self.field, self.camera, self.light_dir, aspect)
            gl.glPolygonMode(gl.GL_FRONT_AND_BACK, gl.GL_FILL)
            gl.glDisable(gl.GL_DEPTH_TEST)
            fps.draw()
            label.text = str(len(self.field))
            label.draw()

        def tick(dt):
            width = max(window.width, 1)
            height = max(window.height, 1)
            # Delta as the previous minus the current position in [-1, 1]
            # screen units, with y growing downwards.
            delta = (-2.0 * mouse_state["dx"] / width, 2.0 * mouse_state["dy"] / height)
            state = InputState(
                dt=dt,
                keys_down=frozenset(keys_down),
                keys_pressed=frozenset(keys_pressed),
                mouse_left_down=mouse_state["left"],
                mouse_delta=delta,
                mouse_wheel=mouse_state["wheel"],
                screen_width=float(width),
            )
            keys_pressed.clear()
            mouse_state.update(dx=0.0, dy=0.0, wheel=0.0)
            if self.frame(state):
                pyglet.clock.unschedule(tick)
                window.close()
                pyglet.app.exit()

        pyglet.clock.schedule(tick)
        pyglet.app.run()


class _Grid:
    """Line grid on the y = 0 plane, centred on the origin."""

    _VERTEX = """#version 330 core
in vec3 position;
in vec4 colors;
uniform mat4 projection;
out vec4 line_color;
void main() {
    gl_Position = projection * vec4(position, 1.0);
    line_color = colors;
}
"""
    _FRAGMENT = """#version 330 core
in vec4 line_color;
out vec4 FragColor;
void main() { FragColor = line_color; }
"""

    def __init__(self) -> None:
        from pyglet import gl
        from pyglet.graphics.shader import Shader, ShaderProgram

        self._gl = gl
        self._program = ShaderProgram(Shader(self._VERTEX, "vertex"),
                                      Shader(self._FRAGMENT, "fragment"))
        positions, colors = _grid_lines(_GRID_SLICES, _GRID_SPACING)
        self._count = len(positions) // 3
        self._lines = self._program.vertex_list(
            self._count, gl.GL_LINES,
            position=("f", positions), colors=("f", colors),
        )

    def draw(self, view_projection: np.ndarray) -> None:
        gl = self._gl
        gl.glEnable(gl.GL_DEPTH_TEST)
        self._program.use()
        self._program["projection"] = tuple(float(v) for v in view_projection.T.reshape(-1))
        self._lines.draw(gl.GL_LINES)
        self._program.stop()


def _grid_lines(slices: int, spacing: float) -> tuple[list[float], list[float]]:
    half = slices // 2
    extent = half * spacing
    positions: list[float] = []
    colors: list[float] = []
    for i in range(-half, half + 1):
        offset = i * spacing
        color = _GRID_AXES_COLOR if i == 0 else _GRID_OTHER_COLOR
        positions += [offset, 0.0, -extent, offset, 0.0, extent]
        positions += [-extent, 0.0, offset, extent, 0.0, offset]
        colors += list(color) * 4
    return positions, colors


def main(argv=None) -> int:
    """Start the viewer."""
    parser = argparse.ArgumentParser(prog="dirtjam", description="Fly over noise terrain.")
    parser.add_argument("--seed", type=int, default=None, help="terrain seed")
    args = parser.parse_args(argv)
    DirtJamWindow(args.seed).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())