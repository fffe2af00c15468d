# dirtjam

A small terrain flythrough. The landscape comes from fractal simplex noise
and is built in square chunks around the camera: new chunks are made as you
fly, at most two per frame, and far-away ones are dropped once 600 or more
have piled up. The terrain is lit by a sun that sweeps back and forth across
the sky, and its surface shades from dirt through grass and rock up to snow
as the height rises. A line grid is drawn on the ground plane at the origin.

## Installing

```
pip install .
```

This installs `numpy` and `pyglet`. You need a display with OpenGL 3.3 or
newer. For the tests, install the `test` extra: `pip install .[test]`.

## Running

```
dirtjam
dirtjam --seed 42
```

The window opens fullscreen and the camera starts flying forward at once.
Without `--seed` the terrain seed is chosen at random.

### Controls

| Input | Action |
| --- | --- |
| Mouse movement | Look around (yaw and pitch) |
| Left mouse button held + drag | Pan sideways and up/down |
| Arrow keys | Pitch and yaw |
| Q / E | Roll |
| W / A / S / D | Move forward, left, back, right |
| Space / Left Ctrl | Move up / down |
| Mouse wheel, keypad + / − | Move toward or away from the target |
| T | Turn automatic forward flight on or off |
| Left Shift + W | Wireframe on |
| Right Shift + W | Wireframe off |
| Escape | Quit |

The number of chunks held in memory is shown in the corner of the screen,
along with the frame rate.

## Using the pieces

Everything except drawing works without a window:

```python
from dirtjam.noise import simplex_fbm
from dirtjam.heightmap import ChunkField, build_chunk
from dirtjam.camera import Camera, InputState, update_camera

generator = simplex_fbm(seed=1, octaves=5, frequency=0.013,
                        lacunarity=2.0, persistence=0.5)
mesh = build_chunk(generator, (0.0, 0.0), (50, 50), 45.0)

field = ChunkField(generator)
added = field.update((3.0, 0.8, 0.0))   # at most 2

camera = Camera(position=(3.0, 0.8, 0.0), target=(0.0, 0.0, 0.0),
                up=(0.0, 1.0, 0.0))
camera.move_forward(0.5, True)
camera.yaw(0.1, False)
update_camera(camera, InputState(dt=0.016, keys_down=frozenset({"w"})))
```

- `dirtjam.noise`: `Simplex(seed).sample((x, y))` gives seeded 2D simplex
  noise in about −1 to 1; `Fbm` sums octaves of it, and `simplex_fbm` builds
  one. Coordinates may be scalars or numpy arrays.
- `dirtjam.heightmap`: `build_chunk` returns a `ChunkMesh` holding the
  positions, texture coordinates, colours, normals and triangle indices for
  one unit square of terrain, with heights mapped to 0–1. `ChunkField` keeps
  chunks keyed by integer `(x, z)`; it supports `len()` and iterating over its
  meshes.
- `dirtjam.camera`: `Camera` holds a position, target and up vector and offers
  moves, `yaw`, `pitch`, `roll`, `move_to_target` and `view_projection`.
  Pitching around the target is not supported and raises `ValueError`.
  `rotate_vector` rotates a vector around an axis. `InputState` holds one
  frame of input, with key names `up`, `down`, `left`, `right`, `q`, `e`,
  `w`, `a`, `s`, `d`, `space`, `left_control`, `kp_add` and `kp_subtract`;
  `update_camera` applies it.
- `dirtjam.render`: `pack_vertices` interleaves a mesh into rows of 12 floats;
  `terrain_textures` makes the four procedural RGBA textures;
  `TerrainRenderer` draws a `ChunkField` and needs a current OpenGL context.
- `dirtjam.app`: `advance_light` swings the light direction; `DirtJamWindow`
  holds the scene, steps it with `frame(state)` and opens the window with
  `run()`.

## What it does not do

The ground textures are generated patterns, not image files, and there is no
way to load your own. The terrain is not saved anywhere: chunks live only in
memory while the program runs.