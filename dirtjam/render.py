"""Terrain drawing: vertex packing, procedural textures and the GL pass."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .camera import Camera
from .heightmap import ChunkField, ChunkMesh

TEXTURE_NAMES = ("grass_texture", "snow_texture", "rock_texture", "dirt_texture")

_BASE_COLORS = {
    "grass_texture": (70, 120, 40),
    "snow_texture": (235, 235, 245),
    "rock_texture": (115, 110, 105),
    "dirt_texture": (110, 80, 50),
}

# Attribute name and component count, in packed order.
_ATTRIBUTES = (("in_pos", 3), ("in_uv", 2), ("in_color", 4), ("in_normal", 3))

VERTEX_SHADER = """#version 330 core
layout (location = 0) in vec3 in_pos;
layout (location = 1) in vec2 in_uv;
layout (location = 2) in vec4 in_color;
layout (location = 3) in vec3 in_normal;

uniform mat4 model;
uniform mat4 projection;

out vec3 pos;
out vec4 color;
out vec3 normal;
out vec2 texcoord;

void main() {
    gl_Position = projection * model * vec4(in_pos, 1.0);
    color = vec4(in_pos.yyy, 1.0);
    pos = in_pos;
    normal = in_normal;
    texcoord = in_uv;
}
"""

FRAGMENT_SHADER = """#version 330 core
in vec3 pos;
in vec4 color;
in vec3 normal;
in vec2 texcoord;

uniform vec3 light_dir = vec3(1.0, 0.0, 0.0);
uniform sampler2D snow_texture;
uniform sampler2D grass_texture;
uniform sampler2D rock_texture;
uniform sampler2D dirt_texture;

out vec4 FragColor;

void main() {
    float diffuse = max(0.3, dot(light_dir, normalize(normal)));
    vec4 dirt = texture(dirt_texture, texcoord);
    vec4 grass = texture(grass_texture, texcoord);
    vec4 rock = texture(rock_texture, texcoord);
    vec4 snow = texture(snow_texture, texcoord);
    vec4 texcolor;
    if (pos.y < 0.25) {
        texcolor = dirt;
    } else if (pos.y < 0.5) {
        texcolor = mix(dirt, grass, 4.0 * (pos.y - 0.25));
    } else if (pos.y < 0.75) {
        texcolor = mix(grass, rock, 4.0 * (pos.y - 0.5));
    } else {
        texcolor = mix(rock, snow, 4.0 * (pos.y - 0.75));
    }
    FragColor = diffuse * texcolor;
}
"""


def pack_vertices(mesh: ChunkMesh) -> np.ndarray:
    """Interleave position, uv, colour and normal into rows of 12 floats."""
    packed = np.concatenate(
        [mesh.positions, mesh.uvs, mesh.colors, mesh.normals], axis=1
    )
    return np.ascontiguousarray(packed, dtype=np.float32)


def terrain_textures(size: int = 256) -> dict[str, np.ndarray]:
    """Procedural RGBA textures for grass, snow, rock and dirt.

    Each is a ``size`` x ``size`` x 4 array of bytes, speckled with a fixed
    pattern so that the result is the same on every call.
    """
    size = int(size)
    if size < 1:
        raise ValueError("texture size must be at least 1")
    textures = {}
    for index, name in enumerate(TEXTURE_NAMES):
        rng = np.random.default_rng(index)
        speckle = rng.integers(-20, 21, size=(size, size, 1))
        rgb = np.clip(np.array(_BASE_COLORS[name]) + speckle, 0, 255)
        alpha = np.full((size, size, 1), 255)
        textures[name] = np.concatenate([rgb, alpha], axis=2).astype(np.uint8)
    return textures


def _column_major(matrix: np.ndarray) -> tuple[float, ...]:
    return tuple(float(value) for value in np.asarray(matrix).T.reshape(-1))


@dataclass
class _GpuChunk:
    mesh: ChunkMesh
    vertex_list: object


class TerrainRenderer:
    """Draws the chunks of a field with a shared shader and textures.

    Needs a current OpenGL 3.3 context when created and when drawing.
    """

    def __init__(self, texture_size: int = 256) -> None:
        from pyglet import gl
        from pyglet.graphics.shader import Shader, ShaderProgram

        self._gl = gl
        self._program = ShaderProgram(
            Shader(VERTEX_SHADER, "vertex"), Shader(FRAGMENT_SHADER, "fragment")
        )
        self._textures = []
        for unit, (name, image) in enumerate(terrain_textures(texture_size).items()):
            self._textures.append(self._upload_texture(image))
            self._program.use()
            self._program[name] = unit
        self._program.stop()
        self._chunks: dict[int, _GpuChunk] = {}

    def _upload_texture(self, image: np.ndarray):
        from pyglet.image import ImageData

        gl = self._gl
        data = np.ascontiguousarray(image, dtype=np.uint8)
        height, width = data.shape[:2]
        texture = ImageData(width, height, "RGBA", data.tobytes()).get_mipmapped_texture()
        gl.glBindTexture(texture.target, texture.id)
        gl.glTexParameteri(texture.target, gl.GL_TEXTURE_WRAP_S, gl.GL_CLAMP_TO_EDGE)
        gl.glTexParameteri(texture.target, gl.GL_TEXTURE_WRAP_T, gl.GL_CLAMP_TO_EDGE)
        gl.glTexParameteri(texture.target, gl.GL_TEXTURE_MIN_FILTER, gl.GL_LINEAR_MIPMAP_LINEAR)
        gl.glTexParameteri(texture.target, gl.GL_TEXTURE_MAG_FILTER, gl.GL_LINEAR)
        gl.glBindTexture(texture.target, 0)
        return texture

    def _upload_chunk(self, mesh: ChunkMesh) -> _GpuChunk:
        gl = self._gl
        vertices = pack_vertices(mesh)
        active = set(self._program.attributes)
        data = {}
        start = 0
        for name, size in _ATTRIBUTES:
            if name in active:
                column = vertices[:, start:start + size]
                data[name] = ("f", column.reshape(-1).tolist())
            start += size
        indices = np.asarray(mesh.indices, dtype=np.uint32).tolist()
        vertex_list = self._program.vertex_list_indexed(
            mesh.vertex_count, gl.GL_TRIANGLES, indices, **data
        )
        return _GpuChunk(mesh, vertex_list)

    @staticmethod
    def _release(chunk: _GpuChunk) -> None:
        chunk.vertex_list.delete()

    def draw(self, field: ChunkField, camera: Camera, light_dir, aspect: float) -> None:
        """Grow the field around the camera and draw every chunk in it."""
        gl = self._gl
        field.update(camera.position)

        live = {id(mesh) for mesh in field}
        for key in [key for key in self._chunks if key not in live]:
            self._release(self._chunks.pop(key))

        gl.glEnable(gl.GL_DEPTH_TEST)
        gl.glDepthFunc(gl.GL_LESS)
        gl.glDepthMask(gl.GL_TRUE)
        gl.glDisable(gl.GL_CULL_FACE)

        light = np.asarray(light_dir, dtype=np.float64)
        light = -light / np.linalg.norm(light)

        program = self._program
        program.use()
        program["projection"] = _column_major(camera.view_projection(aspect))
        program["model"] = _column_major(np.identity(4))
        program["light_dir"] = tuple(float(c) for c in light)

        for unit, texture in enumerate(self._textures):
            gl.glActiveTexture(gl.GL_TEXTURE0 + unit)
            gl.glBindTexture(texture.target, texture.id)

        for mesh in field:
            chunk = self._chunks.get(id(mesh))
            if chunk is None:
                chunk = self._chunks[id(mesh)] = self._upload_chunk(mesh)
            chunk.vertex_list.draw(gl.GL_TRIANGLES)

        gl.glActiveTexture(gl.GL_TEXTURE0)
        program.stop()