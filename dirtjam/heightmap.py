"""Terrain chunk meshes sampled from a 2D noise generator, and the set of
chunks kept around the camera."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

_RADIUS = 10
_MAX_NEW_PER_UPDATE = 2
_PRUNE_AT = 600
_KEEP_DISTANCE_SQUARED = 200


class Generator(Protocol):
    """Anything that samples a 2D scalar field, element-wise over arrays."""

    def sample(self, point): ...


@dataclass(eq=False)
class ChunkMesh:
    """Vertex and index data for one unit square of terrain.

    Vertices are laid out with the x division as the outer loop and the
    y division as the inner one. Triangles are listed in ``indices``.
    """

    offset: tuple[float, float]
    positions: np.ndarray
    uvs: np.ndarray
    colors: np.ndarray
    normals: np.ndarray
    indices: np.ndarray

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def index_count(self) -> int:
        return len(self.indices)


def _normalize_rows(vectors: np.ndarray) -> np.ndarray:
    with np.errstate(invalid="ignore", divide="ignore"):
        return vectors / np.linalg.norm(vectors, axis=-1, keepdims=True)


def build_chunk(generator: Generator, offset, divisions, terrain_scale: float) -> ChunkMesh:
    """Sample ``generator`` over the unit square at ``offset`` into a mesh.

    Heights are mapped from [-1, 1] to [0, 1]. Normals average the faces
    towards the next and the previous grid neighbours.
    """
    x_divisions, y_divisions = (int(d) for d in divisions)
    if x_divisions < 2 or y_divisions < 2:
        raise ValueError("a chunk needs at least two divisions along each axis")
    off_x, off_y = (np.float32(c) for c in offset)

    xi, yi = np.meshgrid(
        np.arange(x_divisions, dtype=np.float32),
        np.arange(y_divisions, dtype=np.float32),
        indexing="ij",
    )
    xi = xi.reshape(-1)
    yi = yi.reshape(-1)
    x_span = np.float32(x_divisions - 1)
    y_span = np.float32(y_divisions - 1)

    u = xi / x_span
    v = yi / y_span
    x = u + off_x
    y = v + off_y
    next_x = (xi + np.float32(1.0)) / x_span + off_x
    next_y = (yi + np.float32(1.0)) / y_span + off_y
    prev_x = (xi - np.float32(1.0)) / x_span + off_x
    prev_y = (yi - np.float32(1.0)) / y_span + off_y

    scale = float(terrain_scale)

    def height(px: np.ndarray, py: np.ndarray) -> np.ndarray:
        sampled = generator.sample((px.astype(np.float64) * scale, py.astype(np.float64) * scale))
        sampled = np.broadcast_to(np.asarray(sampled, dtype=np.float32), px.shape)
        return np.float32(0.5) * (sampled + np.float32(1.0))

    h = height(x, y)
    pos = np.stack([x, h, y], axis=-1)
    next_x_pos = np.stack([next_x, height(next_x, y), y], axis=-1)
    next_y_pos = np.stack([x, height(x, next_y), next_y], axis=-1)
    prev_x_pos = np.stack([prev_x, height(prev_x, y), y], axis=-1)
    prev_y_pos = np.stack([x, height(x, prev_y), prev_y], axis=-1)

    normal1 = _normalize_rows(np.cross(next_x_pos - pos, next_y_pos - pos))
    normal2 = _normalize_rows(np.cross(prev_x_pos - pos, prev_y_pos - pos))
    normals = _normalize_rows(normal1 + normal2).astype(np.float32)

    ones = np.ones_like(h)
    colors = np.stack([ones, h, h, ones], axis=-1).astype(np.float32)
    uvs = np.stack([u, v], axis=-1).astype(np.float32)

    cx, cy = np.meshgrid(
        np.arange(x_divisions - 1, dtype=np.int64),
        np.arange(y_divisions - 1, dtype=np.int64),
        indexing="ij",
    )
    index = cx * x_divisions + cy
    next_x_index = (cx + 1) * x_divisions + cy
    next_y_index = cx * x_divisions + cy + 1
    next_xy_index = (cx + 1) * x_divisions + cy + 1
    indices = np.stack(
        [index, next_x_index, next_xy_index, index, next_xy_index, next_y_index],
        axis=-1,
    ).reshape(-1).astype(np.uint32)

    return ChunkMesh(
        offset=(float(off_x), float(off_y)),
        positions=pos.astype(np.float32),
        uvs=uvs,
        colors=colors,
        normals=normals,
        indices=indices,
    )


@dataclass
class ChunkField:
    """Chunks generated lazily around the camera, keyed by integer (x, z)."""

    generator: Generator
    divisions: tuple[int, int] = (50, 50)
    terrain_scale: float = 45.0
    chunks: dict[tuple[int, int], ChunkMesh] = field(default_factory=dict)

    def update(self, camera_position) -> int:
        """Add up to two missing chunks near the camera and prune distant ones.

        Returns the number of chunks added.
        """
        px, _, pz = (float(c) for c in camera_position)
        cam_x, cam_z = math.floor(px), math.floor(pz)
        added = 0
        for dx in range(-_RADIUS, _RADIUS):
            for dz in range(-_RADIUS, _RADIUS):
                if added >= _MAX_NEW_PER_UPDATE:
                    break
                key = (cam_x + dx, cam_z + dz)
                if key not in self.chunks:
                    self.chunks[key] = build_chunk(
                        self.generator, key, self.divisions, self.terrain_scale
                    )
                    added += 1
        if len(self.chunks) >= _PRUNE_AT:
            self.chunks = {
                key: mesh
                for key, mesh in self.chunks.items()
                if (key[0] - cam_x) ** 2 + (key[1] - cam_z) ** 2 < _KEEP_DISTANCE_SQUARED
            }
        return added

    def __len__(self) -> int:
        return len(self.chunks)

    def __iter__(self) -> Iterator[ChunkMesh]:
        return iter(self.chunks.values())