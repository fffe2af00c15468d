import numpy as np
import pytest

from dirtjam.heightmap import build_chunk
from dirtjam.noise import simplex_fbm
from dirtjam.render import TEXTURE_NAMES, pack_vertices, terrain_textures


@pytest.fixture
def mesh():
    generator = simplex_fbm(3, 5, 0.013, 2.0, 0.5)
    return build_chunk(generator, (2, -1), (4, 5), 45.0)


def test_pack_vertices_shape_and_type(mesh):
    packed = pack_vertices(mesh)
    assert packed.shape == (mesh.vertex_count, 12)
    assert packed.dtype == np.float32
    assert packed.flags["C_CONTIGUOUS"]


def test_pack_vertices_interleaves_attributes_in_order(mesh):
    packed = pack_vertices(mesh)
    np.testing.assert_array_equal(packed[:, 0:3], mesh.positions)
    np.testing.assert_array_equal(packed[:, 3:5], mesh.uvs)
    np.testing.assert_array_equal(packed[:, 5:9], mesh.colors)
    np.testing.assert_array_equal(packed[:, 9:12], mesh.normals)


def test_pack_vertices_heights_match_color_channels(mesh):
    packed = pack_vertices(mesh)
    np.testing.assert_array_equal(packed[:, 1], packed[:, 6])
    np.testing.assert_array_equal(packed[:, 1], packed[:, 7])


def test_terrain_textures_names_in_shader_order():
    textures = terrain_textures(8)
    assert tuple(textures) == TEXTURE_NAMES
    assert TEXTURE_NAMES == ("grass_texture", "snow_texture", "rock_texture", "dirt_texture")


@pytest.mark.parametrize("size", [1, 8, 33])
def test_terrain_textures_shape_and_alpha(size):
    for image in terrain_textures(size).values():
        assert image.shape == (size, size, 4)
        assert image.dtype == np.uint8
        assert np.all(image[..., 3] == 255)


def test_terrain_textures_are_deterministic():
    first = terrain_textures(16)
    second = terrain_textures(16)
    for name in TEXTURE_NAMES:
        np.testing.assert_array_equal(first[name], second[name])


def test_snow_is_brighter_than_dirt():
    textures = terrain_textures(32)
    snow = textures["snow_texture"][..., :3].mean()
    dirt = textures["dirt_texture"][..., :3].mean()
    assert snow > dirt


@pytest.mark.parametrize("size", [0, -4])
def test_terrain_textures_reject_empty_size(size):
    with pytest.raises(ValueError):
        terrain_textures(size)