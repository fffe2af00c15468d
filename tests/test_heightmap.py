import numpy as np
import pytest

from dirtjam.heightmap import ChunkField, ChunkMesh, build_chunk
from dirtjam.noise import simplex_fbm


class Flat:
    def __init__(self, value=0.0):
        self.value = value
        self.calls = []

    def sample(self, point):
        x, y = point
        self.calls.append((np.array(x), np.array(y)))
        return np.full(np.shape(x), self.value)


class Slope:
    def sample(self, point):
        x, _ = point
        return np.clip(np.asarray(x) * 0.01, -1.0, 1.0)


@pytest.fixture
def fbm():
    return simplex_fbm(7, 5, 0.013, 2.0, 0.5)


def test_vertex_and_index_counts():
    mesh = build_chunk(Flat(), (0, 0), (5, 5), 1.0)
    assert isinstance(mesh, ChunkMesh)
    assert mesh.vertex_count == 25
    assert mesh.index_count == 6 * 4 * 4
    assert mesh.positions.shape == (25, 3)
    assert mesh.uvs.shape == (25, 2)
    assert mesh.colors.shape == (25, 4)
    assert mesh.normals.shape == (25, 3)


def test_flat_height_is_half_and_normals_vertical():
    mesh = build_chunk(Flat(0.0), (3, -2), (4, 4), 2.0)
    assert np.allclose(mesh.positions[:, 1], 0.5)
    assert np.allclose(np.abs(mesh.normals[:, 1]), 1.0)
    assert np.allclose(mesh.normals[:, [0, 2]], 0.0)


def test_heights_map_noise_range_to_unit_interval():
    low = build_chunk(Flat(-1.0), (0, 0), (3, 3), 1.0)
    high = build_chunk(Flat(1.0), (0, 0), (3, 3), 1.0)
    assert np.allclose(low.positions[:, 1], 0.0)
    assert np.allclose(high.positions[:, 1], 1.0)


def test_colors_follow_height(fbm):
    mesh = build_chunk(fbm, (1, 1), (6, 6), 45.0)
    assert np.allclose(mesh.colors[:, 0], 1.0)
    assert np.allclose(mesh.colors[:, 3], 1.0)
    assert np.allclose(mesh.colors[:, 1], mesh.positions[:, 1])
    assert np.allclose(mesh.colors[:, 2], mesh.positions[:, 1])


def test_positions_cover_unit_square_at_offset():
    mesh = build_chunk(Flat(), (4, 7), (5, 5), 1.0)
    assert np.allclose(mesh.positions[0, [0, 2]], [4.0, 7.0])
    assert np.allclose(mesh.positions[-1, [0, 2]], [5.0, 8.0])
    assert np.allclose(mesh.positions[:, 0], mesh.uvs[:, 0] + 4.0)
    assert np.allclose(mesh.positions[:, 2], mesh.uvs[:, 1] + 7.0)
    assert mesh.offset == (4.0, 7.0)


def test_vertex_order_has_x_outer():
    mesh = build_chunk(Flat(), (0, 0), (3, 3), 1.0)
    assert np.allclose(mesh.uvs[:3, 0], 0.0)
    assert np.allclose(mesh.uvs[:3, 1], [0.0, 0.5, 1.0])


def test_first_cell_triangles():
    mesh = build_chunk(Flat(), (0, 0), (4, 4), 1.0)
    assert mesh.indices[:6].tolist() == [0, 4, 5, 0, 5, 1]
    assert mesh.indices.dtype == np.uint32


def test_indices_stay_within_vertices():
    mesh = build_chunk(Flat(), (0, 0), (7, 7), 1.0)
    assert int(mesh.indices.max()) == mesh.vertex_count - 1
    assert int(mesh.indices.min()) == 0


def test_generator_receives_scaled_coordinates():
    gen = Flat()
    build_chunk(gen, (2, 3), (3, 3), 10.0)
    x, y = gen.calls[0]
    assert np.allclose(x, (np.repeat([0.0, 0.5, 1.0], 3) + 2.0) * 10.0)
    assert np.allclose(y, (np.tile([0.0, 0.5, 1.0], 3) + 3.0) * 10.0)


def test_normals_are_unit_length(fbm):
    mesh = build_chunk(fbm, (0, 0), (8, 8), 45.0)
    assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-5)


def test_sloped_normals_lean_against_slope():
    mesh = build_chunk(Slope(), (0, 0), (4, 4), 10.0)
    normals = mesh.normals
    # Surface rises with x, so the normal's x and y components have opposite signs.
    assert float(normals[:, 0].min()) > 0.0
    assert float(normals[:, 1].max()) < 0.0
    assert np.allclose(normals[:, 2], 0.0)


def test_same_seed_gives_same_mesh():
    a = build_chunk(simplex_fbm(3, 3, 0.013, 2.0, 0.5), (1, 2), (5, 5), 45.0)
    b = build_chunk(simplex_fbm(3, 3, 0.013, 2.0, 0.5), (1, 2), (5, 5), 45.0)
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.normals, b.normals)


@pytest.mark.parametrize("divisions", [(1, 5), (5, 1), (0, 0)])
def test_too_few_divisions_rejected(divisions):
    with pytest.raises(ValueError):
        build_chunk(Flat(), (0, 0), divisions, 1.0)


def test_first_update_adds_two_chunks_in_order():
    field = ChunkField(Flat(), (2, 2), 1.0)
    assert field.update((0.0, 0.0, 0.0)) == 2
    assert len(field) == 2
    assert list(field.chunks) == [(-10, -10), (-10, -9)]


def test_update_floors_negative_positions():
    field = ChunkField(Flat(), (2, 2), 1.0)
    field.update((-0.5, 3.0, -0.5))
    assert next(iter(field.chunks)) == (-11, -11)


def test_field_fills_to_full_square_then_stops():
    field = ChunkField(Flat(), (2, 2), 1.0)
    for _ in range(200):
        assert field.update((0.0, 0.0, 0.0)) == 2
    assert len(field) == 400
    assert field.update((0.0, 0.0, 0.0)) == 0
    assert set(field.chunks) == {(x, z) for x in range(-10, 10) for z in range(-10, 10)}


def test_iteration_yields_meshes_matching_keys():
    field = ChunkField(Flat(), (2, 2), 1.0)
    for _ in range(3):
        field.update((5.0, 0.0, 5.0))
    offsets = [mesh.offset for mesh in field]
    assert offsets == [(float(x), float(z)) for x, z in field.chunks]


def test_field_prunes_distant_chunks():
    field = ChunkField(Flat(), (2, 2), 1.0)
    for _ in range(200):
        field.update((0.0, 0.0, 0.0))
    previous = len(field)
    pruned = False
    for _ in range(200):
        field.update((100.0, 0.0, 0.0))
        if len(field) < previous:
            pruned = True
            break
        previous = len(field)
    assert pruned
    assert len(field) < 600
    assert all((x - 100) ** 2 + z ** 2 < 200 for x, z in field.chunks)