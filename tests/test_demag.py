import numpy as np
import pytest

from demagfft.demag import compute_demag_tensor, f, g, nxx, nxy
from demagfft.topology import Topology
from demagfft.vectorfield import SYMMETRIC_MAP


def test_newell_functions_at_origin():
    assert f(0.0, 0.0, 0.0) == 0.0
    assert g(0.0, 0.0, 0.0) == 0.0


@pytest.mark.parametrize("point", [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0), (1.0, 1.0, 0.0), (0.0, 2.0, 3.0)])
def test_newell_functions_on_coordinate_planes(point):
    assert np.isfinite(f(*point))
    assert np.isfinite(g(*point))


def test_g_is_symmetric_in_x_and_y():
    assert g(1.0, 2.0, 3.0) == pytest.approx(g(2.0, 1.0, 3.0), rel=1e-12)


@pytest.mark.parametrize("dx", [(1.0, 1.0, 1.0), (2e-9, 2e-9, 2e-9)])
def test_cube_self_interaction(dx):
    tensor = compute_demag_tensor(Topology((1, 1, 1), dx))
    assert tensor.topology == Topology((1, 1, 1), dx)
    values = tensor.values[:, 0].real
    np.testing.assert_allclose(values[[0, 3, 5]], 1.0 / 3.0, rtol=1e-10)
    np.testing.assert_allclose(values[[1, 2, 4]], 0.0, atol=1e-10)


def test_self_interaction_trace():
    tensor = compute_demag_tensor(Topology((1, 1, 1), (1.0, 2.0, 3.0)))
    values = tensor.values[:, 0].real
    assert values[0] + values[3] + values[5] == pytest.approx(1.0, rel=1e-10)
    # shortest edge has the largest factor
    assert values[0] > values[3] > values[5]


def test_layout():
    t = Topology((3, 2, 2), (1.0, 2.0, 3.0))
    tensor = compute_demag_tensor(t)
    assert tensor.topology == t.distance_topology()
    assert tensor.tensor_map == SYMMETRIC_MAP
    assert tensor.dimension == 6
    np.testing.assert_array_equal(tensor.values.imag, 0.0)

    # zero distance entry is the self interaction
    x = tensor.topology.lidx((0, 0, 0))
    assert tensor.values[0, x].real == pytest.approx(nxx(0.0, 0.0, 0.0, 1.0, 2.0, 3.0))
    y = tensor.topology.lidx((1, -1, 1))
    assert tensor.values[1, y].real == pytest.approx(nxy(1.0, -2.0, 3.0, 1.0, 2.0, 3.0))


def test_axis_permutation_symmetry():
    a = compute_demag_tensor(Topology((3, 2, 2), (1.0, 2.0, 3.0)))
    b = compute_demag_tensor(Topology((2, 3, 2), (2.0, 1.0, 3.0)))
    swap = (1, 0, 2)
    grid_a, grid_b = a.grid.real, b.grid.real

    # xx <-> yy and xz <-> yz are the same evaluations, zz swaps the
    # arguments f is symmetric in
    np.testing.assert_array_equal(grid_a[0], grid_b[3].transpose(swap))
    np.testing.assert_array_equal(grid_a[2], grid_b[4].transpose(swap))
    np.testing.assert_allclose(grid_a[5], grid_b[5].transpose(swap), rtol=1e-12, atol=1e-15)
    # Nxy(x, y, z) == Nyx(y, x, z)
    np.testing.assert_allclose(grid_a[1], grid_b[1].transpose(swap), rtol=1e-9, atol=1e-12)


def test_parity():
    tensor = compute_demag_tensor(Topology((3, 3, 2), (1.0, 1.5, 2.0)))
    grid = tensor.grid.real
    flip_x = lambda a: a[::-1]  # noqa: E731

    for diagonal in (0, 3, 5):
        np.testing.assert_allclose(flip_x(grid[diagonal]), grid[diagonal], atol=1e-12)
    # odd in x for xy and xz, even for yz
    np.testing.assert_allclose(flip_x(grid[1]), -grid[1], atol=1e-12)
    np.testing.assert_allclose(flip_x(grid[2]), -grid[2], atol=1e-12)
    np.testing.assert_allclose(flip_x(grid[4]), grid[4], atol=1e-12)


def test_parallel_matches_serial():
    t = Topology((2, 2, 1), (1.0, 1.0, 0.5))
    serial = compute_demag_tensor(t, max_workers=1)
    parallel = compute_demag_tensor(t, max_workers=2)
    np.testing.assert_array_equal(serial.values, parallel.values)


def test_requires_3d():
    with pytest.raises(ValueError):
        compute_demag_tensor(Topology((4, 4), (1.0, 1.0)))
