import numpy as np
import pytest

from demagfft.fft import get_backend
from demagfft.topology import Topology
from demagfft.vectorfield import (
    SYMMETRIC_MAP,
    ComplexTensorField,
    ComplexVectorField,
    RealVectorField,
)


def _complex(rows):
    # rows of interleaved real/imaginary parts
    rows = np.asarray(rows, dtype=float)
    return rows[:, 0::2] + 1j * rows[:, 1::2]


def test_tensor_times_vector():
    t = Topology((2, 1, 1), (1, 1, 1))
    vf = ComplexVectorField(t, _complex([[1, 0, 0, 2], [2, 3, 4, 5], [4, 5, 6, 2]]))
    tf = ComplexTensorField(
        t,
        _complex(
            [
                [3, 4, 5, 6],
                [3, 5, 6, 7],
                [5, 0, 0, 8],
                [1, 2, 3, 4],
                [5, 7, 3, 8],
                [2, 4, 4, 5],
                [1, 1, 3, 3],
                [4, 4, 2, 4],
                [6, 6, 6, 8],
            ]
        ),
    )
    expected = _complex([[14, 48, -39, 116], [-22, 57, -22, 91], [-9, 75, 2, 92]])

    result = tf.times(vf)
    assert isinstance(result, ComplexVectorField)
    np.testing.assert_array_equal(result.values, expected)


def test_symmetric_tensor_map():
    t = Topology((1, 1, 1), (1, 1, 1))
    tf = ComplexTensorField(t, np.arange(6)[:, None], SYMMETRIC_MAP)
    full = np.array([[tf.entry(i, j)[0] for j in range(3)] for i in range(3)]).real
    np.testing.assert_array_equal(full, full.T)
    np.testing.assert_array_equal(np.diag(full), [0, 3, 5])

    vf = ComplexVectorField(t, [[1.0], [0.0], [0.0]])
    np.testing.assert_array_equal(tf.multiply(vf).values[:, 0], [0, 1, 2])


def test_values_are_read_only():
    t = Topology((2, 2, 1), (1, 1, 1))
    field = RealVectorField.uniform(t, (1, 0, 0))
    assert not field.values.flags.writeable
    with pytest.raises(ValueError):
        field.values[0, 0] = 2.0


def test_constructor_copies():
    t = Topology((2, 1, 1), (1, 1, 1))
    values = np.ones((3, 2))
    field = RealVectorField(t, values)
    values[0, 0] = 5.0
    assert field.value(0, 0) == 1.0
    assert values.flags.writeable


def test_array_layout():
    t = Topology((3, 2, 2), (1, 1, 1))
    array = np.random.default_rng(0).random(t.cell_count + (3,))
    field = RealVectorField.from_array(t, array)
    assert field.value_at(2, (1, 1, 0)) == array[1, 1, 0, 2]
    assert field.value(1, t.lidx((2, 0, 1))) == array[2, 0, 1, 1]
    np.testing.assert_array_equal(field.to_array(), array)


def test_arithmetic():
    t = Topology((2, 1, 1), (1, 1, 1))
    a = RealVectorField(t, [[1, 2], [0, 0], [0, 1]])
    b = RealVectorField.uniform(t, (1, 1, 1))

    np.testing.assert_array_equal((a + b).values, [[2, 3], [1, 1], [1, 2]])
    np.testing.assert_array_equal((a - b).values, [[0, 1], [-1, -1], [-1, 0]])
    np.testing.assert_array_equal((2 * a).values, [[2, 4], [0, 0], [0, 2]])
    np.testing.assert_array_equal(a.dot((1, 0, 1)), [1, 3])
    np.testing.assert_allclose(a.norms(), [1, np.sqrt(5)])
    np.testing.assert_allclose(a.average(), [1.5, 0, 0.5])
    assert a.max_norm() == pytest.approx(np.sqrt(5))
    np.testing.assert_allclose(a.normalized().norms(), [1, 1])
    np.testing.assert_array_equal(a.cross(b).values, [[-0.0, -1], [-1, -1], [1, 2]])


def test_topology_mismatch():
    a = RealVectorField.empty(Topology((2, 1, 1), (1, 1, 1)))
    b = RealVectorField.empty(Topology((2, 1, 1), (1, 1, 2)))
    with pytest.raises(ValueError):
        a + b
    assert not a.approx(b, 1.0)


def test_from_scalar():
    t = Topology((2, 1, 1), (1, 1, 1))
    field = RealVectorField.from_scalar(t, [1.0, 3.0], (0, 0, 2))
    np.testing.assert_array_equal(field.values, [[0, 0], [0, 0], [2, 6]])


def test_complex_conversion():
    t = Topology((2, 1, 1), (1, 1, 1))
    a = RealVectorField(t, [[1, 2], [3, 4], [5, 6]])
    c = a.to_complex()
    assert c.values.dtype == np.complex128
    assert c.real() == a


def test_cyclic_shift():
    t = Topology((3, 1, 1), (1, 1, 1), (-1, 0, 0))
    tf = ComplexTensorField(t, np.tile([10.0, 20.0, 30.0], (6, 1)), SYMMETRIC_MAP)
    shifted = tf.cyclic_shift_to((0, 0, 0))
    assert shifted.topology == t.with_origin((0, 0, 0))
    np.testing.assert_array_equal(shifted.values[0], [20, 30, 10])


def test_tensor_resize_keeps_map():
    t = Topology((3, 1, 1), (1, 1, 1), (-1, 0, 0))
    tf = ComplexTensorField(t, np.tile([1.0, 2.0, 3.0], (6, 1)), SYMMETRIC_MAP)
    resized = tf.resize(t.with_cell_count((4, 1, 1)))
    assert resized.tensor_map == SYMMETRIC_MAP
    np.testing.assert_array_equal(resized.values[3], [1, 2, 3, 0])


@pytest.mark.parametrize("backend", ["numpy", "scipy"])
def test_dense_fft_round_trip(backend):
    backend = get_backend(backend)
    t = Topology((4, 3, 2), (1, 1, 1))
    rng = np.random.default_rng(1)
    vf = ComplexVectorField(t, rng.random((3, 24)) + 1j * rng.random((3, 24)))

    forward = vf.fft_forward(backend)
    np.testing.assert_allclose(forward.grid, np.fft.fftn(vf.grid, axes=(1, 2, 3)))
    np.testing.assert_allclose(
        forward.fft_inverse(backend).values, vf.values * t.total_cell_count
    )
