"""
Field value types living on a topology.

Values are stored per component, ``values[component, lidx]``, where ``lidx``
is the column-major linear index of the topology. All operations return new
fields; the arrays handed out by a field are read only.
"""
import numpy as np

from .config import CDTYPE, DTYPE
from .topology import Topology, resize


class Field:
    dtype = DTYPE

    def __init__(self, topology: Topology, values):
        values = np.array(values, dtype=self.dtype)
        if values.ndim == 1:
            values = values.reshape(-1, topology.total_cell_count)
        if values.ndim != 2 or values.shape[1] != topology.total_cell_count:
            raise ValueError(
                f"values of shape {values.shape} do not fit {topology.total_cell_count} cells"
            )
        values.flags.writeable = False
        self.topology = topology
        self._values = values

    @classmethod
    def _wrap(cls, topology: Topology, values: np.ndarray):
        # takes ownership of ``values`` without copying
        field = cls.__new__(cls)
        values.flags.writeable = False
        field.topology = topology
        field._values = values
        return field

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def dimension(self) -> int:
        return self._values.shape[0]

    @property
    def grid(self) -> np.ndarray:
        """Values as ``(components, n0, n1, ...)``."""
        return self.topology.grid(self._values)

    def component(self, i: int) -> np.ndarray:
        return self._values[i].copy()

    def value(self, component: int, lidx: int):
        return self._values[component, lidx]

    def value_at(self, component: int, cidx):
        return self._values[component, self.topology.lidx(cidx)]

    def approx(self, other, accuracy: float) -> bool:
        if not isinstance(other, Field) or self.topology != other.topology:
            return False
        if self._values.shape != other._values.shape:
            return False
        return bool(np.all(np.abs(self._values - other._values) <= accuracy))

    def __eq__(self, other):
        return self.approx(other, 0.0)

    __hash__ = None

    def __repr__(self):
        return f"{type(self).__name__}({self.topology}, dimension={self.dimension})"


class RealVectorField(Field):
    @classmethod
    def empty(cls, topology: Topology, dimension: int = 3):
        return cls._wrap(topology, np.zeros((dimension, topology.total_cell_count), dtype=DTYPE))

    @classmethod
    def uniform(cls, topology: Topology, vector):
        vector = np.asarray(vector, dtype=DTYPE)
        return cls._wrap(
            topology, np.repeat(vector[:, None], topology.total_cell_count, axis=1)
        )

    @classmethod
    def from_array(cls, topology: Topology, array):
        """Build from an array shaped ``cell_count + (components,)``."""
        array = np.asarray(array, dtype=DTYPE)
        if array.shape[:-1] != topology.cell_count:
            raise ValueError(
                f"array of shape {array.shape} does not fit cell count {topology.cell_count}"
            )
        values = np.moveaxis(array, -1, 0).reshape((array.shape[-1], -1), order="F")
        return cls._wrap(topology, np.array(values, order="C"))

    @classmethod
    def from_scalar(cls, topology: Topology, scalar, vector):
        """Per-cell ``scalar`` times a constant ``vector``."""
        scalar = np.broadcast_to(np.asarray(scalar, dtype=DTYPE), (topology.total_cell_count,))
        return cls._wrap(topology, np.asarray(vector, dtype=DTYPE)[:, None] * scalar[None, :])

    def to_array(self) -> np.ndarray:
        """Values shaped ``cell_count + (components,)``."""
        return np.moveaxis(self.grid, 0, -1).copy()

    def _check(self, other: "RealVectorField"):
        if self.topology != other.topology:
            raise ValueError(f"topologies differ: {self.topology} vs {other.topology}")

    def add(self, other: "RealVectorField") -> "RealVectorField":
        self._check(other)
        return RealVectorField._wrap(self.topology, self._values + other._values)

    def sub(self, other: "RealVectorField") -> "RealVectorField":
        self._check(other)
        return RealVectorField._wrap(self.topology, self._values - other._values)

    def times(self, factor) -> "RealVectorField":
        """Scale by a number or by a per-cell scalar array."""
        return RealVectorField._wrap(
            self.topology, self._values * np.asarray(factor, dtype=DTYPE)
        )

    __add__ = add
    __sub__ = sub

    def __mul__(self, factor):
        return self.times(factor)

    __rmul__ = __mul__

    def __neg__(self):
        return self.times(-1.0)

    def dot(self, vector) -> np.ndarray:
        return np.asarray(vector, dtype=DTYPE) @ self._values

    def cross(self, other: "RealVectorField") -> "RealVectorField":
        self._check(other)
        return RealVectorField._wrap(
            self.topology, np.ascontiguousarray(np.cross(self._values, other._values, axis=0))
        )

    def norms(self) -> np.ndarray:
        return np.linalg.norm(self._values, axis=0)

    def average(self) -> np.ndarray:
        return self._values.mean(axis=1)

    def average_norm(self) -> float:
        return float(self.norms().mean())

    def max_norm(self) -> float:
        return float(self.norms().max())

    def normalized(self, norm: float = 1.0) -> "RealVectorField":
        norms = self.norms()
        scale = np.divide(norm, norms, out=np.zeros_like(norms), where=norms > 0)
        return RealVectorField._wrap(self.topology, self._values * scale)

    def resize(self, topology: Topology) -> "RealVectorField":
        return RealVectorField._wrap(topology, resize(self._values, self.topology, topology))

    def to_complex(self) -> "ComplexVectorField":
        return ComplexVectorField._wrap(self.topology, self._values.astype(CDTYPE))


class ComplexVectorField(Field):
    dtype = CDTYPE

    def real(self) -> RealVectorField:
        return RealVectorField._wrap(self.topology, np.array(self._values.real))

    def resize(self, topology: Topology) -> "ComplexVectorField":
        return ComplexVectorField._wrap(topology, resize(self._values, self.topology, topology))

    def times(self, factor) -> "ComplexVectorField":
        return ComplexVectorField._wrap(self.topology, self._values * factor)

    def fft_forward(self, backend) -> "ComplexVectorField":
        """Dense transform over every axis of the topology."""
        return ComplexVectorField._wrap(self.topology, _dense_fft(self, backend, False))

    def fft_inverse(self, backend) -> "ComplexVectorField":
        """Dense unnormalized inverse transform over every axis."""
        return ComplexVectorField._wrap(self.topology, _dense_fft(self, backend, True))


# expands the stored (xx, xy, xz, yy, yz, zz) components of a symmetric tensor
SYMMETRIC_MAP = (0, 1, 2, 1, 3, 4, 2, 4, 5)


class ComplexTensorField(Field):
    dtype = CDTYPE

    def __init__(self, topology: Topology, values, tensor_map=tuple(range(9))):
        super().__init__(topology, values)
        self.tensor_map = tuple(tensor_map)
        if len(self.tensor_map) != 9 or max(self.tensor_map) >= self.dimension:
            raise ValueError(f"invalid tensor map {self.tensor_map}")

    @classmethod
    def _wrap(cls, topology, values, tensor_map=SYMMETRIC_MAP):
        field = super()._wrap(topology, values)
        field.tensor_map = tuple(tensor_map)
        return field

    def entry(self, row: int, col: int) -> np.ndarray:
        return self._values[self.tensor_map[3 * row + col]]

    def times(self, other):
        """Multiply by a scalar or, for a complex vector field, apply the tensor per cell."""
        if isinstance(other, ComplexVectorField):
            return self.multiply(other)
        return ComplexTensorField._wrap(self.topology, self._values * other, self.tensor_map)

    __mul__ = times

    def multiply(self, vf: ComplexVectorField) -> ComplexVectorField:
        if vf.dimension != 3:
            raise ValueError(f"expected a 3-component field, got {vf.dimension}")
        if self.topology != vf.topology:
            raise ValueError(f"topologies differ: {self.topology} vs {vf.topology}")
        return ComplexVectorField._wrap(self.topology, apply_tensor(self._values, self.tensor_map, vf.values))

    def resize(self, topology: Topology) -> "ComplexTensorField":
        return ComplexTensorField._wrap(
            topology, resize(self._values, self.topology, topology), self.tensor_map
        )

    def cyclic_shift_to(self, origin) -> "ComplexTensorField":
        """
        Relocate the origin with periodic wrap-around; a value at component
        index ``c`` lands at ``c mod cell_count`` relative to the new origin.
        """
        t = self.topology
        shift = tuple(o - n for o, n in zip(t.origin, origin))
        result = np.empty_like(self._values)
        t.grid(result)[...] = np.roll(
            self.grid, shift, axis=tuple(range(1, t.dimension + 1))
        )
        return ComplexTensorField._wrap(t.with_origin(origin), result, self.tensor_map)

    def fft_forward(self, backend) -> "ComplexTensorField":
        return ComplexTensorField._wrap(
            self.topology, _dense_fft(self, backend, False), self.tensor_map
        )


def apply_tensor(tensor: np.ndarray, tensor_map, vector: np.ndarray, out=None) -> np.ndarray:
    """``out[j] = sum_k tensor[map[3j + k]] * vector[k]`` for every cell."""
    if out is None:
        out = np.empty_like(vector)
    for j in range(3):
        out[j] = (tensor[list(tensor_map[3 * j : 3 * j + 3])] * vector).sum(axis=0)
    return out


def _dense_fft(field: Field, backend, inverse: bool) -> np.ndarray:
    result = np.array(field.values, dtype=CDTYPE)
    axes = tuple(range(1, field.topology.dimension + 1))
    grid = field.topology.grid(result)
    grid[...] = backend.ifftn(grid, axes) if inverse else backend.fftn(grid, axes)
    return result
