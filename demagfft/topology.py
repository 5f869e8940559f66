"""
Rectilinear, uniformly spaced grids.

A topology is described by the number of cells per axis, the edge lengths of
a cell and the origin of the grid in units of cells. Cells are stored in
column-major order, so the linear index of the cell ``(i, j, k)`` is
``i + n0 * j + n0 * n1 * k`` (relative to the origin).

Three kinds of indices are in use:

- linear index: position in the flat storage,
- component index (cidx): integer coordinates, the origin may be negative,
- position: component index weighted with the cell size.
"""
from dataclasses import dataclass
from math import prod

import numpy as np


@dataclass(frozen=True)
class Topology:
    cell_count: tuple[int, ...]
    cell_size: tuple[float, ...]
    origin: tuple[int, ...] = None

    def __post_init__(self):
        cell_count = tuple(int(n) for n in self.cell_count)
        cell_size = tuple(float(dx) for dx in self.cell_size)
        origin = (
            (0,) * len(cell_count)
            if self.origin is None
            else tuple(int(o) for o in self.origin)
        )
        if not cell_count:
            raise ValueError("a topology needs at least one axis")
        if not len(cell_count) == len(cell_size) == len(origin):
            raise ValueError(
                f"cell count {cell_count}, cell size {cell_size} and origin "
                f"{origin} differ in dimension"
            )
        if any(n < 1 for n in cell_count):
            raise ValueError(f"cell counts must be positive, got {cell_count}")
        if any(dx <= 0.0 for dx in cell_size):
            raise ValueError(f"cell sizes must be positive, got {cell_size}")
        object.__setattr__(self, "cell_count", cell_count)
        object.__setattr__(self, "cell_size", cell_size)
        object.__setattr__(self, "origin", origin)

    @classmethod
    def from_size(cls, size: tuple[float], cell_count: tuple[int], origin=None):
        """Build a topology from the total edge lengths instead of cell sizes."""
        return cls(
            cell_count, tuple(s / n for s, n in zip(size, cell_count)), origin
        )

    @property
    def dimension(self) -> int:
        return len(self.cell_count)

    @property
    def stride(self) -> tuple[int, ...]:
        """Column-major strides, ``stride[dimension]`` is the total cell count."""
        stride = [1]
        for n in self.cell_count:
            stride.append(stride[-1] * n)
        return tuple(stride)

    @property
    def total_cell_count(self) -> int:
        return prod(self.cell_count)

    @property
    def cell_volume(self) -> float:
        return prod(self.cell_size)

    def max_index(self, i: int) -> int:
        """Exclusive upper bound of the component index along axis ``i``."""
        return self.origin[i] + self.cell_count[i]

    def cidx(self, lidx: int) -> tuple[int, ...]:
        stride = self.stride
        return tuple(
            (lidx % stride[i + 1]) // stride[i] + self.origin[i]
            for i in range(self.dimension)
        )

    def lidx(self, cidx) -> int:
        if len(cidx) != self.dimension:
            raise ValueError(f"{cidx} is not a {self.dimension}-d index")
        stride = self.stride
        return sum((c - o) * s for c, o, s in zip(cidx, self.origin, stride))

    def has_cidx(self, cidx) -> bool:
        return all(o <= c < o + n for c, o, n in zip(cidx, self.origin, self.cell_count))

    def position(self, lidx: int) -> tuple[float, ...]:
        return tuple(c * dx for c, dx in zip(self.cidx(lidx), self.cell_size))

    def coordinates(self) -> np.ndarray:
        """Component indices of all cells, shape ``(dimension, total_cell_count)``."""
        lidx = np.arange(self.total_cell_count)
        stride = self.stride
        return np.stack(
            [
                (lidx % stride[i + 1]) // stride[i] + self.origin[i]
                for i in range(self.dimension)
            ]
        )

    def positions(self) -> np.ndarray:
        """Positions of all cells, shape ``(dimension, total_cell_count)``."""
        return self.coordinates() * np.asarray(self.cell_size)[:, None]

    def distance_topology(self) -> "Topology":
        """
        Topology holding every possible distance between two cells.

        The cell count becomes ``2 * n - 1`` with origin ``1 - n`` so that
        the component index ``(0, ..., 0)`` is the zero distance.
        """
        return Topology(
            tuple(2 * n - 1 for n in self.cell_count),
            self.cell_size,
            tuple(1 - n for n in self.cell_count),
        )

    def with_origin(self, origin) -> "Topology":
        return Topology(self.cell_count, self.cell_size, origin)

    def reset_origin(self) -> "Topology":
        return self.with_origin((0,) * self.dimension)

    def with_cell_count(self, cell_count) -> "Topology":
        return Topology(cell_count, self.cell_size, self.origin)

    def neighbor_strides(self) -> np.ndarray:
        """
        Linear index offsets to the neighbours of each cell.

        Shape ``(total_cell_count, 2 * dimension)``, columns ordered
        ``[-x, +x, -y, +y, ...]``; the entry is 0 where the neighbour lies
        outside of the topology.
        """
        coords = self.coordinates() - np.asarray(self.origin)[:, None]
        stride = self.stride
        result = np.zeros((self.total_cell_count, 2 * self.dimension), dtype=int)
        for i in range(self.dimension):
            result[:, 2 * i] = np.where(coords[i] > 0, -stride[i], 0)
            result[:, 2 * i + 1] = np.where(
                coords[i] < self.cell_count[i] - 1, stride[i], 0
            )
        return result

    def grid(self, values: np.ndarray) -> np.ndarray:
        """
        View of ``(components, total_cell_count)`` values as
        ``(components, n0, n1, ...)``, writes go through to ``values``.
        """
        components = values.shape[0]
        d = self.dimension
        return values.reshape((components,) + self.cell_count[::-1]).transpose(
            (0,) + tuple(range(d, 0, -1))
        )

    def __str__(self):
        return (
            f"Origin: {', '.join(map(str, self.origin))}, "
            f"Cell Count: {', '.join(map(str, self.cell_count))}, "
            f"Cell Size: {', '.join(map(str, self.cell_size))}"
        )


def resize(values: np.ndarray, source: Topology, target: Topology) -> np.ndarray:
    """
    Copy ``(components, source.total_cell_count)`` values onto ``target``.

    The intersection of both index ranges is copied, regions of ``target``
    not covered by ``source`` are zero filled and regions of ``source`` not
    covered by ``target`` are dropped.
    """
    if source.dimension != target.dimension:
        raise ValueError(
            f"cannot resize a {source.dimension}-d topology to {target.dimension}-d"
        )
    result = np.zeros((values.shape[0], target.total_cell_count), dtype=values.dtype)
    src_slices, dst_slices = [slice(None)], [slice(None)]
    for i in range(source.dimension):
        start = max(source.origin[i], target.origin[i])
        stop = min(source.max_index(i), target.max_index(i))
        if stop <= start:
            return result
        src_slices.append(slice(start - source.origin[i], stop - source.origin[i]))
        dst_slices.append(slice(start - target.origin[i], stop - target.origin[i]))
    target.grid(result)[tuple(dst_slices)] = source.grid(values)[tuple(src_slices)]
    return result
