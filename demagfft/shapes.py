import numpy as np

from .topology import Topology
from .vectorfield import RealVectorField


def init_m(topology: Topology, ms: float = 1.0) -> RealVectorField:
    """S-state start: +x in the bulk, +y on the first and last x layer."""
    m = np.zeros(topology.cell_count + (3,))
    m[1:-1, ..., 0] = ms
    m[(-1, 0), ..., 1] = ms
    return RealVectorField.from_array(topology, m)


def uniform_m(topology: Topology, direction, ms: float = 1.0) -> RealVectorField:
    direction = np.asarray(direction, dtype=float)
    return RealVectorField.uniform(topology, ms * direction / np.linalg.norm(direction))


def span_grid(topology: Topology) -> np.ndarray:
    return np.mgrid[tuple(slice(o, o + n) for o, n in zip(topology.origin, topology.cell_count))]


def circular_mask(x0, y0, r, grid) -> np.ndarray:
    xx, yy = grid[0], grid[1]
    shape = (xx - x0) ** 2 + (yy - y0) ** 2
    return shape <= r**2


def apply_mask(m: RealVectorField, mask: np.ndarray) -> RealVectorField:
    """Zero ``m`` outside of ``mask``, a boolean array shaped like the cell count."""
    flat = np.asarray(mask, dtype=float).reshape(-1, order="F")
    return m.times(flat)
