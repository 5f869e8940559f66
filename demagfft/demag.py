"""
Demagnetization tensor by the method of Newell et al.

The closed form ``f`` and ``g`` functions are taken from the "70 lines of
NumPy" micromagnetic code (LGPL, https://arxiv.org/abs/1411.7188); the tensor
is assembled with a 27 point second order stencil over the cell corners.
"""
import logging
import time
from concurrent.futures import ProcessPoolExecutor
from math import asinh, atan, pi, sqrt

import numpy as np
from numba import jit
from tqdm import tqdm

from .config import CDTYPE, DEMAG_WORKERS, DTYPE
from .topology import Topology
from .vectorfield import SYMMETRIC_MAP, ComplexTensorField

logger = logging.getLogger(__name__)

# rows of (coefficient, dx0, dx1, dx2)
STENCIL = np.array(
    [
        [8, 0, 0, 0],
        [-4, 1, 0, 0], [-4, -1, 0, 0], [-4, 0, 1, 0],
        [-4, 0, -1, 0], [-4, 0, 0, 1], [-4, 0, 0, -1],
        [2, 1, 1, 0], [2, 1, -1, 0], [2, -1, 1, 0], [2, -1, -1, 0],
        [2, 1, 0, 1], [2, 1, 0, -1], [2, -1, 0, 1], [2, -1, 0, -1],
        [2, 0, 1, 1], [2, 0, 1, -1], [2, 0, -1, 1], [2, 0, -1, -1],
        [-1, 1, 1, 1], [-1, 1, 1, -1], [-1, 1, -1, 1], [-1, 1, -1, -1],
        [-1, -1, 1, 1], [-1, -1, 1, -1], [-1, -1, -1, 1], [-1, -1, -1, -1],
    ],
    dtype=np.int64,
)


@jit(nopython=True, cache=True)
def f(x, y, z):
    x, y, z = abs(x), abs(y), abs(z)
    x2, y2, z2 = x * x, y * y, z * z
    R = sqrt(x2 + y2 + z2)
    result = 1.0 / 6.0 * (2.0 * x2 - y2 - z2) * R
    if x2 + z2 > 0.0:
        result += y / 2.0 * (z2 - x2) * asinh(y / sqrt(x2 + z2))
    if x2 + y2 > 0.0:
        result += z / 2.0 * (y2 - x2) * asinh(z / sqrt(x2 + y2))
    if x * R > 0.0:
        result -= x * y * z * atan(y * z / (x * R))
    return result


@jit(nopython=True, cache=True)
def g(x, y, z):
    z = abs(z)
    x2, y2, z2 = x * x, y * y, z * z
    R = sqrt(x2 + y2 + z2)
    result = -x * y * R / 3.0
    if x2 + y2 > 0.0:
        result += x * y * z * asinh(z / sqrt(x2 + y2))
    if x2 + z2 > 0.0:
        result += x / 6.0 * (3.0 * z2 - x2) * asinh(y / sqrt(x2 + z2))
    if y2 + z2 > 0.0:
        result += y / 6.0 * (3.0 * z2 - y2) * asinh(x / sqrt(y2 + z2))
    if x * R != 0.0:
        result -= z * x2 / 2.0 * atan(y * z / (x * R))
    if y * R != 0.0:
        result -= z * y2 / 2.0 * atan(x * z / (y * R))
    if z * R != 0.0:
        result -= z2 * z / 6.0 * atan(x * y / (z * R))
    return result


@jit(nopython=True, cache=True)
def nxx(x, y, z, dx, dy, dz):
    result = 0.0
    for i in range(STENCIL.shape[0]):
        c = STENCIL[i]
        result += c[0] * f(x + c[1] * dx, y + c[2] * dy, z + c[3] * dz)
    return result / (4.0 * pi * dx * dy * dz)


@jit(nopython=True, cache=True)
def nxy(x, y, z, dx, dy, dz):
    result = 0.0
    for i in range(STENCIL.shape[0]):
        c = STENCIL[i]
        result += c[0] * g(x + c[1] * dx, y + c[2] * dy, z + c[3] * dz)
    return result / (4.0 * pi * dx * dy * dz)


@jit(nopython=True, cache=True)
def _evaluate(diagonal, x, y, z, dx, dy, dz):
    out = np.empty(x.shape[0], dtype=np.float64)
    for i in range(x.shape[0]):
        if diagonal:
            out[i] = nxx(x[i], y[i], z[i], dx, dy, dz)
        else:
            out[i] = nxy(x[i], y[i], z[i], dx, dy, dz)
    return out


# (diagonal, axis permutation) for xx, xy, xz, yy, yz, zz; coordinates and
# cell sizes are permuted together
COMPONENTS = (
    (True, (0, 1, 2)),
    (False, (0, 1, 2)),
    (False, (0, 2, 1)),
    (True, (1, 0, 2)),
    (False, (1, 2, 0)),
    (True, (2, 1, 0)),
)


def tensor_component(positions: np.ndarray, dx, diagonal: bool, permute) -> np.ndarray:
    """One tensor component at the ``(3, N)`` relative ``positions``."""
    x, y, z = (np.ascontiguousarray(positions[k], dtype=DTYPE) for k in permute)
    return _evaluate(diagonal, x, y, z, *(float(dx[k]) for k in permute))


def compute_demag_tensor(
    topology: Topology, max_workers: int = None, progress: bool = False
) -> ComplexTensorField:
    """
    Demagnetization tensor over the distance topology of ``topology``.

    The result stores the (xx, xy, xz, yy, yz, zz) components with a zero
    imaginary part; the zero distance sits at component index ``(0, 0, 0)``.
    """
    if topology.dimension != 3:
        raise ValueError(f"the demag tensor needs a 3-d topology, got {topology}")
    max_workers = DEMAG_WORKERS if max_workers is None else max_workers
    distance = topology.distance_topology()
    positions = distance.positions()
    start = time.time()

    values = np.zeros((6, distance.total_cell_count), dtype=CDTYPE)
    with tqdm(total=len(COMPONENTS), desc="Demag tensor", disable=not progress) as bar:
        if max_workers > 1:
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                futures = [
                    executor.submit(
                        tensor_component, positions, topology.cell_size, diagonal, permute
                    )
                    for diagonal, permute in COMPONENTS
                ]
                for i, future in enumerate(futures):
                    values[i].real = future.result()
                    bar.update()
        else:
            for i, (diagonal, permute) in enumerate(COMPONENTS):
                values[i].real = tensor_component(
                    positions, topology.cell_size, diagonal, permute
                )
                bar.update()

    logger.info(
        "demag tensor for %s cells computed in %.2fs",
        "x".join(map(str, topology.cell_count)),
        time.time() - start,
    )
    return ComplexTensorField._wrap(distance, values, SYMMETRIC_MAP)
