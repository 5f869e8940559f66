"""
Batched 1-D complex FFTs over strided buffers.

A transform is described in the manner of the FFTW guru interface: a single
transform dimension ``(n, istride, ostride)`` and a list of loop dimensions
whose Cartesian product gives the starting offsets of the repeated 1-D
transforms. Loop lengths may be shorter than the physical axis, in which case
only the leading part of that axis is visited.

Buffers are flat ``complex128`` arrays, strides count complex elements.
Inverse transforms are not normalized.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from math import prod

import numpy as np

from .config import CDTYPE, FFT_BACKEND, FFT_WORKERS

logger = logging.getLogger(__name__)


class Direction(Enum):
    FORWARD = -1
    INVERSE = +1


@dataclass(frozen=True)
class Dimension:
    n: int
    istride: int
    ostride: int

    def __post_init__(self):
        if self.n < 1:
            raise ValueError(f"dimension length must be positive, got {self.n}")

    @staticmethod
    def col_major(*sizes: int) -> tuple["Dimension", ...]:
        dims, stride = [], 1
        for n in sizes:
            dims.append(Dimension(n, stride, stride))
            stride *= n
        return tuple(dims)

    @staticmethod
    def count(dims) -> int:
        """Number of points spanned by ``dims``."""
        return prod(d.n for d in dims)


@dataclass(frozen=True)
class Spec:
    direction: Direction
    transform: Dimension
    loop: tuple[Dimension, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "loop", tuple(self.loop))

    @property
    def num_transforms(self) -> int:
        return Dimension.count(self.loop)

    @property
    def num_data_points(self) -> int:
        return self.transform.n * self.num_transforms

    @property
    def input_extent(self) -> int:
        """Smallest input buffer length this spec may touch."""
        return 1 + sum((d.n - 1) * d.istride for d in (self.transform,) + self.loop)

    @property
    def output_extent(self) -> int:
        return 1 + sum((d.n - 1) * d.ostride for d in (self.transform,) + self.loop)


class NumpyBackend:
    """Portable backend on top of ``numpy.fft``."""

    name = "numpy"

    def fft(self, a: np.ndarray, direction: Direction) -> np.ndarray:
        if direction is Direction.FORWARD:
            return np.fft.fft(a, axis=-1)
        return np.fft.ifft(a, axis=-1, norm="forward")

    def fftn(self, a: np.ndarray, axes) -> np.ndarray:
        return np.fft.fftn(a, axes=axes)

    def ifftn(self, a: np.ndarray, axes) -> np.ndarray:
        return np.fft.ifftn(a, axes=axes, norm="forward")


class ScipyBackend:
    """Accelerated backend on top of ``scipy.fft`` with optional worker threads."""

    name = "scipy"

    def __init__(self, workers: int = None):
        import scipy.fft

        self._fft = scipy.fft
        self.workers = FFT_WORKERS if workers is None else workers

    def fft(self, a: np.ndarray, direction: Direction) -> np.ndarray:
        if direction is Direction.FORWARD:
            return self._fft.fft(a, axis=-1, workers=self.workers, overwrite_x=True)
        return self._fft.ifft(
            a, axis=-1, norm="forward", workers=self.workers, overwrite_x=True
        )

    def fftn(self, a: np.ndarray, axes) -> np.ndarray:
        return self._fft.fftn(a, axes=axes, workers=self.workers)

    def ifftn(self, a: np.ndarray, axes) -> np.ndarray:
        return self._fft.ifftn(a, axes=axes, norm="forward", workers=self.workers)


BACKENDS = {"numpy": NumpyBackend, "scipy": ScipyBackend}


def get_backend(name: str = None, **kwargs):
    """
    Instantiate an FFT backend by name, ``None`` picks ``config.FFT_BACKEND``.
    An accelerated backend that cannot be loaded degrades to numpy.
    """
    name = FFT_BACKEND if name is None else name
    if name not in BACKENDS:
        raise ValueError(f"unknown FFT backend {name!r}, choose from {sorted(BACKENDS)}")
    try:
        return BACKENDS[name](**kwargs)
    except ImportError as e:
        logger.warning("FFT backend %r unavailable (%s), falling back to numpy", name, e)
        return NumpyBackend()


def loop_offsets(loop) -> tuple[np.ndarray, np.ndarray]:
    """
    Input and output offsets of every position spanned by the loop
    dimensions, outermost dimension first.
    """
    count = Dimension.count(loop)
    in_offsets = np.empty(count, dtype=np.intp)
    out_offsets = np.empty(count, dtype=np.intp)
    counter = [0] * len(loop)
    in_offset = out_offset = 0
    for k in range(count):
        in_offsets[k] = in_offset
        out_offsets[k] = out_offset
        # mixed-radix increment, carry towards the outer dimensions
        for axis in range(len(loop) - 1, -1, -1):
            dim = loop[axis]
            counter[axis] += 1
            in_offset += dim.istride
            out_offset += dim.ostride
            if counter[axis] < dim.n:
                break
            counter[axis] = 0
            in_offset -= dim.n * dim.istride
            out_offset -= dim.n * dim.ostride
    return in_offsets, out_offsets


class StridedFFT:
    """
    Executes a :class:`Spec`. The gather and scatter indices of the repeated
    transforms are computed once; the instance holds no per-call state and may be shared.
    """

    def __init__(self, spec: Spec, backend=None):
        self.spec = spec
        self.backend = get_backend() if backend is None else backend
        in_offsets, out_offsets = loop_offsets(spec.loop)
        steps = np.arange(spec.transform.n, dtype=np.intp)
        # (transforms, n) gather and scatter indices into the flat buffers
        self._in_index = in_offsets[:, None] + (steps * spec.transform.istride)[None, :]
        self._out_index = out_offsets[:, None] + (steps * spec.transform.ostride)[None, :]
        logger.debug(
            "%s FFT: transform %s, loop %s, %d transforms",
            spec.direction.name.lower(),
            spec.transform,
            spec.loop,
            spec.num_transforms,
        )

    def transform(self, data: np.ndarray, out: np.ndarray = None) -> np.ndarray:
        """Transform ``data`` into ``out``, in place if ``out`` is omitted."""
        if out is None:
            out = data
        assert data.dtype == CDTYPE and out.dtype == CDTYPE
        assert data.ndim == 1 and data.size >= self.spec.input_extent
        assert out.ndim == 1 and out.size >= self.spec.output_extent

        if self.spec.transform.n == 1:
            if out is not data:
                out[self._out_index] = data[self._in_index]
            return out
        out[self._out_index] = self.backend.fft(data[self._in_index], self.spec.direction)
        return out
