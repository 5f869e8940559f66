"""
FFT accelerated demagnetization field.

The field ``H = -N * M`` is a convolution of the magnetization with the
demagnetization tensor over the distance topology. Magnetization is zero
padded onto the tensor topology, transformed, multiplied with the
transformed tensor and transformed back.

:class:`DemagField` skips the parts of the transform that act on known
zeros: before an axis is transformed, every axis that is still untouched
only carries data in its leading half, so the loops over those axes stop at
``n // 2 + 1``. The inverse transform mirrors this, once an axis is back in
real space only its leading half is needed for the cropped result. In 3-d
this costs 7/12 of a dense transform, see :func:`fft_cost_fraction`.
"""
import logging
from fractions import Fraction

import numpy as np

from .config import CDTYPE
from .demag import compute_demag_tensor
from .fft import Dimension, Direction, Spec, StridedFFT, get_backend
from .topology import Topology, resize
from .vectorfield import ComplexTensorField, RealVectorField, apply_tensor

logger = logging.getLogger(__name__)


def padded_cell_count(cell_count) -> tuple[int, ...]:
    """Round every count above 1 up to a multiple of 4."""
    return tuple(n if n == 1 or n % 4 == 0 else n + 4 - n % 4 for n in cell_count)


def optimize_tensor_size(tensor: ComplexTensorField) -> ComplexTensorField:
    """
    Zero pad the tensor so every axis length is a multiple of 4 and shift it
    cyclically so the zero distance sits at linear index 0.
    """
    t = tensor.topology
    return tensor.resize(t.with_cell_count(padded_cell_count(t.cell_count))).cyclic_shift_to(
        (0,) * t.dimension
    )


def _loop(topology: Topology, axis: int, restrict) -> list[Dimension]:
    stride = topology.stride
    loop = []
    for j in reversed(range(topology.dimension)):
        if j == axis:
            continue
        n = topology.cell_count[j]
        if restrict(j):
            n = n // 2 + 1
        loop.append(Dimension(n, stride[j], stride[j]))
    return loop


def forward_specs(topology: Topology, restricted: bool = True) -> list[Spec]:
    """Forward specs in execution order, axis 0 first."""
    stride = topology.stride
    return [
        Spec(
            Direction.FORWARD,
            Dimension(topology.cell_count[i], stride[i], stride[i]),
            _loop(topology, i, lambda j: restricted and j > i),
        )
        for i in range(topology.dimension)
    ]


def inverse_specs(topology: Topology, restricted: bool = True) -> list[Spec]:
    """Inverse specs in execution order, last axis first."""
    stride = topology.stride
    return [
        Spec(
            Direction.INVERSE,
            Dimension(topology.cell_count[i], stride[i], stride[i]),
            _loop(topology, i, lambda j: restricted and j > i),
        )
        for i in reversed(range(topology.dimension))
    ]


def fft_cost_fraction(topology: Topology) -> Fraction:
    """
    Data points visited by the restricted forward transform relative to a
    dense one, for the padded tensor topology of the sample ``topology``.
    Tends to ``(2 - 2 ** (1 - d)) / d`` for large even axes.
    """
    t = topology.distance_topology()
    t = t.with_cell_count(padded_cell_count(t.cell_count))
    # length 1 transforms are no-ops
    restricted = sum(s.num_data_points for s in forward_specs(t, True) if s.transform.n > 1)
    full = sum(s.num_data_points for s in forward_specs(t, False) if s.transform.n > 1)
    return Fraction(restricted, full) if full else Fraction(1)


class _ConvolutionField:
    """
    Shared plumbing of the demag solvers: backend selection, zero padding of
    the magnetization onto the FFT topology and cropping of the result.
    """

    def __init__(self, topology: Topology, backend=None):
        self.backend = backend if hasattr(backend, "fft") else get_backend(backend)
        self.topology = topology

    @property
    def tensor(self) -> ComplexTensorField:
        """The scaled, transformed tensor on :attr:`fft_topology`."""
        return self._tensor

    def _pad(self, m: RealVectorField) -> np.ndarray:
        if m.topology != self.topology:
            raise ValueError(
                f"magnetization lives on {m.topology}, field was set up for {self.topology}"
            )
        if m.dimension != 3:
            raise ValueError(f"expected a 3-component magnetization, got {m.dimension}")
        return resize(m.values, self.topology.reset_origin(), self.fft_topology).astype(CDTYPE)

    def _crop(self, values: np.ndarray) -> RealVectorField:
        return RealVectorField._wrap(
            self.topology, resize(values.real, self.fft_topology, self.topology.reset_origin())
        )

    def compute_field(self, m: RealVectorField) -> RealVectorField:
        raise NotImplementedError

    def calculate_field(self, state) -> RealVectorField:
        return self.compute_field(state.m)


class DemagField(_ConvolutionField):
    """
    Demagnetization field term for a fixed sample topology.

    The transformed tensor and the FFT engines are built once; evaluation
    works on per-call buffers and may run concurrently.
    """

    def __init__(
        self,
        topology: Topology,
        backend=None,
        restricted: bool = True,
        max_workers: int = None,
        progress: bool = False,
    ):
        super().__init__(topology, backend)

        tensor = optimize_tensor_size(
            compute_demag_tensor(topology, max_workers=max_workers, progress=progress)
        )
        t = self.fft_topology = tensor.topology

        # the tensor is dense, transform it over the full extent
        values = np.array(tensor.values)
        engines = [StridedFFT(spec, self.backend) for spec in forward_specs(t, restricted=False)]
        for component in values:
            for engine in engines:
                engine.transform(component)
        values *= -1.0 / t.total_cell_count
        self._tensor = ComplexTensorField._wrap(t, values, tensor.tensor_map)

        self._forward = [StridedFFT(s, self.backend) for s in forward_specs(t, restricted)]
        self._inverse = [StridedFFT(s, self.backend) for s in inverse_specs(t, restricted)]
        logger.info(
            "demag field for %s cells on %s FFT grid, %s backend, FFT cost %.3f",
            "x".join(map(str, topology.cell_count)),
            "x".join(map(str, t.cell_count)),
            self.backend.name,
            float(fft_cost_fraction(topology)) if restricted else 1.0,
        )

    def compute_field(self, m: RealVectorField) -> RealVectorField:
        data = self._pad(m)
        for component in data:
            for fft in self._forward:
                fft.transform(component)

        result = apply_tensor(self._tensor.values, self._tensor.tensor_map, data)

        for component in result:
            for ifft in self._inverse:
                ifft.transform(component)
        return self._crop(result)


class ReferenceDemagField(_ConvolutionField):
    """
    Straightforward variant: no size rounding, dense multi-axis transforms of
    the whole distance topology.
    """

    def __init__(
        self, topology: Topology, backend=None, max_workers: int = None, progress: bool = False
    ):
        super().__init__(topology, backend)

        tensor = compute_demag_tensor(
            topology, max_workers=max_workers, progress=progress
        ).cyclic_shift_to((0,) * topology.dimension)
        self.fft_topology = tensor.topology
        self._tensor = tensor.fft_forward(self.backend).times(
            -1.0 / self.fft_topology.total_cell_count
        )

    def compute_field(self, m: RealVectorField) -> RealVectorField:
        t = self.fft_topology
        axes = tuple(range(1, t.dimension + 1))
        data = self._pad(m)
        grid = t.grid(data)
        grid[...] = self.backend.fftn(grid, axes)
        result = apply_tensor(self._tensor.values, self._tensor.tensor_map, data)
        grid = t.grid(result)
        grid[...] = self.backend.ifftn(grid, axes)
        return self._crop(result)
