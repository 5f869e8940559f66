from typing import Protocol

import numpy as np

from .config import MU0
from .state import State
from .topology import Topology
from .vectorfield import RealVectorField


class FieldTerm(Protocol):
    def calculate_field(self, state: State) -> RealVectorField:
        ...


class CompositeFieldTerm:
    """Sum of field terms."""

    def __init__(self, *terms: FieldTerm):
        self.terms = list(terms)

    def add(self, term: FieldTerm):
        self.terms.append(term)

    def calculate_field(self, state: State) -> RealVectorField:
        result = RealVectorField.empty(state.topology, state.m.dimension)
        for term in self.terms:
            result = result + term.calculate_field(state)
        return result


def laplace(m: np.ndarray, dx: tuple, n: tuple) -> np.ndarray:
    """
    Six point Laplacian of ``(components, n0, n1, n2)`` values with Neumann
    boundaries.
    """
    result = -2 * m * sum(1 / x**2 for x in dx)
    for i in range(6):
        axis = i % 3
        result += (
            np.repeat(
                m,
                1
                if n[axis] == 1
                else [(i // 3) * 2] + [1] * (n[axis] - 2) + [2 - (i // 3) * 2],
                axis=axis + 1,
            )
            / dx[axis] ** 2
        )
    return result


class ExchangeField:
    def __init__(self, A: float, ms: float):
        self.A = A
        self.ms = ms

    def calculate_field(self, state: State) -> RealVectorField:
        t = state.topology
        if t.dimension != 3:
            raise ValueError(f"exchange needs a 3-d topology, got {t}")
        h_ex = np.empty_like(state.m.values)
        t.grid(h_ex)[...] = laplace(state.m.grid, t.cell_size, t.cell_count)
        return RealVectorField._wrap(t, h_ex * (2 * self.A / (MU0 * self.ms**2)))


class UniaxialAnisotropyField:
    def __init__(self, k1: float, ms: float, axis=(0.0, 0.0, 1.0), k2: float = 0.0):
        axis = np.asarray(axis, dtype=float)
        self.axis = axis / np.linalg.norm(axis)
        self.k1_prime = 2 * k1 / (MU0 * ms**2)
        self.k2_prime = 4 * k2 / (MU0 * ms**4)

    def calculate_field(self, state: State) -> RealVectorField:
        m_dot_axis = state.m.dot(self.axis)
        return RealVectorField.from_scalar(
            state.topology,
            self.k1_prime * m_dot_axis + self.k2_prime * m_dot_axis**3,
            self.axis,
        )


class StaticZeemanField:
    def __init__(self, vector):
        self.vector = tuple(vector)
        self._field = None

    def field_on(self, topology: Topology) -> RealVectorField:
        if self._field is None or self._field.topology != topology:
            self._field = RealVectorField.uniform(topology, self.vector)
        return self._field

    def calculate_field(self, state: State) -> RealVectorField:
        if state.m.dimension != len(self.vector):
            raise ValueError(
                f"{len(self.vector)}-d field applied to a {state.m.dimension}-d magnetization"
            )
        return self.field_on(state.topology)
