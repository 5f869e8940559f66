from dataclasses import dataclass, field, replace
from typing import Any

from .topology import Topology
from .vectorfield import RealVectorField


@dataclass(frozen=True)
class State:
    """Magnetization ``m`` (A/m) at time ``t`` as seen by the field terms."""

    m: RealVectorField
    t: float = 0.0
    step: int = 0
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def topology(self) -> Topology:
        return self.m.topology

    def derive(self, m: RealVectorField, t: float) -> "State":
        return replace(self, m=m, t=t)

    def advance(self, m: RealVectorField, t: float) -> "State":
        return replace(self, m=m, t=t, step=self.step + 1)
