import logging

from .demag import compute_demag_tensor
from .fft import Dimension, Direction, Spec, StridedFFT, get_backend
from .fields import (
    CompositeFieldTerm,
    ExchangeField,
    FieldTerm,
    StaticZeemanField,
    UniaxialAnisotropyField,
)
from .solver import DemagField, ReferenceDemagField, fft_cost_fraction
from .state import State
from .topology import Topology, resize
from .vectorfield import ComplexTensorField, ComplexVectorField, RealVectorField

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CompositeFieldTerm",
    "ComplexTensorField",
    "ComplexVectorField",
    "DemagField",
    "Dimension",
    "Direction",
    "ExchangeField",
    "FieldTerm",
    "RealVectorField",
    "ReferenceDemagField",
    "Spec",
    "State",
    "StaticZeemanField",
    "StridedFFT",
    "Topology",
    "UniaxialAnisotropyField",
    "compute_demag_tensor",
    "fft_cost_fraction",
    "get_backend",
    "resize",
]
