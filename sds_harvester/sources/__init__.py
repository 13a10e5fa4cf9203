"""Source registry."""

from .base import BaseSource
from .thermofisher import ThermoFisherSource

ALL_SOURCES = {
    "thermofisher": ThermoFisherSource,
}

__all__ = ["ALL_SOURCES", "BaseSource", "ThermoFisherSource"]
