"""
Index algebra for atomistic machine-learning representations.

"""

import os

from .exceptions import InternalError, InvalidParameter, RascalError
from .descriptor import (Descriptor, Indexes, IndexesBuilder, IndexValue,
                         StructureSpeciesSamples, TwoBodiesSpeciesSamples,
                         dot)
from .systems import SimpleSystem, System, UnitCell

with open(os.path.join(os.path.dirname(__file__), "VERSION")) as _fp:
    __version__ = _fp.read().strip()

__all__ = [
    "RascalError",
    "InvalidParameter",
    "InternalError",
    "Descriptor",
    "Indexes",
    "IndexesBuilder",
    "IndexValue",
    "StructureSpeciesSamples",
    "TwoBodiesSpeciesSamples",
    "dot",
    "SimpleSystem",
    "System",
    "UnitCell",
]
