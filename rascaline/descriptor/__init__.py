from .indexes import IndexValue, Indexes, IndexesBuilder
from .descriptor import Descriptor
from .kernel import dot
from .samples import (SamplesBuilder, StructureSpeciesSamples,
                      TwoBodiesSpeciesSamples)

__all__ = [
    "IndexValue",
    "Indexes",
    "IndexesBuilder",
    "Descriptor",
    "dot",
    "SamplesBuilder",
    "StructureSpeciesSamples",
    "TwoBodiesSpeciesSamples",
]
