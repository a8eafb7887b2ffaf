"""
pipebench -- Properties

Temporal formulas over compiled pipeline models, and the catalog that
builds them by name.
"""

from pipebench.properties.catalog import PropertyCatalog
from pipebench.properties.formulas import (
    BoundedLiveness,
    Liveness,
    NoFullQueues,
    OutputAlwaysEven,
    OutputAlwaysTrue,
    PropertyFormula,
    SequenceEquivalence,
    StepEquivalence,
    XStaysNull,
)

__all__ = [
    "BoundedLiveness",
    "Liveness",
    "NoFullQueues",
    "OutputAlwaysEven",
    "OutputAlwaysTrue",
    "PropertyCatalog",
    "PropertyFormula",
    "SequenceEquivalence",
    "StepEquivalence",
    "XStaysNull",
]
