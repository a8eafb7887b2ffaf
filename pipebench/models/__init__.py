"""
pipebench -- Models

Model providers and the library that hands them out per configuration.
"""

from pipebench.models.library import ModelLibrary
from pipebench.models.provider import (
    DummyModelProvider,
    GraphModelProvider,
    ModelFacts,
    ModelProvider,
)

__all__ = [
    "DummyModelProvider",
    "GraphModelProvider",
    "ModelFacts",
    "ModelLibrary",
    "ModelProvider",
]
