"""Domain port definitions for adapters."""

from __future__ import annotations

from .assets import AssetResolution, AssetSetResolver
from .hosting import ReleaseHostingService
from .reporting import OutputReporter

__all__ = [
    "AssetResolution",
    "AssetSetResolver",
    "OutputReporter",
    "ReleaseHostingService",
]
