"""Public interface for the GitHub adapter."""

from __future__ import annotations

from .client import PAGE_SIZE, GitHubReleaseService
from .schema import AssetPayload, ErrorPayload, RefPayload, ReleasePayload
from .translator import parse_asset, parse_ref, parse_release, upload_endpoint

__all__ = [
    "PAGE_SIZE",
    "AssetPayload",
    "ErrorPayload",
    "GitHubReleaseService",
    "RefPayload",
    "ReleasePayload",
    "parse_asset",
    "parse_ref",
    "parse_release",
    "upload_endpoint",
]
