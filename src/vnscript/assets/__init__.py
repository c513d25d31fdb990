"""Asset name resolution for script commands."""

from __future__ import annotations

from .resolver import AssetCategory, AssetResolver, github_blob_to_raw

__all__ = ["AssetCategory", "AssetResolver", "github_blob_to_raw"]
