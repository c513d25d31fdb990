"""Symbolic asset name resolution."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from vnscript.config import get_logger
from vnscript.config.settings import load_data_file
from vnscript.exceptions import AssetManifestError, ConfigurationError
from vnscript.types import AssetIdentifier

logger = get_logger(__name__)


class AssetCategory(str, Enum):
    """Kinds of media a script can refer to by name."""

    BACKGROUND = "BG"
    SPRITE = "LH"
    CG = "CG"
    VIDEO = "VIDEO"


_CATEGORY_KEYS: dict[str, AssetCategory] = {
    "bg": AssetCategory.BACKGROUND,
    "background": AssetCategory.BACKGROUND,
    "backgrounds": AssetCategory.BACKGROUND,
    "lh": AssetCategory.SPRITE,
    "sprite": AssetCategory.SPRITE,
    "sprites": AssetCategory.SPRITE,
    "cg": AssetCategory.CG,
    "video": AssetCategory.VIDEO,
    "videos": AssetCategory.VIDEO,
}


def github_blob_to_raw(url: str) -> str:
    """Rewrite a github.com blob URL to its raw.githubusercontent.com form."""
    if "github.com" not in url or "/blob/" not in url:
        return url
    return url.replace("github.com", "raw.githubusercontent.com", 1).replace(
        "/blob/", "/", 1
    )


class AssetResolver:
    """Case-insensitive lookup from symbolic names to media identifiers."""

    def __init__(
        self,
        catalog: Mapping[AssetCategory, Mapping[str, AssetIdentifier]] | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            catalog: Per-category mapping of symbolic name to identifier.
        """
        self._names: dict[AssetCategory, list[str]] = {}
        self._index: dict[AssetCategory, dict[str, AssetIdentifier]] = {}
        for category, entries in (catalog or {}).items():
            category = AssetCategory(category)
            names = self._names.setdefault(category, [])
            index = self._index.setdefault(category, {})
            for name, identifier in entries.items():
                key = str(name).strip().casefold()
                if key not in index:
                    names.append(str(name))
                index[key] = str(identifier)

    def resolve(
        self, category: AssetCategory, name: str | None
    ) -> AssetIdentifier | None:
        """Resolve a symbolic name, or return None when it is unknown."""
        if not name or not name.strip():
            return None
        found = self._index.get(category, {}).get(name.strip().casefold())
        if found is None:
            logger.debug(
                "Asset name not found", category=category.value, name=name.strip()
            )
        return found

    def names(self, category: AssetCategory) -> list[str]:
        """Return the symbolic names registered for a category."""
        return list(self._names.get(category, []))

    def __len__(self) -> int:
        return sum(len(index) for index in self._index.values())

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> AssetResolver:
        """Build a resolver from a manifest-shaped dictionary.

        Top-level keys name categories (``BG``, ``LH``, ``CG``, ``VIDEO`` or
        their long forms). A ``raw_github`` flag rewrites GitHub blob URLs.

        Args:
            data: Parsed manifest.

        Returns:
            Resolver over the manifest entries.

        Raises:
            AssetManifestError: If a category section is not a mapping.
        """
        rewrite = bool(data.get("raw_github", False))
        catalog: dict[AssetCategory, dict[str, str]] = {}
        for raw_key, section in data.items():
            if raw_key == "raw_github":
                continue
            category = _CATEGORY_KEYS.get(str(raw_key).strip().casefold())
            if category is None:
                logger.warning("Ignoring unknown asset category", category=raw_key)
                continue
            if not isinstance(section, Mapping):
                raise AssetManifestError(
                    message=f"Asset category '{raw_key}' must map names to identifiers",
                    details={"category": raw_key, "found": type(section).__name__},
                )
            entries = catalog.setdefault(category, {})
            for name, identifier in section.items():
                identifier = str(identifier)
                entries[str(name)] = (
                    github_blob_to_raw(identifier) if rewrite else identifier
                )
        return cls(catalog)

    @classmethod
    def from_file(cls, path: Path | str) -> AssetResolver:
        """Load a resolver from a YAML, TOML or JSON manifest.

        Raises:
            AssetManifestError: If the file is missing or cannot be parsed.
        """
        path = Path(path)
        if not path.is_file():
            raise AssetManifestError(
                message=f"Asset manifest not found: {path}",
                hint="Set VNSCRIPT_ASSET_MANIFEST or pass --assets",
            )
        try:
            data = load_data_file(path)
        except ConfigurationError as e:
            raise AssetManifestError(
                message=e.message, hint=e.hint, details=e.details
            ) from e
        except (
            OSError,
            UnicodeDecodeError,
            yaml.YAMLError,
            tomllib.TOMLDecodeError,
            json.JSONDecodeError,
        ) as e:
            raise AssetManifestError(
                message=f"Failed to read asset manifest: {path}",
                details={"file": str(path), "error": str(e)},
            ) from e
        resolver = cls.from_mapping(data)
        logger.info("Loaded asset manifest", file=str(path), assets=len(resolver))
        return resolver
