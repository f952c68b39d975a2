"""Error types raised by the catalog browser."""

from __future__ import annotations


class CatalogError(RuntimeError):
    """Base class for catalog errors."""


class LoadError(CatalogError):
    """The document store was unreachable or rejected the query."""


class DecodeError(CatalogError):
    """An encoded publication field could not be decoded into a sequence."""


class ConfigError(CatalogError):
    """Required configuration is missing."""
