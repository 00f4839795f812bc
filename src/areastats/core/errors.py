from __future__ import annotations


class AreaStatsError(Exception):
    """Base class for every error raised while importing or querying area data."""


class NotFoundError(AreaStatsError, LookupError):
    """Raised when a year, measure, language or area is not present."""


class ValidationError(AreaStatsError, ValueError):
    """Raised when an input does not satisfy a naming or column-mapping rule."""


class FormatError(AreaStatsError, ValueError):
    """Raised when a dataset is structurally malformed (columns, tokens, JSON)."""


class InputSourceError(AreaStatsError):
    """Raised when a dataset file or URL cannot be opened."""
