"""Exception hierarchy for tiling, archiving, and batch scheduling."""

from __future__ import annotations


class DeepZoomPackError(Exception):
    """Base class for all package errors.

    Attributes
    ----------
    exit_code : int
        Process exit code the CLI uses when this error ends a run.
    """

    exit_code: int = 1


class ConfigurationError(DeepZoomPackError):
    """Invalid or unreadable run configuration (task lists, options)."""

    exit_code = 2


class PluginError(ConfigurationError):
    """Tiler plugin module could not be loaded or registered."""


class ExternalToolError(DeepZoomPackError):
    """The external pyramid generator failed for one image."""


class DependencyError(ExternalToolError):
    """An optional imaging dependency is not installed."""


class ArchiveIOError(DeepZoomPackError, OSError):
    """Filesystem failure reading tiles or writing container/sidecar files."""


class CompressionError(DeepZoomPackError):
    """The tile codec reported a failure."""


class TileLayoutError(DeepZoomPackError):
    """Tile tree contains entries that cannot be indexed unambiguously."""


class ArchiveIntegrityError(DeepZoomPackError):
    """A packed archive does not match its sidecar index."""
