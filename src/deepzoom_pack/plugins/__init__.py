"""Tiler registry for pluggable pyramid generators."""

from .registry import TilerRegistry, create_default_registry

__all__ = ["TilerRegistry", "create_default_registry"]
