"""Tiler registry and discovery helpers."""

from __future__ import annotations

import importlib
import importlib.util
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from deepzoom_pack.adapters.tilers import PillowPyramidGenerator, PyvipsPyramidGenerator
from deepzoom_pack.application.ports import PyramidGenerator
from deepzoom_pack.errors import ConfigurationError, PluginError


class TilerRegistry:
    """Registry of pyramid generators keyed by name."""

    def __init__(self) -> None:
        self._tilers: dict[str, PyramidGenerator] = {}

    def register(self, tiler: PyramidGenerator) -> None:
        """Register tiler instance by unique name.

        Parameters
        ----------
        tiler : PyramidGenerator
            Tiler instance to register.

        Raises
        ------
        PluginError
            If the tiler has no name or no ``generate_pyramid`` method.
        """
        name = str(getattr(tiler, "name", "")).strip()
        if not name:
            raise PluginError("Tiler must define a non-empty 'name'.")
        if not callable(getattr(tiler, "generate_pyramid", None)):
            raise PluginError(f"Tiler '{name}' must implement generate_pyramid().")
        self._tilers[name] = tiler

    def names(self) -> list[str]:
        """Return registered tiler names, sorted."""
        return sorted(self._tilers.keys())

    def get(self, name: str) -> PyramidGenerator:
        """Get tiler by name.

        Raises
        ------
        ConfigurationError
            If no tiler is registered under ``name``.
        """
        try:
            return self._tilers[name]
        except KeyError as exc:
            raise ConfigurationError(
                f"Unknown tiler '{name}'. Available tilers: {', '.join(self.names())}"
            ) from exc

    def load_module(self, module_or_path: str) -> None:
        """Load tiler providers from module name or file path.

        .. warning::
            This executes code from the specified module. Only load tilers
            from trusted sources.
        """
        module = _import_module_or_path(module_or_path)
        _register_from_module(module, self)


def _import_module_or_path(module_or_path: str) -> ModuleType:
    """Import module by import path or filesystem path.

    Raises
    ------
    PluginError
        If import cannot be completed.
    """
    candidate = Path(module_or_path)
    if candidate.exists():
        spec = importlib.util.spec_from_file_location(candidate.stem, candidate)
        if spec is None or spec.loader is None:
            raise PluginError(f"Unable to load tiler module from {candidate}.")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            raise PluginError(f"Unable to execute tiler module {candidate}: {exc}") from exc
        return module

    try:
        return importlib.import_module(module_or_path)
    except Exception as exc:
        raise PluginError(
            f"Unable to import tiler module '{module_or_path}': {exc}"
        ) from exc


def _register_from_module(module: ModuleType, registry: TilerRegistry) -> None:
    """Register tilers exposed by ``register_tilers``, ``TILERS`` or ``TILER``."""
    if hasattr(module, "register_tilers"):
        module.register_tilers(registry)
        return

    tilers_obj = getattr(module, "TILERS", None)
    if tilers_obj is not None:
        for tiler in tilers_obj:
            registry.register(tiler)
        return

    tiler_obj = getattr(module, "TILER", None)
    if tiler_obj is not None:
        registry.register(tiler_obj)
        return

    raise PluginError("Tiler module must expose register_tilers(registry), TILERS, or TILER.")


def create_default_registry(
    extra_modules: Iterable[str] | None = None,
) -> TilerRegistry:
    """Create a registry with the built-in tilers plus any extra modules.

    Parameters
    ----------
    extra_modules : Iterable[str] | None, optional
        Additional tiler modules (import paths or file paths) to load.
    """
    registry = TilerRegistry()
    registry.register(PyvipsPyramidGenerator())
    registry.register(PillowPyramidGenerator())
    for module in extra_modules or []:
        registry.load_module(module)
    return registry
