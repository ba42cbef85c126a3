"""Project plugins.

A plugin is a Python module (a file next to the project, or an importable
module name) exposing a ``register(registry)`` hook. The hook adds command
translators to the process-wide PluginRegistry; built-in formats consult
the registry for commands they do not know.

Example plugin::

    def emit_my_command(command, language):
        if language != "python":
            return None
        return f'driver.execute_script("myCommand({command.target})")'

    def register(registry):
        registry.register_command("myCommand", emit_my_command)
"""

import importlib
import importlib.util
import inspect
import os
import sys
from pathlib import Path
from typing import Callable, Iterable, Optional

import structlog

from .models import Command, PluginError, PluginLoadError

logger = structlog.get_logger()

# hook(command, language) -> code, or None to decline
CommandHook = Callable[[Command, str], Optional[str]]


class PluginRegistry:
    """Command translators contributed by plugins.

    Populated before emission starts and frozen while units are emitted.
    """

    def __init__(self):
        self._commands: dict[str, list[CommandHook]] = {}
        self._loaded: list[str] = []
        self._frozen = False

    def register_command(self, name: str, hook: CommandHook) -> None:
        """Add a translator for a command name.

        Hooks registered for the same name are tried in registration order.
        """
        if self._frozen:
            raise PluginError(f"Cannot register command '{name}' after plugins are loaded")
        if not callable(hook):
            raise PluginError(f"Hook for command '{name}' is not callable")
        self._commands.setdefault(name, []).append(hook)

    def emit_command(self, command: Command, language: str) -> str | None:
        """Translate a command with the first hook that accepts it."""
        for hook in self._commands.get(command.command, []):
            code = hook(command, language)
            if code is not None:
                return code
        return None

    def has_command(self, name: str) -> bool:
        return name in self._commands

    def mark_loaded(self, reference: str) -> None:
        self._loaded.append(reference)

    def is_loaded(self, reference: str) -> bool:
        return reference in self._loaded

    def freeze(self) -> None:
        self._frozen = True

    def thaw(self) -> None:
        """Allow registrations again once a run has finished emitting."""
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def loaded(self) -> list[str]:
        return list(self._loaded)

    @property
    def commands(self) -> list[str]:
        return sorted(self._commands)


_registry: PluginRegistry | None = None


def get_registry() -> PluginRegistry:
    """Get the process-wide plugin registry."""
    global _registry
    if _registry is None:
        _registry = PluginRegistry()
    return _registry


def reset_registry() -> None:
    """Drop the process-wide registry (for tests)."""
    global _registry
    _registry = None


def _is_path_reference(reference: str) -> bool:
    return (
        reference.startswith(".")
        or os.path.isabs(reference)
        or "/" in reference
        or os.sep in reference
        or reference.endswith(".py")
    )


def correct_plugin_paths(project_path: str | Path, plugins: Iterable[str]) -> list[str]:
    """Resolve plugin path references against the project's directory.

    Module names pass through unchanged.
    """
    base = Path(project_path).resolve().parent
    corrected = []
    for reference in plugins:
        if _is_path_reference(reference):
            corrected.append(str((base / reference).resolve()))
        else:
            corrected.append(reference)
    return corrected


def _import_plugin(reference: str):
    if not _is_path_reference(reference):
        try:
            return importlib.import_module(reference)
        except ImportError as e:
            raise PluginLoadError(f"Could not import plugin module '{reference}': {e}") from e

    path = Path(reference)
    if path.is_dir():
        path = path / "__init__.py"
    if not path.is_file():
        raise PluginLoadError(f"Plugin file not found: {reference}")

    module_name = f"_side_export_plugin_{path.stem}_{abs(hash(str(path)))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Cannot load plugin from {reference}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise PluginLoadError(f"Plugin {reference} failed to import: {e}") from e
    return module


async def load_plugins(references: Iterable[str], registry: PluginRegistry | None = None) -> PluginRegistry:
    """Import plugins in order and run their register hooks.

    Args:
        references: Absolute plugin paths or module names
        registry: Registry to populate (the process-wide one by default)

    Returns:
        The populated registry

    Raises:
        PluginLoadError: If any plugin cannot be imported or registered
    """
    registry = registry or get_registry()

    for reference in references:
        if registry.is_loaded(reference):
            logger.debug("Plugin already loaded", plugin=reference)
            continue

        module = _import_plugin(reference)
        register = getattr(module, "register", None)
        if not callable(register):
            raise PluginLoadError(f"Plugin {reference} has no register(registry) function")

        try:
            result = register(registry)
            if inspect.isawaitable(result):
                await result
        except PluginError:
            raise
        except Exception as e:
            raise PluginLoadError(f"Plugin {reference} failed to register: {e}") from e

        registry.mark_loaded(reference)
        logger.info("Plugin loaded", plugin=reference)

    return registry
