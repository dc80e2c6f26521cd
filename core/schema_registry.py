# core/schema_registry.py
from __future__ import annotations
from typing import Callable, Iterable, List, Tuple
from sqlalchemy.engine import Engine
import importlib
import logging
import pkgutil

logger = logging.getLogger(__name__)

# Schema installer type
SchemaInstaller = Callable[[Engine], None]

DEFAULT_ORDER = 100

# Registry: (order, name, installer_func)
_REGISTRY: List[Tuple[int, str, SchemaInstaller]] = []

def _add(name: str, fn: SchemaInstaller, order: int) -> None:
    # re-registering a name replaces the previous installer
    _REGISTRY[:] = [entry for entry in _REGISTRY if entry[1] != name]
    _REGISTRY.append((order, name, fn))

def register(
    name: str | SchemaInstaller,
    installer: SchemaInstaller | None = None,
    *,
    order: int = DEFAULT_ORDER,
) -> SchemaInstaller | Callable[[SchemaInstaller], SchemaInstaller]:
    """
    Registers a schema installer function.
    Can be used as a decorator (@register / @register("name", order=...))
    or a function call (register("name", fn)).
    Installers run by ascending order, then registration order.
    """
    # Used as @register("name")
    if isinstance(name, str) and installer is None:
        def decorator(fn: SchemaInstaller) -> SchemaInstaller:
            _add(name, fn, order)
            return fn
        return decorator

    # Used as @register
    elif callable(name) and installer is None:
        fn = name
        _add(fn.__name__, fn, order)
        return fn

    # Used as register("name", fn)
    elif isinstance(name, str) and callable(installer):
        _add(name, installer, order)
        return installer

    raise TypeError("Invalid usage of @register")

def registered_names() -> List[str]:
    return [name for _, name, _ in sorted(_REGISTRY, key=lambda e: e[0])]

def run_all(engine: Engine, skip: Iterable[str] = ()) -> List[str]:
    """
    Runs all registered schema installers in order, except those named in `skip`.
    A failing installer is logged and skipped; returns the names that failed.
    """
    skipped = set(skip)
    to_run = [e for e in sorted(_REGISTRY, key=lambda e: e[0]) if e[1] not in skipped]
    logger.info("SchemaRegistry: Running %d installers...", len(to_run))
    failed: List[str] = []
    for _, name, installer_fn in to_run:
        try:
            logger.info("  -> Applying schema: %s", name)
            installer_fn(engine)
        except Exception:
            logger.error("  -> FAILED to apply schema %s", name, exc_info=True)
            failed.append(name)
    logger.info("SchemaRegistry: All installers complete.")
    return failed

def auto_discover(package: str = "schemas") -> List[str]:
    """
    Imports every module of `package` to trigger @register decorators.
    Returns the imported module names.
    """
    try:
        pkg = importlib.import_module(package)
    except ImportError:
        logger.warning("Schema auto_discover: package %s not importable. Skipping.", package)
        return []

    discovered: List[str] = []
    for _, module_name, is_pkg in pkgutil.walk_packages(
        path=list(pkg.__path__),
        prefix=f"{package}.",
    ):
        if is_pkg:
            continue  # Don't import packages themselves
        importlib.import_module(module_name)
        logger.debug("  -> Discovered: %s", module_name)
        discovered.append(module_name)
    return discovered
