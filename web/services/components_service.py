"""
Components Service - Process-wide access to the entry subsystem.

create_web_interface() installs the components; everything else in
web/services reads them from here.
"""

import threading

from core.components import Components, build_components

_components: Components | None = None
_lock = threading.Lock()


def init_components(components: Components) -> Components:
    """Installs the components used by all web services."""
    global _components
    with _lock:
        _components = components
    return components


def get_components() -> Components:
    """Returns the installed components, building defaults on first use."""
    global _components
    with _lock:
        if _components is None:
            _components = build_components()
        return _components


def reset_components() -> None:
    """Forgets the installed components (tests)."""
    global _components
    with _lock:
        _components = None
