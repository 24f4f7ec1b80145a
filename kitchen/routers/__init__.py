# kitchen/routers/__init__.py
"""
Karmic Kitchen routers.

Submodules load lazily so that `from kitchen.routers import meals`
does not import every router at once.
"""

from importlib import import_module

__all__ = [
    "admin",
    "auth",
    "meals",
    "notifications",
    "profile",
    "push",
]

def __getattr__(name):
    # Lazy submodule load: kitchen.routers.<name>
    if name in __all__:
        return import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
