"""
qflow distribution import namespace.

This package re-exports the core `question_flow` package so callers can
write `import qflow; qflow.use(qflow.define([...], ...))`.
"""

from importlib.metadata import PackageNotFoundError, version

# src/qflow/__init__.py
from question_flow import *  # noqa: F401,F403
from question_flow import __all__ as _core_all

try:
    from ._version import __version__  # canonical
except ImportError:  # pragma: no cover - fallback for editable/local non-built environments
    try:
        __version__ = version("qflow")
    except PackageNotFoundError:
        __version__ = "0+unknown"

__all__ = [*_core_all, "__version__"]
