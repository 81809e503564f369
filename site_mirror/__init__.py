"""
SiteMirror package initializer.
Defines package version and exposes the blocking entry point.
"""
__version__ = "0.1.0"

from site_mirror.engine import run  # noqa: E402

__all__ = ["__version__", "run"]
