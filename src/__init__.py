# src/__init__.py - v1
"""RoboDoc: guided photo documentation of robots backed by object storage."""

from robodoc.version import __version__

__all__ = ["__version__"]
