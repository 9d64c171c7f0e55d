"""Task tracker API package.

Expose the application factory so callers can ``from tasktracker import
create_app`` without traversing the package structure.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
