from __future__ import annotations

from .helpers import cut, interpolate

__all__ = ["cut", "interpolate"]
