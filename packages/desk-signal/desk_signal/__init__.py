"""desk-signal - In-process event bus for the live dashboard feed."""
from __future__ import annotations

from desk_signal.bus import EventBus

__all__ = ["EventBus"]
