"""Internal messaging between the map engine and connected clients."""

from engine.comms.event_bus import EventBus

__all__ = ["EventBus"]
