# Events module - normalized webhook events
from .models import EventType, NormalizedEvent, utc_now_iso

__all__ = [
    "EventType",
    "NormalizedEvent",
    "utc_now_iso",
]
