from models.room import (
    ROTATION_POLICIES, RoomConfig, LiveItem, Slot, Schedule, Room,
    ActiveWindow, RotationPolicy, SlotSummary, View,
)

__all__ = [
    "ROTATION_POLICIES", "RoomConfig", "LiveItem", "Slot", "Schedule", "Room",
    "ActiveWindow", "RotationPolicy", "SlotSummary", "View",
]
