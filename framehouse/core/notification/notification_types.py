from enum import Enum


class NotificationType(str, Enum):
    slot_booked = "slot_booked"
    event_created = "event_created"
    event_updated = "event_updated"
    event_cancelled = "event_cancelled"

    def __str__(self):
        return f"{self.name}<{self.value}>"
