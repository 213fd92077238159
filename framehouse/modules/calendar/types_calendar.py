from enum import Enum


class CalendarEventType(str, Enum):
    filming = "filming"
    consultation = "consultation"
    meeting = "meeting"
    editing = "editing"
    delivery = "delivery"
    other = "other"
    blocked = "blocked"

    def __str__(self):
        return f"{self.name}<{self.value}>"
