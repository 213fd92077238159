from enum import Enum


class ProjectStatus(str, Enum):
    inquiry = "inquiry"
    quote_sent = "quote_sent"
    contract_signed = "contract_signed"
    scheduled = "scheduled"
    in_progress = "in_progress"
    editing = "editing"
    review = "review"
    delivered = "delivered"
    completed = "completed"
    cancelled = "cancelled"

    def __str__(self):
        return f"{self.name}<{self.value}>"
