from enum import Enum


class UserRole(str, Enum):
    """
    Admins run the studio and are not restricted.
    Clients are restricted to their own projects and to the available slots.
    """

    admin = "admin"
    client = "client"

    def __str__(self):
        return f"{self.name}<{self.value}>"
