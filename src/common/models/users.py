from enum import Enum


class UserRole(Enum):
    ADMIN = "ADMIN"
    HOST = "HOST"
    GUEST = "GUEST"
