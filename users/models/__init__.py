from .address import Address
from .user import User

__all__ = [
    "User",
    "Address",
]
