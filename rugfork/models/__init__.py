"""SQLModel сущности RugFork."""

from .bet import Bet  # noqa: F401
from .pool import Pool  # noqa: F401
from .user import User  # noqa: F401

__all__ = [
    "Bet",
    "Pool",
    "User",
]
