__all__ = (
    "AccountEntry",
    "AccountRegistry",
)

from .account import AccountEntry, AccountRegistry
