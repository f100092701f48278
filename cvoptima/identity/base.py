from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated caller."""

    id: str


class BaseIdentityProvider(ABC):
    """Contract for resolving the authenticated user of the current request."""

    @abstractmethod
    def get_current_user(self) -> CurrentUser | None:
        """Return the authenticated user, or None when nobody is signed in."""


class StaticIdentityProvider(BaseIdentityProvider):
    """Always resolves to the same user. Used by the command line entry point."""

    def __init__(self, user_id: str | None) -> None:
        self._user = CurrentUser(id=user_id) if user_id else None

    def get_current_user(self) -> CurrentUser | None:
        return self._user
