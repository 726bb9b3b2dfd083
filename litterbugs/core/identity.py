"""
Session identity as seen by the report core.

Authentication itself happens elsewhere; the core only needs the current
user id (None for guests) and to hear about sign-in and sign-out.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class IdentityEventType(Enum):
    SIGNED_IN = "signed_in"
    GUEST = "guest"
    SIGNED_OUT = "signed_out"


@dataclass(frozen=True)
class IdentityEvent:
    """A change of session identity."""
    type: IdentityEventType
    user_id: Optional[str] = None


IdentityListener = Callable[[IdentityEvent], None]


class IdentityProvider(ABC):
    """Source of the current identity."""

    @abstractmethod
    async def current_user_id(self) -> Optional[str]:
        """Signed-in user id, or None for guests and signed-out sessions."""

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register for identity changes. Returns an unsubscribe callable."""
        return lambda: None


class SessionIdentity(IdentityProvider):
    """
    Identity held in memory and updated by the auth layer.

    Guest sessions have no durable id, so they report None.
    """

    def __init__(self, user_id: Optional[str] = None, access_token: Optional[str] = None):
        self.user_id = user_id
        self.access_token = access_token
        self._listeners: List[IdentityListener] = []

    async def current_user_id(self) -> Optional[str]:
        return self.user_id

    def current_access_token(self) -> Optional[str]:
        return self.access_token

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, user_id: str, access_token: Optional[str] = None) -> None:
        self.user_id = user_id
        self.access_token = access_token
        self._emit(IdentityEvent(IdentityEventType.SIGNED_IN, user_id))

    def sign_in_as_guest(self, access_token: Optional[str] = None) -> None:
        self.user_id = None
        self.access_token = access_token
        self._emit(IdentityEvent(IdentityEventType.GUEST))

    def sign_out(self) -> None:
        self.user_id = None
        self.access_token = None
        self._emit(IdentityEvent(IdentityEventType.SIGNED_OUT))

    def _emit(self, event: IdentityEvent) -> None:
        logger.info(f"Identity changed: {event.type.value}")
        for listener in list(self._listeners):
            listener(event)
