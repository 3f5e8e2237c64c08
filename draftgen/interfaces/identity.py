"""Caller identity interfaces.

Identity verification itself is an external concern; the pipeline only
needs a stable user id plus a few claims to seed a first-time quota record.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """A verified caller.

    Attributes:
        uid: Stable user identifier issued by the identity provider.
        email: Email claim, empty when absent.
        phone_number: Phone claim, empty when absent.
        name: Display-name claim, empty when absent.
    """

    uid: str
    email: str = ""
    phone_number: str = ""
    name: str = ""

    @property
    def display_name(self) -> str:
        """Return the best available display name."""
        return self.name or self.email


class BaseIdentityProvider(ABC):
    """Abstract base class for bearer-token verification."""

    @abstractmethod
    def verify(self, token: str) -> Identity:
        """Verify a bearer token and return the caller.

        Raises:
            AuthenticationError: If the token is missing, invalid or expired.
        """
