"""Identity provider strategies."""

from draftgen.strategies.identity.jwt_provider import JWTIdentityProvider

__all__ = [
    "JWTIdentityProvider",
]
