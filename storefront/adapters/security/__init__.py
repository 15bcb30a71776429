"""Security adapters - Password hashing and bearer tokens."""

from .passwords import BcryptPasswordHasher
from .tokens import JwtTokenIssuer

__all__ = ["BcryptPasswordHasher", "JwtTokenIssuer"]
