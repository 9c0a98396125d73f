"""Caller identity resolution and the owner authorization gate."""

from __future__ import annotations

import hashlib
import secrets
from typing import Optional

from backend.domain.models import Owner


class AuthenticationError(Exception):
    """Base authentication failure."""


class MissingCredentialsError(AuthenticationError):
    """Raised when no bearer token accompanies the request."""


def is_owner(owner: Optional[Owner], caller: str) -> bool:
    """True iff an owner exists and its principal is the caller.

    Callers of owner-only operations check initialization first; with no owner
    this simply answers False.
    """
    if owner is None or not caller:
        return False
    return secrets.compare_digest(owner.owner, caller)


class AuthService:
    """Turns bearer tokens into the opaque principals stored on records."""

    _PRINCIPAL_PREFIX = "principal-"

    def resolve_caller(self, bearer_token: Optional[str]) -> str:
        if bearer_token is None or not bearer_token.strip():
            raise MissingCredentialsError("Authorization header with Bearer token is required")
        digest = hashlib.sha256(bearer_token.strip().encode("utf-8")).hexdigest()
        return f"{self._PRINCIPAL_PREFIX}{digest[:32]}"
