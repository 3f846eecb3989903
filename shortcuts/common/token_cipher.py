"""Fernet encryption for stored OAuth tokens and signed OAuth state."""

from __future__ import annotations

import json
import os
import uuid

from cryptography.fernet import Fernet, InvalidToken

from ..errors import ConfigurationError


class TokenCipher:
    """Encrypt tokens at rest and wrap user ids into tamper-proof state values."""

    def __init__(self, key: str | None = None) -> None:
        key = key or os.environ.get("TOKEN_FERNET_KEY")
        if not key:
            raise ConfigurationError("TOKEN_FERNET_KEY missing from environment")
        try:
            self.fernet = Fernet(key.encode())
        except ValueError as exc:
            raise ConfigurationError("TOKEN_FERNET_KEY is not a valid Fernet key") from exc

    # ------------------------------------------------------------------
    def encrypt(self, value: str) -> str:
        return self.fernet.encrypt(value.encode("utf-8")).decode("ascii")

    # ------------------------------------------------------------------
    def decrypt(self, value: str, *, ttl: int | None = None) -> str:
        """Return the plaintext for ``value``.

        Raises ``ValueError`` when the token is malformed, tampered with, or
        older than ``ttl`` seconds.
        """

        try:
            raw = self.fernet.decrypt(value.encode("ascii"), ttl=ttl)
        except (InvalidToken, UnicodeEncodeError) as exc:
            raise ValueError("Invalid or expired token") from exc
        return raw.decode("utf-8")

    # ------------------------------------------------------------------
    def sign_state(self, user_id: str) -> str:
        """Return an OAuth ``state`` value that carries ``user_id``."""

        payload = json.dumps({"uid": user_id, "nonce": uuid.uuid4().hex})
        return self.encrypt(payload)

    # ------------------------------------------------------------------
    def read_state(self, state: str, *, ttl: int) -> str:
        """Return the user id wrapped by :meth:`sign_state`."""

        try:
            payload = json.loads(self.decrypt(state, ttl=ttl))
        except json.JSONDecodeError as exc:
            raise ValueError("Invalid OAuth state") from exc
        user_id = payload.get("uid") if isinstance(payload, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise ValueError("Invalid OAuth state")
        return user_id


__all__ = ["TokenCipher"]
