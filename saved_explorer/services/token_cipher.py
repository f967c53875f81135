"""Symmetric encryption for access credentials kept in the local store."""

from __future__ import annotations

import base64
import hashlib
from typing import Any, Dict

from cryptography.fernet import Fernet, InvalidToken

from saved_explorer.models.reddit import AccessCredential

_ENCRYPTED_FIELDS = ("access_token", "refresh_token")


class TokenCipherService:
    """Encrypt and decrypt credential fields using a derived Fernet key."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt token; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")

    def seal(self, credential: AccessCredential) -> Dict[str, Any]:
        """Return the storable form of a credential with encrypted token fields."""
        sealed: Dict[str, Any] = {"encrypted": True}
        for field in _ENCRYPTED_FIELDS:
            value = getattr(credential, field)
            sealed[field] = self.encrypt(value) if value else ""
        return sealed

    def unseal(self, stored: Dict[str, Any]) -> Dict[str, Any]:
        """Decrypt a sealed record; plaintext records pass through unchanged."""
        if not stored.get("encrypted"):
            return stored
        unsealed: Dict[str, Any] = {}
        for field in _ENCRYPTED_FIELDS:
            value = stored.get(field) or ""
            if not isinstance(value, str):
                raise ValueError(f"Sealed field {field} is not a string.")
            unsealed[field] = self.decrypt(value) if value else ""
        return unsealed


__all__ = ["TokenCipherService"]
