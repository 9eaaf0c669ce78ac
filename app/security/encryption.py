"""Fernet encryption for personal data held at rest (device-local identities)."""

import base64
import json
import os
from typing import Any, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from app.security.exceptions import EncryptionError

IDENTITY_SALT = b"incident_capture_identity_v1"
KDF_ITERATIONS = 480000


def _derive_key(secret: str, salt: bytes = IDENTITY_SALT) -> bytes:
    """Fernet wants a urlsafe-b64 32-byte key; stretch the configured secret into one."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


class EncryptionService:
    """
    Symmetric encryption of identity records. The key comes from settings
    (ENCRYPTION_KEY); construction fails when it is absent.
    """

    def __init__(self, key: Optional[str] = None) -> None:
        raw = key or os.environ.get("ENCRYPTION_KEY")
        if not raw or not raw.strip():
            raise EncryptionError(
                "Encryption key is required to store device identities. Set ENCRYPTION_KEY."
            )
        self._fernet = Fernet(_derive_key(raw.strip()))

    def encrypt(self, data: str) -> str:
        return self._fernet.encrypt(data.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Raises EncryptionError on a wrong key or a corrupt token."""
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as e:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from e

    def encrypt_json(self, record: dict[str, Any]) -> str:
        return self.encrypt(json.dumps(record, separators=(",", ":"), default=str))

    def decrypt_json(self, token: str) -> dict[str, Any]:
        plain = self.decrypt(token)
        try:
            record = json.loads(plain)
        except json.JSONDecodeError as e:
            raise EncryptionError("Decrypted record is not valid JSON") from e
        if not isinstance(record, dict):
            raise EncryptionError("Decrypted record is not an object")
        return record
