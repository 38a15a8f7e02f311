"""
Password-protected key file.

``load_or_create`` is the only entry point that may write: when the file is
absent a new identity is generated and persisted atomically; when it exists
it is only ever read.  A failed decrypt therefore never touches the stored
record.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..errors import AuthenticationError, StorageError
from ..logging import get_logger
from ..utils import atomic_write, utc_now_rfc3339
from .crypto import Argon2Params, CryptoError, DecryptionError, EnvelopeFormatError, open_envelope, seal
from .identity import SigningIdentity

log = get_logger(__name__)


@dataclass(frozen=True)
class KeyStore:
    """
    Loads or creates the encrypted signing identity for one network profile.

    Attributes:
        prefix: bech32 address prefix of derived addresses
        hd_path: BIP-32 derivation path
        kdf_params: Argon2id cost used when creating a new record
    """

    prefix: str
    hd_path: str
    kdf_params: Argon2Params = field(default_factory=Argon2Params)

    @classmethod
    def for_options(cls, options, kdf_params: Argon2Params | None = None) -> "KeyStore":
        return cls(
            prefix=options.bech32_prefix,
            hd_path=options.hd_path,
            kdf_params=kdf_params or Argon2Params(),
        )

    def load_or_create(self, path: Path, password: str) -> SigningIdentity:
        """
        Return the identity stored at ``path``, creating it on first use.

        Raises:
            AuthenticationError: Record exists but ``password`` does not open it
            StorageError: Record unreadable or corrupt, or the new record could not be written
        """
        path = Path(path).expanduser()
        if not password:
            raise AuthenticationError("Password cannot be empty.")

        if not path.exists():
            return self._create(path, password)
        return self._load(path, password)

    def recover_mnemonic(self, path: Path, password: str) -> str:
        """Return the recovery phrase behind the identity at ``path`` (for backup/export)."""
        return self.load_or_create(path, password).mnemonic

    def _create(self, path: Path, password: str) -> SigningIdentity:
        identity = SigningIdentity.generate(prefix=self.prefix, hd_path=self.hd_path)
        self.save(path, identity, password)
        log.info("keystore_created", path=str(path), address=identity.address)
        return identity

    def save(self, path: Path, identity: SigningIdentity, password: str) -> None:
        """Encrypt ``identity`` under ``password`` and write it to ``path`` atomically."""
        secret = json.dumps(
            {"mnemonic": identity.mnemonic, "hd_path": identity.hd_path, "prefix": identity.prefix},
            sort_keys=True,
        ).encode("utf-8")
        envelope = seal(
            secret,
            password,
            params=self.kdf_params,
            meta={"hd_path": identity.hd_path, "prefix": identity.prefix, "created_at": utc_now_rfc3339()},
        )
        try:
            atomic_write(Path(path), json.dumps(envelope, indent=2, sort_keys=True).encode("utf-8"))
        except OSError as exc:
            raise StorageError(f"Cannot write key file {path}: {exc}") from exc

    def _load(self, path: Path, password: str) -> SigningIdentity:
        envelope = self._read_envelope(path)
        try:
            secret = open_envelope(envelope, password)
        except DecryptionError as exc:
            log.warning("keystore_auth_failed", path=str(path))
            raise AuthenticationError(f"Wrong password for key file {path}") from exc
        except (EnvelopeFormatError, CryptoError) as exc:
            raise StorageError(f"Corrupt key file {path}: {exc}") from exc

        try:
            payload = json.loads(secret.decode("utf-8"))
            return SigningIdentity.from_mnemonic(
                payload["mnemonic"],
                prefix=payload.get("prefix", self.prefix),
                hd_path=payload.get("hd_path", self.hd_path),
            )
        except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Key file {path} does not hold a valid identity: {exc}") from exc

    @staticmethod
    def _read_envelope(path: Path) -> dict[str, Any]:
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read key file {path}: {exc}") from exc
        try:
            envelope = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt key file {path}: not valid JSON") from exc
        if not isinstance(envelope, dict):
            raise StorageError(f"Corrupt key file {path}: expected a JSON object")
        return envelope
