"""
Password envelope for key records.

Argon2id stretches the password into a master key, HKDF derives a per-record
AES-256-GCM key from it, and the envelope header (everything except the
ciphertext) is bound to the ciphertext as associated data.  A wrong password
and a tampered header both fail the GCM tag check; a structurally broken
envelope is reported separately.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import rfc8785
from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..utils import base64url_decode, base64url_encode

ENVELOPE_VERSION = 1
KDF_NAME = "argon2id"
AEAD_NAME = "aes-256-gcm"

# Cost ceilings for parameters read back from a stored record
MAX_MEM_KIB = 1 << 20
MAX_ITERATIONS = 64
MAX_PARALLELISM = 64


class CryptoError(ValueError):
    pass


class DecryptionError(CryptoError):
    pass


class EnvelopeFormatError(CryptoError):
    pass


@dataclass(frozen=True)
class Argon2Params:
    mem_kib: int = 65536
    iterations: int = 3
    parallelism: int = 1
    hash_len: int = 32

    def to_dict(self) -> dict[str, int]:
        return {
            "mem_kib": self.mem_kib,
            "iterations": self.iterations,
            "parallelism": self.parallelism,
            "hash_len": self.hash_len,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Argon2Params":
        return cls(
            mem_kib=int(payload["mem_kib"]),
            iterations=int(payload["iterations"]),
            parallelism=int(payload["parallelism"]),
            hash_len=int(payload["hash_len"]),
        )

    def check_bounds(self) -> None:
        """Reject costs a stored record must never be able to request."""
        if not 1 <= self.parallelism <= MAX_PARALLELISM:
            raise EnvelopeFormatError(f"Argon2id parallelism out of range: {self.parallelism}")
        if not 8 * self.parallelism <= self.mem_kib <= MAX_MEM_KIB:
            raise EnvelopeFormatError(f"Argon2id memory cost out of range: {self.mem_kib} KiB")
        if not 1 <= self.iterations <= MAX_ITERATIONS:
            raise EnvelopeFormatError(f"Argon2id iterations out of range: {self.iterations}")
        if self.hash_len != 32:
            raise EnvelopeFormatError("Argon2id hash_len must be 32 bytes.")


def derive_master_key(password: str, salt: bytes, params: Argon2Params) -> bytes:
    if not password:
        raise CryptoError("Password cannot be empty.")
    if len(salt) < 16:
        raise CryptoError("Salt must be at least 16 bytes.")
    if params.hash_len != 32:
        raise CryptoError("Argon2id hash_len must be 32 bytes.")
    return hash_secret_raw(
        secret=password.encode("utf-8"),
        salt=salt,
        time_cost=params.iterations,
        memory_cost=params.mem_kib,
        parallelism=params.parallelism,
        hash_len=params.hash_len,
        type=Type.ID,
    )


def hkdf_derive_record_key(master_key: bytes, nonce: bytes, info: str = "bonsai:keyfile") -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=nonce,
        info=info.encode("utf-8"),
    )
    return hkdf.derive(master_key)


def _header_bytes(envelope: dict[str, Any]) -> bytes:
    header = {k: v for k, v in envelope.items() if k != "ciphertext"}
    return rfc8785.dumps(header)


def seal(
    plaintext: bytes,
    password: str,
    params: Argon2Params | None = None,
    meta: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Encrypt ``plaintext`` under ``password``.

    Args:
        plaintext: Secret bytes to protect
        password: User password (non-empty)
        params: Argon2id cost parameters (defaults: 64 MiB, 3 passes)
        meta: Non-secret metadata stored in the clear but authenticated

    Returns:
        JSON-serialisable envelope dict
    """
    params = params or Argon2Params()
    salt = os.urandom(16)
    nonce = os.urandom(12)
    envelope: dict[str, Any] = {
        "version": ENVELOPE_VERSION,
        "kdf": KDF_NAME,
        "kdf_params": params.to_dict(),
        "salt": base64url_encode(salt),
        "aead": AEAD_NAME,
        "nonce": base64url_encode(nonce),
        "meta": meta or {},
    }
    master_key = derive_master_key(password, salt, params)
    cipher = AESGCM(hkdf_derive_record_key(master_key, nonce))
    envelope["ciphertext"] = base64url_encode(cipher.encrypt(nonce, plaintext, _header_bytes(envelope)))
    return envelope


def open_envelope(envelope: dict[str, Any], password: str) -> bytes:
    """
    Decrypt an envelope produced by ``seal``.

    Raises:
        EnvelopeFormatError: Missing fields, unknown algorithms, bad encoding
        DecryptionError: Authentication tag mismatch (wrong password or tampering)
    """
    if not isinstance(envelope, dict):
        raise EnvelopeFormatError("Key record is not a JSON object.")
    if envelope.get("version") != ENVELOPE_VERSION:
        raise EnvelopeFormatError(f"Unsupported key record version: {envelope.get('version')!r}")
    if envelope.get("kdf") != KDF_NAME or envelope.get("aead") != AEAD_NAME:
        raise EnvelopeFormatError("Unsupported key record algorithms.")
    try:
        params = Argon2Params.from_dict(envelope["kdf_params"])
        salt = base64url_decode(envelope["salt"])
        nonce = base64url_decode(envelope["nonce"])
        ciphertext = base64url_decode(envelope["ciphertext"])
    except (KeyError, TypeError, ValueError) as exc:
        raise EnvelopeFormatError(f"Key record is incomplete or malformed: {exc}") from exc
    if len(nonce) != 12 or len(salt) < 16:
        raise EnvelopeFormatError("Key record salt or nonce has the wrong length.")
    params.check_bounds()

    try:
        master_key = derive_master_key(password, salt, params)
    except HashingError as exc:
        raise EnvelopeFormatError(f"Key record KDF parameters rejected: {exc}") from exc
    cipher = AESGCM(hkdf_derive_record_key(master_key, nonce))
    try:
        return cipher.decrypt(nonce, ciphertext, _header_bytes(envelope))
    except InvalidTag as exc:
        raise DecryptionError("Decryption failed: wrong password or corrupted record") from exc
