"""
Crypt field encryption for the Opayo Server protocol.

AES-128-CBC with manual PKCS#7-style padding, hex encoded and prefixed
with ``@``.

SECURITY WARNING: the encryption key is also used as the IV. This is a
known weakness of the gateway's legacy protocol and is kept on purpose:
a random IV would produce a Crypt value the gateway cannot decrypt.
Do not change it.
"""

from __future__ import annotations

import binascii
import logging

from Crypto.Cipher import AES

from opayo.core.exceptions import (
    DecryptionError,
    InvalidKeyError,
    OpayoCryptographyError,
)

logger = logging.getLogger(__name__)

CRYPT_PREFIX = "@"


def _to_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


class CryptoService:
    BLOCK_SIZE = 16
    KEY_SIZE = 16

    def _validate_key(self, key: bytes | str) -> bytes:
        key_bytes = _to_bytes(key)
        if len(key_bytes) != self.KEY_SIZE:
            raise InvalidKeyError(
                f"Invalid key length: expected {self.KEY_SIZE} bytes, got {len(key_bytes)} bytes",
                details={"key_length": len(key_bytes)},
            )
        return key_bytes

    def _pad(self, data: bytes) -> bytes:
        # Always pads, so aligned input gains a whole block of 0x10
        padding_length = self.BLOCK_SIZE - (len(data) % self.BLOCK_SIZE)
        return data + bytes([padding_length]) * padding_length

    def _unpad(self, data: bytes) -> bytes:
        padding_length = data[-1]
        if padding_length < 1 or padding_length > self.BLOCK_SIZE:
            raise DecryptionError("Invalid padding in decrypted data")
        return data[:-padding_length]

    def _cipher(self, key: bytes):
        return AES.new(key, AES.MODE_CBC, iv=key)

    def encrypt(self, plaintext: bytes | str, key: bytes | str) -> str:
        """Encrypt ``plaintext`` and return the ``@HEX`` Crypt value."""
        key_bytes = self._validate_key(key)
        padded = self._pad(_to_bytes(plaintext))

        try:
            encrypted = self._cipher(key_bytes).encrypt(padded)
        except ValueError as e:
            raise OpayoCryptographyError(
                f"Encryption failed: {e}",
                OpayoCryptographyError.ENCRYPTION_FAILED,
                cause=e,
            ) from e

        return CRYPT_PREFIX + encrypted.hex().upper()

    def decrypt(self, crypt: str, key: bytes | str) -> bytes:
        """Reverse of encrypt(). Accepts the value with or without the ``@``."""
        key_bytes = self._validate_key(key)

        hex_data = crypt[1:] if crypt.startswith(CRYPT_PREFIX) else crypt
        try:
            data = binascii.unhexlify(hex_data)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError(
                "Invalid encrypted data format: not valid hexadecimal", cause=e
            ) from e

        if not data or len(data) % self.BLOCK_SIZE:
            raise DecryptionError(
                f"Invalid encrypted data length: {len(data)} bytes is not a positive multiple of {self.BLOCK_SIZE}",
                details={"length": len(data)},
            )

        try:
            decrypted = self._cipher(key_bytes).decrypt(data)
        except ValueError as e:
            raise DecryptionError(f"Decryption failed: {e}", cause=e) from e

        return self._unpad(decrypted)

    def decrypt_to_str(self, crypt: str, key: bytes | str) -> str:
        try:
            return self.decrypt(crypt, key).decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("[opayo] decrypted Crypt is not valid UTF-8")
            raise DecryptionError("Decrypted data is not valid UTF-8", cause=e) from e


crypto_service = CryptoService()
