"""
Token codec - Mints single-use token material.

Each token is 32 random bytes (hex encoded) encrypted with AES-256-CBC
under the process-wide secret key. The hex salt doubles as the IV.

The codec is write-only: nothing ever decrypts a token. Validity is the
presence of the ciphertext in the token store, so the ciphertext acts as
a high-entropy opaque handle and the plaintext is never persisted.

Key handling follows OpenSSL's passphrase-as-key behaviour: the UTF-8
secret is NUL-padded or truncated to 32 bytes. Tokens issued by earlier
deployments sharing the same secret therefore keep the same format.
"""

import base64
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .exceptions import ConfigurationError

TOKEN_BYTES = 32
SALT_BYTES = 8
KEY_BYTES = 32  # AES-256


@dataclass(frozen=True)
class MintedToken:
    """Freshly minted token material. Only ``encrypted`` and ``salt`` are persisted."""

    plaintext: str
    encrypted: str
    salt: str


@dataclass
class TokenCodec:
    """
    Mints encrypted single-use tokens.

    A missing secret key is a hard precondition failure, not retried.
    """

    secret_key: str | None
    random_bytes: Callable[[int], bytes] = field(default=secrets.token_bytes)

    def mint(self) -> MintedToken:
        """
        Generate a new token.

        Returns:
            MintedToken with hex plaintext, base64 ciphertext and hex salt

        Raises:
            ConfigurationError: If the secret key, random source or cipher is unavailable
        """
        if not self.secret_key:
            raise ConfigurationError("Secret key is not configured")

        try:
            plaintext = self.random_bytes(TOKEN_BYTES).hex()
            salt = self.random_bytes(SALT_BYTES).hex()
        except NotImplementedError as e:
            raise ConfigurationError("Secure random source unavailable") from e

        encrypted = self._encrypt(plaintext, salt)
        return MintedToken(plaintext=plaintext, encrypted=encrypted, salt=salt)

    def _key(self) -> bytes:
        """Secret as a 32-byte AES key (NUL-padded or truncated)."""
        return self.secret_key.encode()[:KEY_BYTES].ljust(KEY_BYTES, b"\0")

    def _encrypt(self, plaintext: str, salt: str) -> str:
        """AES-256-CBC with PKCS7 padding; IV is the ASCII hex salt."""
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode()) + padder.finalize()

        try:
            cipher = Cipher(algorithms.AES(self._key()), modes.CBC(salt.encode()))
        except UnsupportedAlgorithm as e:
            raise ConfigurationError("AES-256-CBC is not supported by the crypto backend") from e

        encryptor = cipher.encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return base64.b64encode(ciphertext).decode()
