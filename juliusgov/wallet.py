"""Wallet keys, their on-disk encoding and password-based encryption."""

from __future__ import annotations

import hashlib
import os
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from juliusgov.address import PQAddress, derive_address_from_pk
from juliusgov.password import (
    EncryptionError,
    PasswordPolicy,
    SerializationError,
)

DEFAULT_WALLET_PATH = "wallet.dat"
PBKDF2_ITERATIONS = 100_000
SALT_SIZE = 32
NONCE_SIZE = 12
KEY_SIZE = 32

PathArg = Union[str, "os.PathLike[str]"]


def _encode_vec(data: bytes) -> bytes:
    return struct.pack("<Q", len(data)) + bytes(data)


def _encode_option_str(value: str | None) -> bytes:
    if value is None:
        return b"\x00"
    return b"\x01" + _encode_vec(value.encode("utf-8"))


class _Reader:
    """Sequential decoder for length-prefixed binary records."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._pos = 0

    def _take(self, n: int) -> bytes:
        end = self._pos + n
        if end > len(self._data):
            raise SerializationError("unexpected end of data")
        chunk = self._data[self._pos:end].tobytes()
        self._pos = end
        return chunk

    def vec(self) -> bytes:
        (length,) = struct.unpack("<Q", self._take(8))
        return self._take(length)

    def option_str(self) -> str | None:
        tag = self._take(1)[0]
        if tag == 0:
            return None
        if tag != 1:
            raise SerializationError(f"invalid option tag {tag}")
        try:
            return self.vec().decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SerializationError(f"invalid UTF-8: {exc}") from None


def _derive_key(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS, KEY_SIZE
    )


def _generate_keypair() -> tuple[bytes, bytes]:
    private = Ed25519PrivateKey.generate()
    secret = private.private_bytes(
        serialization.Encoding.Raw,
        serialization.PrivateFormat.Raw,
        serialization.NoEncryption(),
    )
    public = private.public_key().public_bytes(
        serialization.Encoding.Raw, serialization.PublicFormat.Raw
    )
    return public, secret


@dataclass(frozen=True)
class WalletData:
    """The plain contents of a wallet file."""

    public_key: bytes
    secret_key: bytes
    address_hash: bytes
    mnemonic: str | None = None

    def to_bytes(self) -> bytes:
        return (
            _encode_vec(self.public_key)
            + _encode_vec(self.secret_key)
            + _encode_vec(self.address_hash)
            + _encode_option_str(self.mnemonic)
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> WalletData:
        reader = _Reader(data)
        return cls(reader.vec(), reader.vec(), reader.vec(), reader.option_str())


@dataclass(frozen=True)
class EncryptedWalletData:
    """Salt, nonce and ciphertext of a password-protected wallet file."""

    salt: bytes
    nonce: bytes
    encrypted_data: bytes

    def to_bytes(self) -> bytes:
        return (
            _encode_vec(self.salt)
            + _encode_vec(self.nonce)
            + _encode_vec(self.encrypted_data)
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> EncryptedWalletData:
        reader = _Reader(data)
        return cls(reader.vec(), reader.vec(), reader.vec())


class WalletStorage:
    """Reads and writes wallet files at one path."""

    def __init__(self, path: PathArg) -> None:
        self.path = Path(path)

    def save(self, wallet: Wallet) -> None:
        self.path.write_bytes(wallet._data().to_bytes())

    def save_encrypted(self, salt: bytes, nonce: bytes, encrypted_data: bytes) -> None:
        record = EncryptedWalletData(bytes(salt), bytes(nonce), bytes(encrypted_data))
        self.path.write_bytes(record.to_bytes())

    @classmethod
    def load(cls, path: PathArg) -> Wallet:
        return Wallet._from_data(cls.read_wallet_data(path), path)

    @classmethod
    def load_encrypted(cls, path: PathArg, password: str) -> Wallet:
        record = EncryptedWalletData.from_bytes(Path(path).read_bytes())
        key = _derive_key(password, record.salt)
        if len(record.nonce) != NONCE_SIZE:
            raise EncryptionError("invalid nonce length")
        try:
            plain = AESGCM(key).decrypt(record.nonce, record.encrypted_data, None)
        except InvalidTag:
            raise EncryptionError("aead::Error") from None
        return Wallet._from_data(WalletData.from_bytes(plain), path)

    @staticmethod
    def read_wallet_data(path: PathArg) -> WalletData:
        return WalletData.from_bytes(Path(path).read_bytes())


@dataclass
class Wallet:
    """A keypair with its address, optional mnemonic and storage path.

    Created without keys, a fresh keypair is generated.
    """

    public_key: bytes = b""
    secret_key: bytes = field(default=b"", repr=False)
    address_hash: bytes = b""
    mnemonic: str | None = field(default=None, repr=False)
    path: str = DEFAULT_WALLET_PATH
    password_policy: PasswordPolicy = field(default_factory=PasswordPolicy)

    def __post_init__(self) -> None:
        self.path = os.fspath(self.path)
        if not self.public_key and not self.secret_key:
            self.public_key, self.secret_key = _generate_keypair()
        if not self.address_hash:
            self.address_hash = derive_address_from_pk(self.public_key)

    @property
    def storage(self) -> WalletStorage:
        return WalletStorage(self.path)

    def _data(self) -> WalletData:
        return WalletData(
            bytes(self.public_key),
            bytes(self.secret_key),
            bytes(self.address_hash),
            self.mnemonic,
        )

    @classmethod
    def _from_data(cls, data: WalletData, path: PathArg) -> Wallet:
        return cls(
            public_key=data.public_key,
            secret_key=data.secret_key,
            address_hash=data.address_hash,
            mnemonic=data.mnemonic,
            path=os.fspath(path),
        )

    def save(self) -> None:
        """Write the wallet unencrypted to its path."""
        self.storage.save(self)

    def save_encrypted(self, password: str) -> None:
        """Encrypt the wallet with a key derived from ``password`` and write it."""
        self.password_policy.validate(password)
        salt = os.urandom(SALT_SIZE)
        nonce = os.urandom(NONCE_SIZE)
        cipher = AESGCM(_derive_key(password, salt))
        encrypted = cipher.encrypt(nonce, self._data().to_bytes(), None)
        self.storage.save_encrypted(salt, nonce, encrypted)

    @classmethod
    def load(cls, path: PathArg) -> Wallet:
        return WalletStorage.load(path)

    @classmethod
    def load_encrypted(cls, path: PathArg, password: str) -> Wallet:
        return WalletStorage.load_encrypted(path, password)

    def address(self) -> PQAddress:
        return PQAddress(self.address_hash)

    def backup(self, backup_path: PathArg) -> None:
        """Write an unencrypted copy of the wallet to ``backup_path``."""
        Path(backup_path).write_bytes(self._data().to_bytes())

    @classmethod
    def restore_from_backup(cls, backup_path: PathArg) -> Wallet:
        """Read a backup; the restored wallet is stored at the default path."""
        return cls._from_data(
            WalletStorage.read_wallet_data(backup_path), DEFAULT_WALLET_PATH
        )