"""Wallet errors and the password policy used to protect wallet files."""

from __future__ import annotations

from dataclasses import dataclass

SPECIAL_CHARACTERS = frozenset("!@#$%^&*(),.?:{}|<>")


class WalletError(Exception):
    """Base class for wallet failures."""

    prefix = "Wallet error"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.prefix}: {self.detail}"


class SerializationError(WalletError):
    """Wallet data could not be encoded or decoded."""

    prefix = "Serialization error"


class WalletKeyError(WalletError):
    """A key was missing or malformed."""

    prefix = "Key error"


class InvalidMnemonicError(WalletError):
    """A mnemonic phrase was rejected."""

    prefix = "Invalid mnemonic"


class EncryptionError(WalletError):
    """Encryption or decryption of wallet data failed."""

    prefix = "Encryption error"


class PasswordError(WalletError):
    """A password does not satisfy the policy."""

    prefix = "Password error"


@dataclass(frozen=True)
class PasswordPolicy:
    """Requirements a password must meet before it may encrypt a wallet."""

    min_length: int = 12
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_special: bool = True

    def validate(self, password: str) -> None:
        """Raise :class:`PasswordError` for the first rule ``password`` breaks."""
        if len(password.encode("utf-8")) < self.min_length:
            raise PasswordError(
                f"Password must be at least {self.min_length} characters long"
            )
        if self.require_uppercase and not any(c.isupper() for c in password):
            raise PasswordError("Password must contain at least one uppercase letter")
        if self.require_lowercase and not any(c.islower() for c in password):
            raise PasswordError("Password must contain at least one lowercase letter")
        if self.require_numbers and not any(c.isnumeric() for c in password):
            raise PasswordError("Password must contain at least one number")
        if self.require_special and not any(c in SPECIAL_CHARACTERS for c in password):
            raise PasswordError(
                "Password must contain at least one special character"
            )