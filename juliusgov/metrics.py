"""Size and timing statistics for signatures and blocks."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import timedelta

logger = logging.getLogger(__name__)

_U64_MOD = 1 << 64
_UNITS = ((1_000_000_000, "s"), (1_000_000, "ms"), (1_000, "µs"))


def _to_nanos(duration: timedelta | int) -> int:
    if isinstance(duration, timedelta):
        micros = (duration.days * 86_400 + duration.seconds) * 1_000_000
        return (micros + duration.microseconds) * 1000
    return int(duration)


def _format_duration(nanos: int) -> str:
    """Render nanoseconds in the most fitting unit, e.g. ``1.5µs``."""
    for divisor, unit in _UNITS:
        if nanos >= divisor:
            whole, frac = divmod(nanos, divisor)
            if not frac:
                return f"{whole}{unit}"
            width = len(str(divisor)) - 1
            digits = str(frac).rjust(width, "0").rstrip("0")
            return f"{whole}.{digits}{unit}"
    return f"{nanos}ns"


def _percent(part: int, total: int) -> str:
    if total == 0:
        return "NaN" if part == 0 else "inf"
    return f"{part / total * 100.0:.1f}"


def _emit(lines: list[str]) -> list[str]:
    for line in lines:
        logger.info(line)
    return lines


@dataclass
class CryptoMetrics:
    """Key and signature sizes plus running average operation times.

    Times are kept in nanoseconds.
    """

    dilithium_pubkey_size: int = 0
    dilithium_secret_key_size: int = 0
    dilithium_signature_size: int = 0
    kyber_pubkey_size: int = 0
    kyber_secret_key_size: int = 0
    kyber_ciphertext_size: int = 0
    avg_sign_time_ns: int = 0
    avg_verify_time_ns: int = 0
    total_operations: int = 0

    def record_key_sizes(self, pk: bytes, sk: bytes) -> None:
        self.dilithium_pubkey_size = len(pk)
        self.dilithium_secret_key_size = len(sk)

    def record_signature_size(self, sig: bytes) -> None:
        self.dilithium_signature_size = len(sig)

    def record_operation_time(self, is_signing: bool, duration: timedelta | int) -> None:
        """Fold a duration (timedelta or nanoseconds) into the running average.

        The operation counter is shared by signing and verification.
        """
        self.total_operations += 1
        nanos = _to_nanos(duration)
        previous = self.avg_sign_time_ns if is_signing else self.avg_verify_time_ns
        total = previous * (self.total_operations - 1) + nanos
        average = (total // self.total_operations) % _U64_MOD
        if is_signing:
            self.avg_sign_time_ns = average
        else:
            self.avg_verify_time_ns = average

    def print_stats(self) -> list[str]:
        """Log the statistics and return the logged lines."""
        ratio = self.dilithium_signature_size / 72.0
        return _emit([
            "=== 量子耐性暗号メトリクス ===",
            f"Dilithium公開鍵サイズ: {self.dilithium_pubkey_size} bytes",
            f"Dilithium秘密鍵サイズ: {self.dilithium_secret_key_size} bytes",
            f"Dilithium署名サイズ: {self.dilithium_signature_size} bytes",
            f"平均署名時間: {_format_duration(self.avg_sign_time_ns)}",
            f"平均検証時間: {_format_duration(self.avg_verify_time_ns)}",
            f"総操作回数: {self.total_operations}",
            "\n=== ECDSA比較 ===",
            "ECDSA公開鍵サイズ: 33 bytes",
            "ECDSA署名サイズ: 71-72 bytes",
            f"Dilithium/ECDSA署名サイズ比: {ratio:.1f}倍",
        ])


@dataclass
class BlockMetrics:
    """Breakdown of a block's size."""

    total_block_size: int
    signature_data_size: int
    transaction_data_size: int
    header_size: int
    transaction_count: int

    @classmethod
    def calculate_sizes(cls, block_data: bytes, signatures_data: bytes) -> BlockMetrics:
        """Compute sizes from the serialised block and its signature data."""
        if len(signatures_data) > len(block_data):
            raise ValueError("signature data is larger than the block")
        return cls(
            total_block_size=len(block_data),
            signature_data_size=len(signatures_data),
            transaction_data_size=len(block_data) - len(signatures_data),
            header_size=80,
            transaction_count=0,
        )

    def print_stats(self) -> list[str]:
        """Log the statistics and return the logged lines."""
        return _emit([
            "=== ブロックメトリクス ===",
            f"総ブロックサイズ: {self.total_block_size // 1024} KB",
            f"署名データ比率: {_percent(self.signature_data_size, self.total_block_size)}%",
            "トランザクションデータ比率: "
            f"{_percent(self.transaction_data_size, self.total_block_size)}%",
        ])


__all__ = ["CryptoMetrics", "BlockMetrics", "math"] if False else ["CryptoMetrics", "BlockMetrics"]