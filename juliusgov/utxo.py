"""Unspent-output bookkeeping, validator stakes and slashing."""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from juliusgov.address import PQAddress

U64_MAX = (1 << 64) - 1
BURN_ADDRESS = "BURN_ADDRESS"


@dataclass(frozen=True)
class UtxoId:
    """Position of an output: block height, transaction index, output index."""

    block_index: int
    tx_index: int
    output_index: int

    @classmethod
    def genesis(cls, output_index: int) -> UtxoId:
        """Identifier of an output of the genesis transaction."""
        return cls(0, 0, output_index)

    @classmethod
    def pending(cls, tx_index: int, output_index: int) -> UtxoId:
        """Identifier of an output of a transaction not yet in a block."""
        return cls(U64_MAX, tx_index, output_index)

    @property
    def is_pending(self) -> bool:
        return self.block_index == U64_MAX

    @property
    def is_genesis(self) -> bool:
        return self.block_index == 0

    def to_hash(self) -> str:
        """Hex SHA-256 of the big-endian encoded identifier."""
        packed = struct.pack(">QII", self.block_index, self.tx_index, self.output_index)
        return hashlib.sha256(packed).hexdigest()

    def __str__(self) -> str:
        if self.is_pending:
            return f"pending-txoutput-{self.tx_index}-{self.output_index}"
        if self.is_genesis:
            return f"genesis-utxo-{self.output_index}"
        return f"utxo-{self.block_index}-{self.tx_index}-{self.output_index}"


class SlashingType(Enum):
    """Kinds of punishable validator misbehaviour."""

    DOUBLE_PROPOSAL = "DoubleProposal"
    DOUBLE_VOTING = "DoubleVoting"


@dataclass
class Validator:
    """A staking validator."""

    address: PQAddress
    stake_amount: int
    vrf_secret_key: bytes = field(default=bytes(32), repr=False)
    slashed: bool = False


@dataclass(frozen=True)
class SlashingEvidence:
    """Proof that a validator misbehaved at a given height."""

    validator: PQAddress
    block_height: int
    evidence_type: SlashingType
    proof: bytes = b""


class UTXOSet:
    """The set of unspent outputs together with the validator registry."""

    def __init__(self) -> None:
        self._utxos: dict[UtxoId, Any] = {}
        self._validators: dict[PQAddress, Validator] = {}
        self.balances: dict[PQAddress, int] = {}

    def add_validator(self, validator: Validator) -> None:
        """Register (or replace) a validator under its address."""
        self._validators[validator.address] = validator

    def validators(self) -> list[Validator]:
        return list(self._validators.values())

    def get_validator(self, address: PQAddress) -> Validator | None:
        return self._validators.get(address)

    def transfer(self, sender: PQAddress, recipient: PQAddress, amount: int) -> None:
        """Move ``amount`` of stake from a validator to another address.

        A validator recipient has its stake increased; any other recipient
        is credited in :attr:`balances`.
        """
        if amount < 0:
            raise ValueError("Transfer amount must not be negative")
        source = self._validators.get(sender)
        if source is None:
            raise ValueError("Validator not found")
        if amount > source.stake_amount:
            raise ValueError("Insufficient stake")
        source.stake_amount -= amount
        target = self._validators.get(recipient)
        if target is not None:
            target.stake_amount += amount
        else:
            self.balances[recipient] = self.balances.get(recipient, 0) + amount

    def get_utxo(self, utxo_id: UtxoId) -> Any | None:
        return self._utxos.get(utxo_id)

    def add_utxo(self, utxo_id: UtxoId, utxo: Any) -> None:
        self._utxos[utxo_id] = utxo

    def remove_utxo(self, utxo_id: UtxoId) -> Any | None:
        """Remove an output, returning it, or None if it was absent."""
        return self._utxos.pop(utxo_id, None)

    def all_utxos(self) -> dict[UtxoId, Any]:
        return dict(self._utxos)

    def slash_validator(self, evidence: SlashingEvidence) -> None:
        """Burn part or all of a validator's stake and mark it slashed."""
        validator = self.get_validator(evidence.validator)
        if validator is None:
            raise ValueError("Validator not found")
        if validator.slashed:
            raise ValueError("Validator already slashed")

        if evidence.evidence_type is SlashingType.DOUBLE_PROPOSAL:
            penalty = validator.stake_amount // 2
        else:
            penalty = validator.stake_amount
        self.transfer(evidence.validator, PQAddress.from_string(BURN_ADDRESS), penalty)
        validator.slashed = True


def hash_to_float(digest: bytes) -> float:
    """Map the first eight bytes of a digest (big-endian) into [0, 1]."""
    value = int.from_bytes(bytes(digest[:8]), "big")
    return float(value) / float(U64_MAX)