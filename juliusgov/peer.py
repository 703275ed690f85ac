"""Peer reputation, banning and status tracking."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Callable

from juliusgov.address import PQAddress

CONNECTION_TIMEOUT = 10
HEARTBEAT_INTERVAL = 30
MAX_MESSAGE_SIZE = 50 * 1024 * 1024
MAX_PEERS = 50
PEER_SCORE_THRESHOLD = -100
BLOCK_PROPAGATION_TIMEOUT = 5
SYNC_BATCH_SIZE = 100


class PeerScoreCategory(Enum):
    """Observed peer behaviour, each carrying a score adjustment."""

    SUCCESSFUL_BLOCK_PROPAGATION = "SuccessfulBlockPropagation"
    SUCCESSFUL_TX_PROPAGATION = "SuccessfulTxPropagation"
    VALID_MESSAGE = "ValidMessage"
    INVALID_MESSAGE = "InvalidMessage"
    INVALID_BLOCK = "InvalidBlock"
    INVALID_TX = "InvalidTx"
    SLOW_RESPONSE = "SlowResponse"
    FAILED_PING = "FailedPing"

    @property
    def weight(self) -> int:
        return _WEIGHTS[self]


_WEIGHTS = {
    PeerScoreCategory.SUCCESSFUL_BLOCK_PROPAGATION: 1,
    PeerScoreCategory.SUCCESSFUL_TX_PROPAGATION: 1,
    PeerScoreCategory.VALID_MESSAGE: 1,
    PeerScoreCategory.INVALID_MESSAGE: -10,
    PeerScoreCategory.INVALID_BLOCK: -20,
    PeerScoreCategory.INVALID_TX: -10,
    PeerScoreCategory.SLOW_RESPONSE: -1,
    PeerScoreCategory.FAILED_PING: -5,
}


@dataclass
class PeerStatus:
    """Chain status a peer last reported."""

    version: int = 0
    height: int = 0
    total_difficulty: int = 0


def _seconds(duration: timedelta | float) -> float:
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    return float(duration)


@dataclass
class Peer:
    """A connected peer with its reputation score and ban state."""

    address: PQAddress
    socket_addr: str
    stream: Any = field(default=None, repr=False)
    shared_secret: bytes = field(default=b"", repr=False)
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)
    last_seen: float | None = field(default=None, repr=False)
    score: int = field(default=0, repr=False)
    status: PeerStatus = field(default_factory=PeerStatus, repr=False)
    banned_until: float | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.last_seen is None:
            self.last_seen = self.clock()

    def update_score(self, category: PeerScoreCategory) -> int:
        """Apply the category's adjustment and return the new score."""
        self.score += category.weight
        return self.score

    def is_banned(self) -> bool:
        return self.banned_until is not None and self.clock() < self.banned_until

    def ban(self, duration: timedelta | float) -> None:
        """Ban the peer for ``duration`` (seconds or a timedelta) from now."""
        self.banned_until = self.clock() + _seconds(duration)

    def update_status(self, version: int, height: int, total_difficulty: int) -> None:
        """Record the peer's reported chain status and mark it as seen."""
        self.status.version = version
        self.status.height = height
        self.status.total_difficulty = total_difficulty
        self.last_seen = self.clock()

    def should_ban(self) -> bool:
        """Whether the score has fallen below the ban threshold."""
        return self.score < PEER_SCORE_THRESHOLD