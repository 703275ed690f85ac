"""On-chain governance: improvement proposals, voting and the treasury."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from juliusgov.address import PQAddress

logger = logging.getLogger(__name__)

U64_MAX = (1 << 64) - 1
COIN = 1_000_000_000
DEFAULT_TOTAL_STAKE = 1_000_000_000_000


class GovernanceError(Exception):
    """Raised when a governance operation is not allowed."""


class JIPStatus(Enum):
    DRAFT = "Draft"
    PROPOSED = "Proposed"
    VOTING = "Voting"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    IMPLEMENTED = "Implemented"

    def __str__(self) -> str:
        return self.value


class JIPType(Enum):
    CORE = "Core"
    NETWORK = "Network"
    INTERFACE = "Interface"
    META = "Meta"

    def __str__(self) -> str:
        return self.value


class VoteType(Enum):
    YES = "Yes"
    NO = "No"
    ABSTAIN = "Abstain"

    def __str__(self) -> str:
        return self.value


@dataclass
class JIP:
    """An improvement proposal and the votes cast on it."""

    id: int
    title: str
    author: PQAddress
    status: JIPStatus
    jip_type: JIPType
    description: str
    created_at: int
    voting_period_end: int | None = None
    votes: dict[bytes, tuple[VoteType, int]] = field(default_factory=dict)
    implementation_block: int | None = None
    funding_request: int | None = None
    funding_received: int | None = None
    proposal_deposit: int | None = None


@dataclass(frozen=True)
class TreasuryStats:
    balance: int
    total_requested: int
    total_funded: int
    fee_rate: int


def _ratio(numerator: int, denominator: int) -> float:
    """Divide like IEEE floats do, giving nan or inf for a zero denominator."""
    if denominator == 0:
        return math.nan if numerator == 0 else math.inf
    return numerator / denominator


class Governance:
    """Governance state: proposals, voting rules and treasury."""

    def __init__(self, min_proposal_stake: int, voting_period: int) -> None:
        self.jips: dict[int, JIP] = {}
        self.next_jip_id = 0
        self.min_proposal_stake = min_proposal_stake
        self.voting_period = voting_period
        self.approval_threshold = 0.66
        self.min_participation = 0.40
        self.treasury_balance = 0
        self.treasury_fee_rate = 1000
        self.min_funding_request = 1_000_000_000

    def _get(self, jip_id: int) -> JIP:
        try:
            return self.jips[jip_id]
        except KeyError:
            raise GovernanceError("JIP not found") from None

    def propose_jip(
        self,
        title: str,
        author: PQAddress,
        jip_type: JIPType,
        description: str,
        author_stake: int,
        current_block: int,
        funding_request: int | None,
        proposal_deposit: int,
    ) -> int:
        """Submit a new proposal and return its id."""
        if author_stake < self.min_proposal_stake:
            raise GovernanceError("Insufficient stake to make a proposal")
        if proposal_deposit < self.min_proposal_stake:
            raise GovernanceError("Insufficient proposal deposit")
        if funding_request is not None and funding_request < self.min_funding_request:
            raise GovernanceError("Funding request below minimum amount")

        jip_id = self.next_jip_id
        self.jips[jip_id] = JIP(
            id=jip_id,
            title=title,
            author=author,
            status=JIPStatus.PROPOSED,
            jip_type=jip_type,
            description=description,
            created_at=current_block,
            voting_period_end=current_block + self.voting_period,
            funding_request=funding_request,
            proposal_deposit=proposal_deposit,
        )
        self.next_jip_id += 1
        return jip_id

    def vote(
        self,
        jip_id: int,
        voter: bytes,
        vote: VoteType,
        stake: int,
        current_block: int,
    ) -> None:
        """Record (or replace) a voter's vote on a proposal."""
        jip = self._get(jip_id)
        if jip.voting_period_end is None:
            raise GovernanceError("JIP is not in voting state")
        if current_block > jip.voting_period_end:
            raise GovernanceError("Voting period has ended")
        jip.votes[bytes(voter)] = (vote, stake)

    def tally_votes(self, jip_id: int, total_stake: int) -> JIPStatus:
        """Count votes, settle the proposal's status and return it."""
        jip = self._get(jip_id)

        yes_votes = 0
        total_votes = 0
        for vote, stake in jip.votes.values():
            if vote is VoteType.YES:
                yes_votes += stake
            total_votes += stake

        participation = _ratio(total_votes, total_stake)
        if participation < self.min_participation:
            jip.status = JIPStatus.REJECTED
            jip.proposal_deposit = None
            return JIPStatus.REJECTED

        approval = _ratio(yes_votes, total_votes)
        new_status = (
            JIPStatus.ACCEPTED
            if approval >= self.approval_threshold
            else JIPStatus.REJECTED
        )
        jip.status = new_status
        deposit, jip.proposal_deposit = jip.proposal_deposit, None

        if deposit is not None:
            logger.info("Returning proposal deposit of %d to proposer", deposit)

        if new_status is JIPStatus.ACCEPTED and jip.funding_request is not None:
            request = jip.funding_request
            try:
                self.fund_jip(jip_id, request)
            except GovernanceError:
                pass
            else:
                jip.funding_received = request
                logger.info("Funded JIP %d with %s coins", jip_id, request / COIN)

        return new_status

    def mark_implemented(self, jip_id: int, block: int) -> None:
        """Mark an accepted proposal as implemented at ``block``."""
        jip = self._get(jip_id)
        if jip.status is not JIPStatus.ACCEPTED:
            raise GovernanceError("JIP must be accepted before implementation")
        jip.status = JIPStatus.IMPLEMENTED
        jip.implementation_block = block

    def collect_treasury_fees(self, amount: int) -> None:
        """Add fees to the treasury, saturating at the 64-bit maximum."""
        self.treasury_balance = min(self.treasury_balance + amount, U64_MAX)

    def fund_jip(self, jip_id: int, amount: int) -> None:
        """Pay ``amount`` from the treasury for an accepted proposal."""
        jip = self._get(jip_id)
        if jip.status is not JIPStatus.ACCEPTED:
            raise GovernanceError("JIP must be in Accepted state to receive funding")
        if amount < self.min_funding_request:
            raise GovernanceError("Funding request below minimum amount")
        if amount > self.treasury_balance:
            raise GovernanceError("Insufficient treasury balance")
        self.treasury_balance -= amount

    def set_treasury_fee_rate(self, rate: int) -> None:
        """Set the treasury fee rate in basis points."""
        if rate > 10000:
            raise GovernanceError("Fee rate cannot exceed 100%")
        self.treasury_fee_rate = rate

    def update_jip_statuses(self, current_block: int) -> None:
        """Open voting on due proposals and tally those whose voting ended."""
        to_open: list[int] = []
        to_tally: list[int] = []
        for jip_id, jip in self.jips.items():
            if jip.status is JIPStatus.PROPOSED:
                if current_block >= jip.created_at + self.voting_period // 4:
                    to_open.append(jip_id)
            elif jip.status is JIPStatus.VOTING:
                end = jip.voting_period_end
                if end is not None and current_block > end:
                    to_tally.append(jip_id)

        for jip_id in to_open:
            self.jips[jip_id].status = JIPStatus.VOTING
            logger.info("JIP %d transitioned to Voting state", jip_id)

        for jip_id in to_tally:
            final_status = self.tally_votes(jip_id, DEFAULT_TOTAL_STAKE)
            logger.info(
                "JIP %d voting period ended, new status: %s", jip_id, final_status
            )

    def can_fund_jip(self, jip_id: int) -> bool:
        """Whether the proposal is accepted, unfunded and affordable."""
        jip = self._get(jip_id)
        if jip.status is not JIPStatus.ACCEPTED:
            return False
        if jip.funding_received is not None:
            return False
        if jip.funding_request is None:
            return False
        return jip.funding_request <= self.treasury_balance

    def fundable_jips(self) -> list[int]:
        """Ids of all proposals that could be funded now."""
        return [jip_id for jip_id in self.jips if self.can_fund_jip(jip_id)]

    def treasury_stats(self) -> TreasuryStats:
        """Summary of the treasury and funding across proposals."""
        return TreasuryStats(
            balance=self.treasury_balance,
            total_requested=sum(
                j.funding_request for j in self.jips.values()
                if j.funding_request is not None
            ),
            total_funded=sum(
                j.funding_received for j in self.jips.values()
                if j.funding_received is not None
            ),
            fee_rate=self.treasury_fee_rate,
        )