"""Command-line interface for wallets and governance proposals."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence

from juliusgov.address import PQAddress
from juliusgov.governance import (
    Governance,
    GovernanceError,
    JIPStatus,
    JIPType,
    VoteType,
)
from juliusgov.password import WalletError
from juliusgov.wallet import DEFAULT_WALLET_PATH, Wallet

logger = logging.getLogger(__name__)

PROPOSER_STAKE = 1_000_000
VOTER_STAKE = 1000

_JIP_TYPES = {
    "core": JIPType.CORE,
    "network": JIPType.NETWORK,
    "interface": JIPType.INTERFACE,
    "meta": JIPType.META,
}

_VOTE_TYPES = {
    "yes": VoteType.YES,
    "no": VoteType.NO,
    "abstain": VoteType.ABSTAIN,
}

_STATUSES = {
    "draft": JIPStatus.DRAFT,
    "proposed": JIPStatus.PROPOSED,
    "voting": JIPStatus.VOTING,
    "accepted": JIPStatus.ACCEPTED,
    "rejected": JIPStatus.REJECTED,
    "implemented": JIPStatus.IMPLEMENTED,
}


class CliError(Exception):
    """Raised when a command cannot be parsed or carried out."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise CliError(message)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = _Parser(prog="juliusgov", description="Wallet and governance commands")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("wallet-create", help="Create a new wallet")
    create.add_argument("-p", "--password", help="Password to encrypt the wallet")

    commands.add_parser("wallet-info", help="Show wallet information")

    backup = commands.add_parser("wallet-backup", help="Backup wallet to a file")
    backup.add_argument("-p", "--path", required=True, help="Path to save the backup")

    restore = commands.add_parser(
        "wallet-restore", help="Restore wallet from a backup file"
    )
    restore.add_argument("-p", "--path", required=True, help="Path to the backup file")
    restore.add_argument("--password", help="Password to encrypt the restored wallet")

    propose = commands.add_parser("propose", help="Propose a JIP")
    propose.add_argument("-t", "--title", required=True)
    propose.add_argument(
        "-j", "--jip-type", required=True, help="Core, Network, Interface or Meta"
    )
    propose.add_argument("-d", "--description", required=True)
    propose.add_argument("-f", "--funding", type=int, help="Requested funding")
    propose.add_argument("--deposit", type=int, required=True, help="Proposal deposit")

    vote = commands.add_parser("vote", help="Vote on a JIP")
    vote.add_argument("-j", "--jip-id", type=int, required=True)
    vote.add_argument("-v", "--vote", required=True, help="Yes, No or Abstain")

    listing = commands.add_parser("list", help="List JIPs")
    listing.add_argument("-s", "--status", help="Only JIPs with this status")

    show = commands.add_parser("show", help="Show a JIP in detail")
    show.add_argument("-j", "--jip-id", type=int, required=True)

    return parser


class CliHandler:
    """Runs commands against a governance state on behalf of one address."""

    def __init__(
        self,
        governance: Governance,
        wallet: PQAddress,
        current_block: int,
        wallet_path: str | os.PathLike[str] = DEFAULT_WALLET_PATH,
    ) -> None:
        self.governance = governance
        self.wallet = wallet
        self.current_block = current_block
        self.wallet_path = os.fspath(wallet_path)
        self._parser = build_parser()

    def handle_command(self, args: Sequence[str]) -> list[str]:
        """Run one command (arguments without the program name).

        Returns the report lines, which are also logged.
        """
        ns = self._parser.parse_args(list(args))
        handler = getattr(self, "_cmd_" + ns.command.replace("-", "_"))
        lines = handler(ns)
        for line in lines:
            logger.info(line)
        return lines

    def _store(self, wallet: Wallet, password: str | None, plain: str, secured: str) -> str:
        try:
            if password is not None:
                wallet.save_encrypted(password)
                return secured
            wallet.save()
            return plain
        except (WalletError, OSError) as exc:
            raise CliError(str(exc)) from exc

    def _load(self) -> Wallet:
        try:
            return Wallet.load(self.wallet_path)
        except (WalletError, OSError) as exc:
            raise CliError(f"Failed to load wallet: {exc}") from exc

    def _cmd_wallet_create(self, ns: argparse.Namespace) -> list[str]:
        wallet = Wallet(path=self.wallet_path)
        return [
            self._store(
                wallet,
                ns.password,
                "Wallet saved successfully",
                "Wallet encrypted and saved successfully",
            )
        ]

    def _cmd_wallet_info(self, ns: argparse.Namespace) -> list[str]:
        wallet = self._load()
        lines = [f"Wallet Address: {wallet.address_hash.hex()}"]
        if wallet.mnemonic is not None:
            count = len(wallet.mnemonic.split())
            lines.append(f"Has mnemonic backup: Yes ({count} words)")
        else:
            lines.append("Has mnemonic backup: No")
        return lines

    def _cmd_wallet_backup(self, ns: argparse.Namespace) -> list[str]:
        wallet = self._load()
        try:
            wallet.backup(ns.path)
        except OSError as exc:
            raise CliError(str(exc)) from exc
        return [f"Wallet backed up successfully to: {ns.path}"]

    def _cmd_wallet_restore(self, ns: argparse.Namespace) -> list[str]:
        try:
            wallet = Wallet.restore_from_backup(ns.path)
        except (WalletError, OSError) as exc:
            raise CliError(str(exc)) from exc
        wallet.path = self.wallet_path
        return [
            self._store(
                wallet,
                ns.password,
                "Wallet restored and saved",
                "Wallet restored and saved with encryption",
            )
        ]

    def _cmd_propose(self, ns: argparse.Namespace) -> list[str]:
        jip_type = _JIP_TYPES.get(ns.jip_type.lower())
        if jip_type is None:
            raise CliError("Invalid JIP type")
        try:
            jip_id = self.governance.propose_jip(
                ns.title,
                self.wallet,
                jip_type,
                ns.description,
                PROPOSER_STAKE,
                self.current_block,
                ns.funding,
                ns.deposit,
            )
        except GovernanceError as exc:
            raise CliError(str(exc)) from exc
        return [f"JIP proposed successfully with ID: {jip_id}"]

    def _cmd_vote(self, ns: argparse.Namespace) -> list[str]:
        vote_type = _VOTE_TYPES.get(ns.vote.lower())
        if vote_type is None:
            raise CliError("Invalid vote type")
        try:
            self.governance.vote(
                ns.jip_id, self.wallet.hash, vote_type, VOTER_STAKE, self.current_block
            )
        except GovernanceError as exc:
            raise CliError(str(exc)) from exc
        return ["Vote recorded successfully"]

    def _cmd_list(self, ns: argparse.Namespace) -> list[str]:
        wanted = None
        if ns.status is not None:
            wanted = _STATUSES.get(ns.status.lower(), JIPStatus.PROPOSED)
        lines = ["=== JIP一覧 ==="]
        for jip_id, jip in sorted(self.governance.jips.items()):
            if wanted is not None and jip.status is not wanted:
                continue
            lines.append(f"JIP #{jip_id}: {jip.title} ({jip.jip_type}) - {jip.status}")
        return lines

    def _cmd_show(self, ns: argparse.Namespace) -> list[str]:
        jip = self.governance.jips.get(ns.jip_id)
        if jip is None:
            raise CliError(f"JIP {ns.jip_id} not found")
        lines = [
            f"=== JIP #{ns.jip_id} ===",
            f"Title: {jip.title}",
            f"Type: {jip.jip_type}",
            f"Status: {jip.status}",
            f'Author: "{jip.author.hash.hex()}"',
            f"Created at block: {jip.created_at}",
        ]
        if jip.voting_period_end is not None:
            lines.append(f"Voting ends at block: {jip.voting_period_end}")
        lines.append(f"\nDescription:\n{jip.description}")

        totals = dict.fromkeys(VoteType, 0)
        for vote, stake in jip.votes.values():
            totals[vote] += stake
        lines += [
            "\nVoting Status:",
            f"Yes: {totals[VoteType.YES]} coins",
            f"No: {totals[VoteType.NO]} coins",
            f"Abstain: {totals[VoteType.ABSTAIN]} coins",
        ]
        return lines


def main(argv: Sequence[str] | None = None) -> int:
    """Run one command from the command line; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        address = Wallet.load(DEFAULT_WALLET_PATH).address()
    except (WalletError, OSError):
        address = Wallet().address()
    handler = CliHandler(Governance(1000, 1000), address, 0)
    try:
        lines = handler.handle_command(args)
    except CliError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())