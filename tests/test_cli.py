import pytest

from juliusgov.address import PQAddress
from juliusgov.cli import CliError, CliHandler, build_parser, main
from juliusgov.governance import Governance, JIPStatus, JIPType, VoteType
from juliusgov.wallet import Wallet


@pytest.fixture
def address():
    return PQAddress(b"\x01\x02\x03\x04")


@pytest.fixture
def governance():
    return Governance(1000, 1000)


@pytest.fixture
def handler(governance, address, tmp_path):
    return CliHandler(governance, address, 10, tmp_path / "wallet.dat")


def _propose(handler, title="Upgrade", jip_type="Core", deposit="1000", *extra):
    return handler.handle_command(
        ["propose", "-t", title, "-j", jip_type, "-d", "desc", "--deposit", deposit, *extra]
    )


def test_propose_creates_jip(handler, governance, address):
    lines = _propose(handler, "Faster sync", "NETWORK")
    assert lines == ["JIP proposed successfully with ID: 0"]
    jip = governance.jips[0]
    assert jip.title == "Faster sync"
    assert jip.jip_type is JIPType.NETWORK
    assert jip.author == address
    assert jip.created_at == 10
    assert jip.proposal_deposit == 1000


def test_propose_ids_increase(handler):
    _propose(handler)
    assert _propose(handler) == ["JIP proposed successfully with ID: 1"]


def test_propose_invalid_type(handler, governance):
    with pytest.raises(CliError, match="Invalid JIP type"):
        _propose(handler, jip_type="bogus")
    assert governance.jips == {}


def test_propose_low_deposit(handler):
    with pytest.raises(CliError, match="Insufficient proposal deposit"):
        _propose(handler, deposit="999")


def test_propose_low_funding(handler):
    with pytest.raises(CliError, match="Funding request below minimum amount"):
        _propose(handler, "T", "meta", "1000", "--funding", "5")


def test_propose_with_funding(handler, governance):
    _propose(handler, "T", "meta", "1000", "--funding", "1000000000")
    assert governance.jips[0].funding_request == 1_000_000_000


def test_vote_records(handler, governance, address):
    _propose(handler)
    assert handler.handle_command(["vote", "-j", "0", "-v", "YES"]) == [
        "Vote recorded successfully"
    ]
    assert governance.jips[0].votes[address.hash] == (VoteType.YES, 1000)


def test_vote_invalid_type(handler):
    _propose(handler)
    with pytest.raises(CliError, match="Invalid vote type"):
        handler.handle_command(["vote", "-j", "0", "-v", "maybe"])


def test_vote_missing_jip(handler):
    with pytest.raises(CliError, match="JIP not found"):
        handler.handle_command(["vote", "-j", "3", "-v", "no"])


def test_vote_after_period(governance, address, handler):
    _propose(handler)
    late = CliHandler(governance, address, 10 + 1000 + 1)
    with pytest.raises(CliError, match="Voting period has ended"):
        late.handle_command(["vote", "-j", "0", "-v", "yes"])


def test_list_filters_by_status(handler, governance):
    _propose(handler, "First")
    _propose(handler, "Second", "interface")
    governance.jips[1].status = JIPStatus.VOTING
    lines = handler.handle_command(["list", "-s", "Voting"])
    assert lines[0] == "=== JIP一覧 ==="
    assert lines[1:] == ["JIP #1: Second (Interface) - Voting"]


def test_list_unknown_status_means_proposed(handler, governance):
    _propose(handler, "First")
    _propose(handler, "Second")
    governance.jips[1].status = JIPStatus.REJECTED
    lines = handler.handle_command(["list", "--status", "whatever"])
    assert lines[1:] == ["JIP #0: First (Core) - Proposed"]


def test_list_all(handler):
    _propose(handler, "A")
    _propose(handler, "B")
    assert len(handler.handle_command(["list"])) == 3


def test_show_reports_votes(handler, address):
    _propose(handler, "Shown")
    handler.handle_command(["vote", "-j", "0", "-v", "yes"])
    lines = handler.handle_command(["show", "-j", "0"])
    assert lines[0] == "=== JIP #0 ==="
    assert "Title: Shown" in lines
    assert "Status: Proposed" in lines
    assert f'Author: "{address.hex()}"' in lines
    assert "Yes: 1000 coins" in lines
    assert "No: 0 coins" in lines


def test_show_missing(handler):
    with pytest.raises(CliError, match="JIP 5 not found"):
        handler.handle_command(["show", "-j", "5"])


def test_wallet_create_and_info(handler, tmp_path):
    assert handler.handle_command(["wallet-create"]) == ["Wallet saved successfully"]
    saved = Wallet.load(tmp_path / "wallet.dat")
    lines = handler.handle_command(["wallet-info"])
    assert lines == [
        f"Wallet Address: {saved.address().hex()}",
        "Has mnemonic backup: No",
    ]


def test_wallet_create_weak_password(handler, tmp_path):
    password = "password"
    with pytest.raises(CliError, match="Password error"):
        handler.handle_command(["wallet-create", "--password", password])
    assert not (tmp_path / "wallet.dat").exists()


def test_wallet_info_counts_mnemonic_words(handler, tmp_path):
    Wallet(mnemonic="alpha beta gamma", path=str(tmp_path / "wallet.dat")).save()
    lines = handler.handle_command(["wallet-info"])
    assert lines[1] == "Has mnemonic backup: Yes (3 words)"


def test_wallet_info_missing_file(handler):
    with pytest.raises(CliError, match="^Failed to load wallet"):
        handler.handle_command(["wallet-info"])


def test_backup_and_restore(handler, governance, address, tmp_path):
    handler.handle_command(["wallet-create"])
    backup = tmp_path / "backup.bin"
    assert handler.handle_command(["wallet-backup", "-p", str(backup)]) == [
        f"Wallet backed up successfully to: {backup}"
    ]
    other_path = tmp_path / "other.dat"
    other = CliHandler(governance, address, 0, other_path)
    assert other.handle_command(["wallet-restore", "--path", str(backup)]) == [
        "Wallet restored and saved"
    ]
    original = Wallet.load(tmp_path / "wallet.dat")
    restored = Wallet.load(other_path)
    assert restored.public_key == original.public_key
    assert restored.secret_key == original.secret_key


def test_missing_required_argument(handler):
    with pytest.raises(CliError):
        handler.handle_command(["vote", "-j", "0"])


def test_unknown_command(handler):
    with pytest.raises(CliError):
        handler.handle_command(["frobnicate"])


def test_build_parser_parses_propose():
    ns = build_parser().parse_args(
        ["propose", "-t", "T", "-j", "core", "-d", "D", "--deposit", "5", "-f", "7"]
    )
    assert (ns.command, ns.title, ns.deposit, ns.funding) == ("propose", "T", 5, 7)


def test_main_reports_error(capsys):
    assert main(["show", "-j", "0"]) == 1
    assert "JIP 0 not found" in capsys.readouterr().err


def test_main_lists(capsys):
    assert main(["list"]) == 0
    assert capsys.readouterr().out.strip() == "=== JIP一覧 ==="