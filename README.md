# juliusgov

Governance and bookkeeping for a proof-of-stake coin:

- **Improvement proposals (JIPs)** – propose, vote, tally by stake, mark as
  implemented, and fund accepted proposals from a treasury
  (`juliusgov.governance`).
- **Treasury** – fee collection, a fee rate in basis points, and statistics on
  requested and granted funding.
- **UTXO set and validators** – `UtxoId` identifiers with stable SHA-256
  hashes, a validator registry, stake transfers and slashing
  (`juliusgov.utxo`).
- **Peers** – reputation scoring, ban threshold and time-limited bans
  (`juliusgov.peer`).
- **Wallets** – plain or password-encrypted (PBKDF2-SHA256 + AES-256-GCM)
  wallet files, backups and restores, with a password policy
  (`juliusgov.wallet`, `juliusgov.password`).
- **Metrics** – key, signature and block size statistics and average
  operation times (`juliusgov.metrics`).

## Installation

```
pip install .
```

Python 3.10 or later is required.

## Command line

The `juliusgov` command runs one subcommand per invocation. List the
subcommands and their options with:

```
juliusgov --help
```

Wallet commands work on `wallet.dat` in the current directory:

```
juliusgov wallet-create
juliusgov wallet-info
juliusgov wallet-backup --path backup.dat
juliusgov wallet-restore --path backup.dat
```

- `wallet-create [-p/--password PW]` creates a new keypair and saves it.
- `wallet-info` prints the address hash and whether a mnemonic is stored.
  It reads unencrypted wallet files only.
- `wallet-backup -p/--path FILE` writes an unencrypted copy of the wallet.
- `wallet-restore -p/--path FILE [--password PW]` reads a backup and saves it
  as `wallet.dat`.

When a password is given, the wallet is stored encrypted. The password must be
at least 12 characters long and contain an upper-case letter, a lower-case
letter, a digit and one of `!@#$%^&*(),.?:{}|<>`.

Proposal commands:

```
juliusgov propose -t "Title" -j core -d "Description" --deposit 1000
juliusgov vote -j 0 -v yes
juliusgov list
juliusgov show -j 0
```

- `propose -t/--title -j/--jip-type {core,network,interface,meta}
  -d/--description --deposit N [-f/--funding N]`
- `vote -j/--jip-id ID -v/--vote {yes,no,abstain}`
- `list [-s/--status STATUS]`
- `show -j/--jip-id ID`

Errors are printed as `Error: ...` on standard error with exit status 1.

## Library use

```python
from juliusgov.address import PQAddress
from juliusgov.governance import Governance, JIPType, VoteType

gov = Governance(min_proposal_stake=1000, voting_period=1000)
author = PQAddress.from_string("author")

jip_id = gov.propose_jip(
    "Raise block size",
    author,
    JIPType.CORE,
    "Double the maximum block size.",
    author_stake=1_000_000,
    current_block=10,
    funding_request=None,
    proposal_deposit=1000,
)

gov.vote(jip_id, b"voter-1", VoteType.YES, 800, 20)
status = gov.tally_votes(jip_id, total_stake=1000)
print(status)            # Accepted: 80% participation, 100% in favour
print(gov.treasury_stats())
```

A proposal needs at least 40% of the total stake to take part and at least 66%
of the cast stake in favour to be accepted. An accepted proposal with a funding
request is paid from the treasury if the balance covers it. Failures such as an
unknown proposal, a vote after the voting period or a fee rate above 10000
basis points raise `GovernanceError`.

Wallets:

```python
from juliusgov.wallet import Wallet

wallet = Wallet.load("wallet.dat")
print(wallet.address().hex())
wallet.backup("backup.dat")
```

`Wallet.load_encrypted(path, password)` opens an encrypted wallet file; a
wrong password raises `EncryptionError`, a policy violation on saving raises
`PasswordError` (both from `juliusgov.password`).

## What the package does not do

- Governance state is held in memory only. The command line starts with an
  empty `Governance` on every run, so proposals and votes made by one
  invocation are not seen by the next.
- There is no mnemonic phrase generation or recovery; a wallet's `mnemonic`
  field is only stored and reported.
- Wallet keys are Ed25519 keypairs; there is no signing or verification API.
- There is no block chain, transaction processing, consensus or proposer
  selection, and no network code: `Peer` tracks score, status and bans but
  opens no connections.

## Running the tests

```
pip install .[test]
pytest
```