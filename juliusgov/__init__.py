"""Proposal governance, treasury, UTXO bookkeeping, peer scoring, metrics and wallet storage for a proof-of-stake coin."""

__version__ = "0.1.0"