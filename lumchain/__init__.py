"""Beam escrow and airdrop claim ledgers over an in-memory chain state."""

__version__ = "1.0.4"