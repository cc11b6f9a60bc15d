"""Inventory API: authentication and token-issuance core."""

__version__ = "0.1.0"
