"""Stockroom: multi-tenant inventory API with an atomic stock ledger."""

__version__ = "1.0.0"
