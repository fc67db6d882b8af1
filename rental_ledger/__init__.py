"""Rental payment ledger for agency-managed long-term and short-term rentals."""

__version__ = "0.1.0"
