"""Origination: verification ledger and review workflow for loan applications."""

__version__ = "1.0.0"
