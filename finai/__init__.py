"""FINAI: personal-finance ledger and investment recommendation engine."""

__version__ = "0.1.0"
