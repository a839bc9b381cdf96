"""Encrypted, hash-addressed JSON storage with signed attestation reports."""

__version__ = "0.1.0"
__all__ = ["__version__"]