"""Credential storage"""

from .secure_store import SecureStore

__all__ = ["SecureStore"]
