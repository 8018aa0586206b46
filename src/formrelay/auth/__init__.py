"""
Module: auth
Description: Package initialization for request origin checks.

This package contains access control for the submission endpoint:
- network: Client network allowlist dependency
"""

__all__ = []
