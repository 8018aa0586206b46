"""
Module: storage
Description: Package initialization for the status persistence layer.

This package contains the submission status store implementations:
- status: DynamoDB and in-memory status stores with expiry

All storage implementations follow async interfaces for consistency.
"""

__all__ = []
