"""
Module: utils
Description: Package initialization for utility functions.

This package contains shared helpers used by the API and the worker:
- logger: Structured logging configuration and helpers
- metrics: CloudWatch metrics publishing
"""

__all__ = []
