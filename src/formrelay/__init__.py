"""
Package: formrelay
Description: Form submission intake and asynchronous delivery service.

Accepts form submissions over HTTP, queues them durably and forwards
each one to an append-only record sink (Google Sheets by default),
tracking the delivery outcome per submission.
"""

__version__ = "0.1.0"
