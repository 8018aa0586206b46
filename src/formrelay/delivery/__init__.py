"""
Package: delivery
Description: Submission delivery pipeline.

Provides the sink clients (Google Sheets, webhook), the fixed-delay
retry policy and the queue-consuming delivery worker.
"""
