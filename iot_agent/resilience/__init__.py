"""Resilience helpers - retry_with_backoff and RetryConfig."""

from .retry import RetryConfig, retry_with_backoff

__all__ = ["RetryConfig", "retry_with_backoff"]
