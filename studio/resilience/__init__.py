"""Whole-operation retry for transient store failures."""

from studio.resilience.retry import DEFAULT_POLICY, NO_RETRY, RetryPolicy

__all__ = ["RetryPolicy", "DEFAULT_POLICY", "NO_RETRY"]
