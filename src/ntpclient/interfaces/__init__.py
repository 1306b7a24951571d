"""Data records produced by the time-display path."""

from .query_result import TimeQueryResult

__all__ = ['TimeQueryResult']
