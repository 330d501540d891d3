"""
Module: utils
Description: Package initialization for utility functions.

This package contains shared helpers used throughout the sinks.

Current utilities:
- logger: Structured logging configuration and helpers
"""

__all__ = []
