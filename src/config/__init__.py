"""
Module: config
Description: Package initialization for configuration.

This package contains:
- settings: Environment driven runtime settings and defaults
- sinks: Typed per-sink configuration and delivery policies
"""

__all__ = []
