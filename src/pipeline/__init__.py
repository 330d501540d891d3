"""
Package: pipeline
Description: Seams between the hosting pipeline and the sinks.

Provides the closable event channel sinks consume from and the
progress tracker they report to.
"""

from .channel import EventChannel
from .progress import ProgressCallback, ProgressSnapshot, ProgressTracker

__all__ = [
    "EventChannel",
    "ProgressCallback",
    "ProgressSnapshot",
    "ProgressTracker",
]
