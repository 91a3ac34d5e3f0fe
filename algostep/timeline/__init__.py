"""
Timeline construction for step-through playback.

The builder folds the reducer over a complete event list, producing one
snapshot per prefix. Must be 100% deterministic: same events -> same timeline.
"""

from .builder import ReplayResult, Timeline, build_timeline, replay

__all__ = [
    "ReplayResult",
    "Timeline",
    "build_timeline",
    "replay",
]
