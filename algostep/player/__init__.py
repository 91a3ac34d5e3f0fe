"""
Playback of precomputed timelines and sandbox event streams.
"""

from .animator import ScriptAnimator
from .controller import PlaybackController, PlaybackStatus

__all__ = ["PlaybackController", "PlaybackStatus", "ScriptAnimator"]
