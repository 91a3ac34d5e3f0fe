"""
Algorithm Step Engine

Event-sourced execution and playback engine for step-through algorithm visualizations.
"""

__version__ = "0.1.0"
