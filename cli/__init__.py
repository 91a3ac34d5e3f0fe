"""
algostep CLI - Algorithm step-through playback

Commands:
- algostep list - Built-in algorithms
- algostep run - Run an algorithm and inspect a snapshot
- algostep play - Animate an algorithm in the terminal
- algostep exec - Run a script in the sandbox
- algostep version
"""

__version__ = "0.1.0"
