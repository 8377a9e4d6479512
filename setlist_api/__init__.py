"""Setlist Manager backend: songs, setlists, friendships and account lifecycle."""

__version__ = "0.1.0"
