"""Rhyme detection and highlighting for poetry and lyric editors."""

__version__ = "0.1.0"
