"""Exceptions raised by rhyme_highlighter."""


class RhymeHighlighterError(Exception):
    """Base exception for rhyme_highlighter."""


class SchedulerClosedError(RhymeHighlighterError):
    """An update was requested after the analysis scheduler was closed."""
