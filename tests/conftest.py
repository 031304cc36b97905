import sys
from concurrent.futures import Future
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rhyme_highlighter.core import FALLBACK_DICTIONARY, PronunciationStore


SAMPLE_ENTRIES = {
    "write": ["R", "AY1", "T"],
    "night": ["N", "AY1", "T"],
    "time": ["T", "AY1", "M"],
    "day": ["D", "EY1"],
    "sit": ["S", "IH1", "T"],
    "light": ["L", "AY1", "T"],
    "cat": ["K", "AE1", "T"],
    "bet": ["B", "EH1", "T"],
    "the": ["DH", "AH"],
}


class CountingStore(PronunciationStore):
    """Store that records every lookup it serves."""

    def __init__(self, entries):
        super().__init__(entries=entries)
        self.lookups = []

    def lookup(self, word):
        self.lookups.append(word)
        return super().lookup(word)


def _resolve(future, fn, args, kwargs):
    try:
        future.set_result(fn(*args, **kwargs))
    except Exception as exc:
        future.set_exception(exc)


class ImmediateExecutor:
    """Executor running submitted work synchronously in the caller's thread."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future = Future()
        _resolve(future, fn, args, kwargs)
        return future

    def shutdown(self, wait=True):
        return None


class ManualExecutor:
    """Executor that queues work until a test runs it explicitly."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.jobs.append((fn, args, kwargs, future))
        return future

    def run(self, index):
        fn, args, kwargs, future = self.jobs[index]
        _resolve(future, fn, args, kwargs)
        return future

    def shutdown(self, wait=True):
        return None


class ManualTimer:
    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.kwargs = dict(kwargs or {})
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


class TimerRecorder:
    """``timer_factory`` stand-in that keeps every timer it creates."""

    def __init__(self):
        self.timers = []

    def __call__(self, interval, function, args=None, kwargs=None):
        timer = ManualTimer(interval, function, args=args, kwargs=kwargs)
        self.timers.append(timer)
        return timer

    @property
    def latest(self):
        return self.timers[-1]


@pytest.fixture
def sample_store():
    return PronunciationStore.from_entries(SAMPLE_ENTRIES)


@pytest.fixture
def fallback_store():
    return PronunciationStore.from_entries(FALLBACK_DICTIONARY)


@pytest.fixture
def immediate_executor():
    return ImmediateExecutor()


@pytest.fixture
def manual_executor():
    return ManualExecutor()


@pytest.fixture
def timers():
    return TimerRecorder()
