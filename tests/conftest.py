"""
Pytest Configuration and Fixtures

Shared fixtures for the unit tests: a controllable clock, a hydrated
in-memory NoteStore, a SQLite-backed StateRepository, and transport
stubs for the AI pipeline. Nothing here touches the network.
"""

import os

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Test environment defaults: MUST be set before any quicknotes imports.
#
# Settings are read once at import time, so anything the suite relies on
# is filled in here (a local .env still wins if present).
# ---------------------------------------------------------------------------
load_dotenv()  # .env → os.environ (no-op if file is missing)

_test_env = {
    "DATABASE_URL": "sqlite:///:memory:",
    "GEMINI_API_KEY": "test-key",
    "LOG_LEVEL": "DEBUG",
}
for _key, _value in _test_env.items():
    os.environ.setdefault(_key, _value)

# ---------------------------------------------------------------------------
# Imports (safe now that env vars are set)
# ---------------------------------------------------------------------------
import asyncio  # noqa: E402
import itertools  # noqa: E402
from datetime import UTC, datetime, timedelta  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402

from quicknotes.core.database import create_session_factory  # noqa: E402
from quicknotes.repositories.state import StateRepository  # noqa: E402
from quicknotes.schemas.notes import AppState  # noqa: E402
from quicknotes.services.seed import DEFAULT_FOLDERS  # noqa: E402
from quicknotes.services.store import NoteStore  # noqa: E402

START = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


class ScriptedGenerator:
    """
    Transport stub replaying a list of outcomes.

    Each call consumes one outcome; the last one repeats forever.
    Exception instances are raised, anything else is returned.
    """

    def __init__(self, *outcomes: object) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, str]] = []

    async def generate_text(self, prompt: str, system_instruction: str) -> str | None:
        self.calls.append((prompt, system_instruction))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome  # type: ignore[return-value]


class BlockingGenerator:
    """Transport stub that waits until ``release`` is set."""

    def __init__(self, text: str = "generated") -> None:
        self.text = text
        self.release = asyncio.Event()
        self.calls = 0

    async def generate_text(self, prompt: str, system_instruction: str) -> str | None:
        self.calls += 1
        await self.release.wait()
        return self.text


class SleepRecorder:
    """Drop-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_generator() -> type[ScriptedGenerator]:
    """Factory for scripted transport stubs: ``make_generator(err, err, "text")``."""
    return ScriptedGenerator


@pytest.fixture
def blocking_generator() -> BlockingGenerator:
    return BlockingGenerator()


@pytest.fixture
def store(clock: FakeClock) -> NoteStore:
    """Hydrated store with the default folders and no notes."""
    ids = itertools.count(1)
    note_store = NoteStore(
        default_folder="Personal",
        clock=clock,
        id_factory=lambda: f"note-{next(ids)}",
    )
    note_store.hydrate(AppState(notes=[], folders=list(DEFAULT_FOLDERS)))
    return note_store


@pytest.fixture
def repository(tmp_path: Path) -> StateRepository:
    """StateRepository on a fresh SQLite file."""
    factory = create_session_factory(f"sqlite:///{tmp_path / 'state.db'}")
    return StateRepository(factory, key="test_state")
