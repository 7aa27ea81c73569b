"""
AI Assist Pipeline

Rewrites or augments a note through the generative-text service.

Flow per invocation::

    IDLE -> REQUESTING -> IDLE, reporting APPLIED | FAILED | NO_RESULT

    1. Check preconditions (known action, note exists, non-blank content).
    2. Build the system instruction for the action; the user prompt is
       the note content verbatim.
    3. Call the transport with up to ``max_attempts`` attempts and
       exponential backoff between them (1s, 2s, 4s, 8s).
    4. Re-fetch the note by id and write the result through
       NoteStore.update_content.

Only one invocation runs at a time. A call made while another one is
requesting returns SKIPPED without touching the network.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Final, Protocol

from quicknotes.core.config import settings
from quicknotes.services.llm import TransportError
from quicknotes.services.store import NoteStore

logger = logging.getLogger(__name__)


class AssistAction(StrEnum):
    SUMMARY = "summary"
    CONTINUE = "continue"
    OPTIMIZE = "optimize"
    CHECKLIST = "checklist"


class PipelineState(StrEnum):
    """Idle between calls; the terminal outcome is carried by AssistResult."""

    IDLE = "idle"
    REQUESTING = "requesting"


class AssistStatus(StrEnum):
    """Outcome reported to the caller."""

    APPLIED = "applied"
    FAILED = "failed"
    SKIPPED = "skipped"  # precondition not met or another call in flight
    NO_RESULT = "no_result"  # response carried no text
    DISCARDED = "discarded"  # note deleted while the request was running


SYSTEM_PROMPTS: Final[dict[AssistAction, str]] = {
    AssistAction.SUMMARY: (
        "You are a professional note-taking secretary. Summarize this memo "
        "concisely as a bulleted list."
    ),
    AssistAction.CONTINUE: (
        "You are a creative writing assistant. Continue the text for about "
        "150 words, matching the tone of the existing content. Output only "
        "the continuation."
    ),
    AssistAction.OPTIMIZE: (
        "You are a text editor. Fix the grammar and make the writing more "
        "elegant while keeping the original meaning. Output the full "
        "revised text only."
    ),
    AssistAction.CHECKLIST: (
        "You are a task extraction expert. Convert the action items in the "
        "content into lines of the form '- [ ] task name'. Output only the "
        "list."
    ),
}

# Labels for the separator block appended by summary/checklist
BLOCK_LABELS: Final[dict[AssistAction, str]] = {
    AssistAction.SUMMARY: "Summary",
    AssistAction.CHECKLIST: "Checklist",
}


class TextGenerator(Protocol):
    async def generate_text(self, prompt: str, system_instruction: str) -> str | None: ...


@dataclass
class AssistResult:
    """
    Outcome of one run_action call.

    Attributes:
        status: What happened.
        action: The action requested (None if it was not recognised).
        text: Generated text when one was received.
        error: Failure or skip reason.
        attempts: Transport attempts made.
    """

    status: AssistStatus
    action: AssistAction | None = None
    text: str | None = None
    error: str | None = None
    attempts: int = 0


def apply_result(content: str, action: AssistAction, result: str) -> str:
    """Combine the current note content with a generated result."""
    if action is AssistAction.CONTINUE:
        return content + "\n\n" + result
    if action is AssistAction.OPTIMIZE:
        return result
    return content + f"\n\n--- ✨ AI {BLOCK_LABELS[action]} ---\n" + result


class AssistPipeline:
    """
    Runs AI actions against notes held by a NoteStore.

    Usage::

        pipeline = AssistPipeline(store, GeminiClient())
        result = await pipeline.run_action(note_id, "checklist")
        if result.status is AssistStatus.FAILED:
            ...

    Args:
        store: Note store the results are written back to.
        generator: Transport with an async ``generate_text``.
        max_attempts: Total transport attempts per invocation.
        backoff_base: Delay before retry ``n`` (0-indexed) is
            ``backoff_base ** n`` seconds.
        sleep: Awaitable delay function (swap for a fake clock in tests).
    """

    def __init__(
        self,
        store: NoteStore,
        generator: TextGenerator,
        max_attempts: int | None = None,
        backoff_base: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._generator = generator
        self._max_attempts = max_attempts or settings.AI_MAX_ATTEMPTS
        self._backoff_base = backoff_base or settings.AI_BACKOFF_BASE
        self._sleep = sleep

        self._state = PipelineState.IDLE
        self._last_result: AssistResult | None = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_loading(self) -> bool:
        """True while a request is outstanding."""
        return self._state is PipelineState.REQUESTING

    @property
    def last_result(self) -> AssistResult | None:
        """Outcome of the most recent invocation (in-flight rejections excluded)."""
        return self._last_result

    async def run_action(self, note_id: str, action: AssistAction | str) -> AssistResult:
        """
        Run one AI action on a note.

        Never raises: every outcome is reported through AssistResult and
        the note is only modified on APPLIED.
        """
        if self.is_loading:
            logger.info("AI request already in flight, ignoring '%s'", action)
            return self._finish(
                AssistResult(AssistStatus.SKIPPED, error="request in flight"),
                record=False,
            )

        try:
            kind = AssistAction(action)
        except ValueError:
            logger.info("Unknown AI action %r, ignoring", action)
            return self._finish(
                AssistResult(AssistStatus.SKIPPED, error=f"unknown action: {action}")
            )

        note = self._store.get(note_id)
        if note is None or not note.content.strip():
            logger.info("Note %s missing or empty, skipping '%s'", note_id, kind)
            return self._finish(
                AssistResult(AssistStatus.SKIPPED, action=kind, error="empty note")
            )

        self._state = PipelineState.REQUESTING
        attempts = 0
        try:
            text, attempts = await self._generate(note.content, SYSTEM_PROMPTS[kind])

            if not text:
                logger.info("AI '%s' returned no text for note %s", kind, note_id)
                return self._finish(
                    AssistResult(AssistStatus.NO_RESULT, action=kind, attempts=attempts)
                )

            # Apply to whatever the note looks like now
            current = self._store.get(note_id)
            if current is None:
                logger.info("Note %s deleted during AI '%s', discarding", note_id, kind)
                return self._finish(
                    AssistResult(
                        AssistStatus.DISCARDED, action=kind, text=text, attempts=attempts
                    )
                )

            new_content = apply_result(current.content, kind, text)
            self._store.update_content(note_id, new_content)
            logger.info(
                "AI '%s' applied to note %s (attempts=%d, length=%d)",
                kind,
                note_id,
                attempts,
                len(text),
            )
            return self._finish(
                AssistResult(AssistStatus.APPLIED, action=kind, text=text, attempts=attempts)
            )

        except TransportError as e:
            logger.error(
                "AI '%s' failed for note %s after %d attempts: %s",
                kind,
                note_id,
                self._max_attempts,
                e,
            )
            return self._finish(
                AssistResult(
                    AssistStatus.FAILED,
                    action=kind,
                    error=str(e),
                    attempts=self._max_attempts,
                )
            )
        except Exception as e:
            logger.exception("AI '%s' crashed for note %s", kind, note_id)
            return self._finish(
                AssistResult(
                    AssistStatus.FAILED, action=kind, error=str(e), attempts=attempts
                )
            )
        finally:
            self._state = PipelineState.IDLE

    async def _generate(self, prompt: str, system_instruction: str) -> tuple[str | None, int]:
        """
        Call the transport with retries.

        Returns:
            (text, attempts used).

        Raises:
            TransportError: If the last attempt fails too.
        """
        for attempt in range(self._max_attempts):
            try:
                text = await self._generator.generate_text(prompt, system_instruction)
                return text, attempt + 1
            except TransportError as e:
                if attempt == self._max_attempts - 1:
                    raise
                delay = self._backoff_base**attempt
                logger.warning(
                    "AI attempt %d/%d failed (%s), retrying in %.0fs",
                    attempt + 1,
                    self._max_attempts,
                    e,
                    delay,
                )
                await self._sleep(delay)
        raise TransportError("no attempts configured")

    def _finish(self, result: AssistResult, record: bool = True) -> AssistResult:
        if record:
            self._last_result = result
        return result
