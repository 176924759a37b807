"""Playback session: one batch of scheduled oscillator voices.

A session owns the output bus for a single play() invocation. The bus is
closed when the last voice's stop time has passed or when the session is
cancelled, whichever comes first.
"""

import asyncio
import logging
from typing import Optional

from server.exceptions import RenderError
from server.interfaces.audio_output import IAudioOutput

logger = logging.getLogger(__name__)


class PlaybackSession:
    """Handle for a batch of independently scheduled voices."""

    def __init__(self, session_id: str, output: IAudioOutput, end_time: float):
        """Initialize playback session.

        Args:
            session_id: Identifier used in log records
            output: Opened output bus owned by this session
            end_time: Event-loop time at which the last voice stops
        """
        self.session_id = session_id
        self.output = output
        self.end_time = end_time

        self._voices: list[asyncio.Task] = []
        self._failures: list[tuple[int, BaseException]] = []
        self._supervisor: Optional[asyncio.Task] = None
        self._cancelled = False
        self._closed = False

    def add_voice(self, task: asyncio.Task) -> None:
        """Register a scheduled voice task."""
        self._voices.append(task)

    def record_failure(self, note_index: int, error: BaseException) -> None:
        """Record a voice that failed to render or start."""
        self._failures.append((note_index, error))

    def start(self) -> None:
        """Start supervising the registered voices.

        Must be called from a running event loop after every voice has
        been added.
        """
        if self._supervisor is None:
            self._supervisor = asyncio.create_task(self._supervise())

    async def _supervise(self) -> None:
        """Wait for all voices, then for the last stop time, then tear down."""
        loop = asyncio.get_running_loop()
        try:
            await asyncio.gather(*self._voices, return_exceptions=True)

            remaining = self.end_time - loop.time()
            if remaining > 0:
                await asyncio.sleep(remaining)

            logger.info(
                f"Playback finished: {len(self._voices)} voices, "
                f"{len(self._failures)} failed",
                extra={"session_id": self.session_id},
            )
        finally:
            self._close_output()

    def cancel(self) -> None:
        """Stop every pending voice and release the output bus.

        Safe to call at any time; a no-op once the session is done.
        """
        if self._closed:
            return

        self._cancelled = True
        pending = 0
        for task in self._voices:
            if not task.done():
                task.cancel()
                pending += 1

        if self._supervisor is not None:
            self._supervisor.cancel()

        self._close_output()
        logger.info(
            f"Playback cancelled ({pending} pending voices stopped)",
            extra={"session_id": self.session_id},
        )

    async def wait(self, raise_on_failure: bool = True) -> None:
        """Wait until the session has finished or been cancelled.

        Args:
            raise_on_failure: Raise if any voice failed

        Raises:
            RenderError: Aggregate of every failed voice
        """
        if self._supervisor is not None:
            await asyncio.wait({self._supervisor})

        if raise_on_failure and self._failures:
            indices = ", ".join(str(index) for index, _ in self._failures)
            raise RenderError(
                f"{len(self._failures)} of {len(self._voices)} voices failed "
                f"(notes: {indices})",
                failures=list(self._failures),
            )

    def _close_output(self) -> None:
        if self._closed:
            return
        self._closed = True

        try:
            self.output.close()
        except Exception as e:
            logger.error(
                f"Error closing audio output: {e}",
                extra={"session_id": self.session_id},
            )

    @property
    def done(self) -> bool:
        return self._closed

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def voice_count(self) -> int:
        return len(self._voices)

    @property
    def failures(self) -> list[tuple[int, BaseException]]:
        return list(self._failures)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"PlaybackSession(id={self.session_id}, voices={len(self._voices)}, "
            f"failures={len(self._failures)}, done={self.done})"
        )
