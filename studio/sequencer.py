"""Debate playback: replay a finished transcript as a timed, live-looking chat."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from config.config_loader import PlaybackConfig
from studio.models import DebateMessage
from studio.state import SessionState

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class CancellationToken:
    """Set once a playback chain is superseded; checked after every suspension."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def reveal_delay(message: DebateMessage, playback: PlaybackConfig) -> float:
    """Time a speaker 'talks' before their message appears."""
    return playback.base_delay_sec + playback.per_char_sec * len(message.content)


class PlaybackSequencer:
    """Reveals transcript messages one at a time into ``state.revealed``.

    Owns the playback fields of SessionState (revealed, active_role,
    finished, typed_chars). At most one reveal chain and one typing timer
    exist at any moment; ``start`` cancels both before resetting.
    """

    def __init__(
        self,
        state: SessionState,
        playback: PlaybackConfig,
        sleep: SleepFn = asyncio.sleep,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._state = state
        self._playback = playback
        self._sleep = sleep
        self._on_change = on_change
        self._token = CancellationToken()
        self._task: asyncio.Task | None = None
        self._typing_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, transcript: Sequence[DebateMessage]) -> asyncio.Task:
        """Reset playback state and schedule a new reveal chain.

        Must be called from inside a running event loop.
        """
        self.cancel()
        self._state.reset_playback()
        self._notify()
        token = CancellationToken()
        self._token = token
        self._task = asyncio.create_task(self._run(tuple(transcript), token))
        return self._task

    async def play(self, transcript: Sequence[DebateMessage]) -> None:
        """Start playback and wait until the last message is fully typed."""
        await self.start(transcript)
        typing = self._typing_task
        if typing is not None:
            # a reset may cancel the timer while we wait
            await asyncio.wait({typing})

    def cancel(self) -> None:
        """Stop any outstanding chain and typing timer. State is left as-is."""
        self._token.cancel()
        for task in (self._task, self._typing_task):
            if task is not None and not task.done():
                task.cancel()
        self._task = None
        self._typing_task = None

    async def _run(self, transcript: tuple[DebateMessage, ...], token: CancellationToken) -> None:
        logger.debug("Playback started: %d messages", len(transcript))
        last = len(transcript) - 1
        for i, message in enumerate(transcript):
            self._state.active_role = message.role
            self._notify()

            await self._sleep(reveal_delay(message, self._playback))
            if token.cancelled:
                return
            self._reveal(message, token)

            if i < last:
                await self._sleep(self._playback.pause_sec)
                if token.cancelled:
                    return

        self._state.active_role = None
        self._state.finished = True
        self._notify()
        logger.debug("Playback finished")

    def _reveal(self, message: DebateMessage, token: CancellationToken) -> None:
        self._stop_typing()
        self._state.revealed.append(message)
        if self._playback.typing_interval_sec > 0 and message.content:
            self._state.typed_chars = 0
            self._typing_task = asyncio.create_task(self._type(message, token))
        else:
            self._state.typed_chars = None
        self._notify()

    def _stop_typing(self) -> None:
        if self._typing_task is not None and not self._typing_task.done():
            self._typing_task.cancel()
        self._typing_task = None

    async def _type(self, message: DebateMessage, token: CancellationToken) -> None:
        for shown in range(1, len(message.content) + 1):
            await self._sleep(self._playback.typing_interval_sec)
            # preempted by a newer message or a reset
            if token.cancelled or not self._state.revealed or self._state.revealed[-1] is not message:
                return
            self._state.typed_chars = shown
            self._notify()
        self._state.typed_chars = None
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
