"""Generation orchestrator: the request lifecycle behind the generate view.

States::

    IDLE -> REQUESTING -> EXTRACTING -> SUCCEEDED -> IDLE
                 \\             \\
                  +-------------+--> FAILED ----> IDLE

Entering with pre-supplied code skips generation entirely; entering without a
prompt is a redirect. While REQUESTING the progress simulator ticks and the
proxy is called exactly once. Settled states always return to IDLE after the
progress simulator's completion hold, so the view can submit again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from types import TracebackType

from client.api import GenerationApiClient, GenerationRequest
from client.exceptions import GenerationInProgressError, GenerationRequestError
from client.extraction import extract_code
from client.notifications import Notifier
from client.progress import ProgressSimulator
from client.surface import LiveCode


logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Failed to generate code"


class GenerationState(StrEnum):
    IDLE = "idle"
    REQUESTING = "requesting"
    EXTRACTING = "extracting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class EntryOutcome(StrEnum):
    GENERATED = "generated"
    SKIPPED = "skipped"
    REDIRECTED = "redirected"


@dataclass(frozen=True, slots=True)
class GenerationEntry:
    """What the generate view is entered with."""

    prompt: str | None = None
    framework: str | None = None
    skip_generate: bool = False
    initial_code: str = ""


StateListener = Callable[[GenerationState, GenerationState], None]


class GenerationOrchestrator:
    """Sequence proxy call, progress simulation and extraction for one view.

    Holds at most one in-flight request. ``close()`` tears the session down:
    the ticker is cancelled and so is the pending HTTP call, whose result is
    then discarded.
    """

    def __init__(
        self,
        api: GenerationApiClient,
        notifier: Notifier,
        *,
        progress: ProgressSimulator | None = None,
        code: LiveCode | None = None,
    ) -> None:
        self.api = api
        self.notifier = notifier
        self.progress = progress or ProgressSimulator()
        # An empty LiveCode is falsy, so compare against None
        self.code = code if code is not None else LiveCode()
        self._state = GenerationState.IDLE
        self._listeners: list[StateListener] = []
        self._inflight: asyncio.Task[str] | None = None
        self._closed = False
        self.last_error: GenerationRequestError | None = None

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state is not GenerationState.IDLE

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Observe transitions as ``listener(previous, current)``."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def enter(self, entry: GenerationEntry) -> EntryOutcome:
        if entry.skip_generate:
            self.code.set(entry.initial_code)
            return EntryOutcome.SKIPPED
        if not entry.prompt or not entry.prompt.strip():
            logger.info("No prompt supplied; redirecting away from generation")
            return EntryOutcome.REDIRECTED
        await self.submit(entry.prompt, entry.framework)
        return EntryOutcome.GENERATED

    async def submit(self, prompt: str, framework: str | None = None) -> bool:
        """Run one generation. Returns True when new code was produced.

        A blank prompt is ignored: no request and no state change.
        """
        if not prompt or not prompt.strip():
            return False
        if self._closed:
            raise RuntimeError("orchestrator is closed")
        if self._state is not GenerationState.IDLE:
            raise GenerationInProgressError(
                f"cannot submit while {self._state.value}"
            )

        request = GenerationRequest(prompt=prompt, framework=framework)
        self._transition(GenerationState.REQUESTING)
        self.progress.start()
        try:
            try:
                raw = await self._call_proxy(request)
            except GenerationRequestError as exc:
                self._fail(exc)
            except asyncio.CancelledError:
                self.progress.abandon()
                current = asyncio.current_task()
                if self._closed and not (current and current.cancelling()):
                    logger.info("Generation discarded after close")
                    return False
                raise
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected failure while generating")
                self._fail(GenerationRequestError(str(exc) or "Generation failed"))
            else:
                self._transition(GenerationState.EXTRACTING)
                extracted = extract_code(raw)
                self.code.set(extracted)
                self.last_error = None
                self._transition(GenerationState.SUCCEEDED)

            succeeded = self._state is GenerationState.SUCCEEDED
            await self.progress.settle()
            return succeeded
        finally:
            # The ticker never outlives a submission
            if self.progress.running or self.progress.percent:
                self.progress.abandon()
            self._transition(GenerationState.IDLE)

    async def close(self) -> None:
        """Release the ticker and abandon any in-flight request."""
        self._closed = True
        self.progress.stop()
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

    async def __aenter__(self) -> GenerationOrchestrator:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _call_proxy(self, request: GenerationRequest) -> str:
        self._inflight = asyncio.create_task(self.api.generate(request))
        try:
            return await self._inflight
        finally:
            self._inflight = None

    def _fail(self, error: GenerationRequestError) -> None:
        # The live code value is left as it was
        self.last_error = error
        self._transition(GenerationState.FAILED)
        self.notifier.error(GENERATION_FAILED_MESSAGE)

    def _transition(self, new_state: GenerationState) -> None:
        previous, self._state = self._state, new_state
        if previous is new_state:
            return
        logger.debug("Generation state %s -> %s", previous.value, new_state.value)
        for listener in list(self._listeners):
            try:
                listener(previous, new_state)
            except Exception:  # noqa: BLE001
                logger.exception("State listener failed")
