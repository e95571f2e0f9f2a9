"""Client side of UIGen: orchestration, extraction and the code surface."""

from .api import GenerationApiClient, GenerationRequest
from .exceptions import (
    ClientActionError,
    CodeSurfaceLockedError,
    GenerationInProgressError,
    GenerationRequestError,
)
from .extraction import extract_code
from .notifications import LoggingNotifier, Notifier
from .orchestrator import (
    EntryOutcome,
    GenerationEntry,
    GenerationOrchestrator,
    GenerationState,
)
from .progress import ProgressSimulator, ProgressState
from .surface import CodeSurface, LiveCode, PreviewFrame


__all__ = [
    "ClientActionError",
    "CodeSurface",
    "CodeSurfaceLockedError",
    "EntryOutcome",
    "GenerationApiClient",
    "GenerationEntry",
    "GenerationInProgressError",
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationRequestError",
    "GenerationState",
    "LiveCode",
    "LoggingNotifier",
    "Notifier",
    "PreviewFrame",
    "ProgressSimulator",
    "ProgressState",
    "extract_code",
]
