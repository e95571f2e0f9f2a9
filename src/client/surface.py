"""Editable and previewable presentations of the live code value.

The editor and the preview both read the same :class:`LiveCode` object, so
they can never diverge. The preview is a sandboxed iframe document that may
run scripts and nothing else; it is keyed, and bumping the key via
``refresh_preview()`` is the only way to remount it and re-run ``<script>``
content.

Copy, download and open-in-new-tab are independent local actions. Each guards
against an empty value, reports its own notice and never raises into the
caller.
"""

from __future__ import annotations

import html
import logging
import tempfile
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from client.exceptions import ClientActionError, CodeSurfaceLockedError
from client.notifications import Notifier


logger = logging.getLogger(__name__)

DOWNLOAD_FILENAME = "Generated-Component.html"
PREVIEW_SANDBOX = "allow-scripts"

CodeListener = Callable[[str], None]


class LiveCode:
    """The single mutable code string shared by editor and preview."""

    def __init__(self, value: str = "") -> None:
        self._value = value
        self._listeners: list[CodeListener] = []

    @property
    def value(self) -> str:
        return self._value

    def set(self, value: str) -> None:
        if value == self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:  # noqa: BLE001
                logger.exception("Live code listener failed")

    def subscribe(self, listener: CodeListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def __bool__(self) -> bool:
        return bool(self._value)


@dataclass(frozen=True, slots=True)
class PreviewFrame:
    """One mount of the sandboxed preview; a new key means a full reload."""

    key: int
    document: str
    sandbox: str = PREVIEW_SANDBOX

    def render(self) -> str:
        return (
            f'<iframe data-key="{self.key}" sandbox="{self.sandbox}" '
            f'srcdoc="{html.escape(self.document, quote=True)}"></iframe>'
        )


class Clipboard(Protocol):
    def write_text(self, text: str) -> None: ...


class BrowserOpener(Protocol):
    def open_document(self, document: str) -> bool:
        """Show ``document`` in a fresh browsing context; False if refused."""
        ...


class WebBrowserOpener:
    """Write the document to a temporary file and open it in a new tab.

    The browser reads the file after ``open_document`` returns, so files are
    kept until ``cleanup()``.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory
        self.created: list[Path] = []

    def open_document(self, document: str) -> bool:
        with tempfile.NamedTemporaryFile(
            "w",
            suffix=".html",
            prefix="uigen-preview-",
            dir=self.directory,
            delete=False,
            encoding="utf-8",
        ) as handle:
            handle.write(document)
            path = Path(handle.name)
        self.created.append(path)
        logger.debug("Opening preview file %s", path)
        return webbrowser.open_new_tab(path.resolve().as_uri())

    def cleanup(self) -> None:
        """Remove every preview file written so far."""
        while self.created:
            path = self.created.pop()
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove preview file %s", path)


class CodeSurface:
    """Editor + preview + auxiliary actions over one LiveCode."""

    def __init__(
        self,
        code: LiveCode,
        notifier: Notifier,
        *,
        clipboard: Clipboard | None = None,
        browser: BrowserOpener | None = None,
        locked: Callable[[], bool] = lambda: False,
    ) -> None:
        self.code = code
        self.notifier = notifier
        self.clipboard = clipboard
        self._owned_browser = WebBrowserOpener() if browser is None else None
        self.browser: BrowserOpener = browser or self._owned_browser
        self._locked = locked
        self._preview_key = 0

    # Editor -----------------------------------------------------------------
    @property
    def text(self) -> str:
        return self.code.value

    def edit(self, text: str) -> None:
        """Write user edits straight through to the live value."""
        if self._locked():
            raise CodeSurfaceLockedError("Code cannot be edited while generating")
        self.code.set(text)

    # Preview ----------------------------------------------------------------
    @property
    def preview_key(self) -> int:
        return self._preview_key

    def preview(self) -> PreviewFrame:
        return PreviewFrame(key=self._preview_key, document=self.code.value)

    def render_preview(self) -> str:
        return self.preview().render()

    def refresh_preview(self) -> PreviewFrame:
        """Force a full remount of the sandboxed document."""
        self._preview_key += 1
        return self.preview()

    # Actions ----------------------------------------------------------------
    def copy_to_clipboard(self) -> bool:
        code = self.code.value
        if not code:
            self.notifier.error("No code to copy")
            return False
        try:
            if self.clipboard is None:
                raise ClientActionError("No clipboard available")
            self.clipboard.write_text(code)
        except Exception:  # noqa: BLE001
            logger.exception("Copy to clipboard failed")
            self.notifier.error("Failed to copy code")
            return False
        self.notifier.success("Code copied to clipboard")
        return True

    def download(self, directory: Path | str = ".") -> Path | None:
        """Write the live value to ``Generated-Component.html`` in ``directory``."""
        code = self.code.value
        if not code:
            self.notifier.error("No code to download")
            return None
        target = Path(directory) / DOWNLOAD_FILENAME
        try:
            target.write_text(code, encoding="utf-8")
        except OSError:
            logger.exception("Download to %s failed", target)
            self.notifier.error("Download failed")
            return None
        self.notifier.success("Downloaded")
        return target

    def open_in_new_tab(self) -> bool:
        code = self.code.value
        if not code:
            self.notifier.error("Nothing to preview")
            return False
        try:
            opened = self.browser.open_document(code)
        except Exception:  # noqa: BLE001
            logger.exception("Opening preview failed")
            self.notifier.error("Failed to open preview")
            return False
        if not opened:
            self.notifier.error("Unable to open new tab")
            return False
        return True

    def close(self) -> None:
        """Remove preview files written by the default browser opener."""
        if self._owned_browser is not None:
            self._owned_browser.cleanup()
