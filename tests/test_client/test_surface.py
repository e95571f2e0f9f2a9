"""Tests for the editable/previewable code surface and its actions."""

from __future__ import annotations

import html
from pathlib import Path

import pytest

from client.exceptions import CodeSurfaceLockedError
from client.surface import (
    DOWNLOAD_FILENAME,
    PREVIEW_SANDBOX,
    CodeSurface,
    LiveCode,
    WebBrowserOpener,
)


class FakeClipboard:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.text: str | None = None

    def write_text(self, text: str) -> None:
        if self.fail:
            raise PermissionError("clipboard denied")
        self.text = text


class FakeBrowser:
    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.documents: list[str] = []

    def open_document(self, document: str) -> bool:
        if self.error is not None:
            raise self.error
        self.documents.append(document)
        return self.result


@pytest.fixture
def surface(notifier) -> CodeSurface:
    return CodeSurface(
        LiveCode("<div>Card</div>"),
        notifier,
        clipboard=FakeClipboard(),
        browser=FakeBrowser(),
    )


class TestEditingAndPreview:
    def test_edits_flow_into_preview(self, surface) -> None:
        surface.edit("<h1>Edited</h1>")

        assert surface.text == "<h1>Edited</h1>"
        assert surface.preview().document == "<h1>Edited</h1>"

    def test_editor_and_preview_share_one_value(self, notifier) -> None:
        code = LiveCode()
        surface = CodeSurface(code, notifier)

        code.set("<p>from orchestrator</p>")

        assert surface.text == surface.preview().document == "<p>from orchestrator</p>"

    def test_locked_surface_rejects_edits(self, notifier) -> None:
        code = LiveCode("<p>x</p>")
        surface = CodeSurface(code, notifier, locked=lambda: True)

        with pytest.raises(CodeSurfaceLockedError):
            surface.edit("<p>y</p>")
        assert code.value == "<p>x</p>"

    def test_preview_is_sandboxed_to_scripts(self, surface) -> None:
        surface.edit('<script>alert("hi")</script>')

        rendered = surface.render_preview()

        assert f'sandbox="{PREVIEW_SANDBOX}"' in rendered
        assert PREVIEW_SANDBOX == "allow-scripts"
        assert "<script>" not in rendered
        assert html.escape('<script>alert("hi")</script>', quote=True) in rendered

    def test_edits_do_not_remount_preview(self, surface) -> None:
        key = surface.preview_key

        surface.edit("<p>1</p>")
        surface.edit("<p>2</p>")

        assert surface.preview_key == key

    def test_refresh_bumps_key(self, surface) -> None:
        first = surface.preview()

        refreshed = surface.refresh_preview()

        assert refreshed.key == first.key + 1
        assert refreshed.document == first.document
        assert f'data-key="{refreshed.key}"' in refreshed.render()


class TestCopy:
    def test_copies_live_value(self, surface, notifier) -> None:
        assert surface.copy_to_clipboard() is True
        assert surface.clipboard.text == "<div>Card</div>"
        assert notifier.successes == ["Code copied to clipboard"]

    def test_empty_code(self, notifier) -> None:
        surface = CodeSurface(LiveCode(), notifier, clipboard=FakeClipboard())

        assert surface.copy_to_clipboard() is False
        assert notifier.errors == ["No code to copy"]

    def test_clipboard_failure(self, notifier) -> None:
        surface = CodeSurface(
            LiveCode("<p>x</p>"), notifier, clipboard=FakeClipboard(fail=True)
        )

        assert surface.copy_to_clipboard() is False
        assert notifier.errors == ["Failed to copy code"]

    def test_no_clipboard_available(self, notifier) -> None:
        surface = CodeSurface(LiveCode("<p>x</p>"), notifier)

        assert surface.copy_to_clipboard() is False
        assert notifier.errors == ["Failed to copy code"]


class TestDownload:
    def test_writes_fixed_filename(self, surface, notifier, tmp_path: Path) -> None:
        target = surface.download(tmp_path)

        assert target == tmp_path / DOWNLOAD_FILENAME
        assert target.name == "Generated-Component.html"
        assert target.read_text(encoding="utf-8") == "<div>Card</div>"
        assert notifier.successes == ["Downloaded"]

    def test_empty_code(self, notifier, tmp_path: Path) -> None:
        surface = CodeSurface(LiveCode(), notifier)

        assert surface.download(tmp_path) is None
        assert notifier.errors == ["No code to download"]
        assert not (tmp_path / DOWNLOAD_FILENAME).exists()

    def test_unwritable_directory(self, surface, notifier, tmp_path: Path) -> None:
        assert surface.download(tmp_path / "missing") is None
        assert notifier.errors == ["Download failed"]


class TestOpenInNewTab:
    def test_opens_live_value(self, surface, notifier) -> None:
        assert surface.open_in_new_tab() is True
        assert surface.browser.documents == ["<div>Card</div>"]
        assert notifier.notices == []

    def test_empty_code(self, notifier) -> None:
        surface = CodeSurface(LiveCode(), notifier, browser=FakeBrowser())

        assert surface.open_in_new_tab() is False
        assert notifier.errors == ["Nothing to preview"]

    def test_refused(self, notifier) -> None:
        surface = CodeSurface(
            LiveCode("<p>x</p>"), notifier, browser=FakeBrowser(result=False)
        )

        assert surface.open_in_new_tab() is False
        assert notifier.errors == ["Unable to open new tab"]

    def test_browser_error(self, notifier) -> None:
        surface = CodeSurface(
            LiveCode("<p>x</p>"),
            notifier,
            browser=FakeBrowser(error=OSError("no display")),
        )

        assert surface.open_in_new_tab() is False
        assert notifier.errors == ["Failed to open preview"]


def test_web_browser_opener_writes_temp_file(monkeypatch, tmp_path: Path) -> None:
    opened: list[str] = []
    monkeypatch.setattr(
        "client.surface.webbrowser.open_new_tab",
        lambda url: opened.append(url) or True,
    )

    assert WebBrowserOpener(directory=tmp_path).open_document("<p>tab</p>") is True

    written = list(tmp_path.glob("uigen-preview-*.html"))
    assert len(written) == 1
    assert written[0].read_text(encoding="utf-8") == "<p>tab</p>"
    assert opened == [written[0].resolve().as_uri()]


def test_web_browser_opener_cleanup_removes_files(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("client.surface.webbrowser.open_new_tab", lambda url: True)
    opener = WebBrowserOpener(directory=tmp_path)
    opener.open_document("<p>one</p>")
    opener.open_document("<p>two</p>")

    opener.cleanup()

    assert list(tmp_path.glob("uigen-preview-*.html")) == []
    assert opener.created == []


def test_surface_close_removes_its_preview_files(
    monkeypatch, notifier, tmp_path: Path
) -> None:
    monkeypatch.setattr("client.surface.webbrowser.open_new_tab", lambda url: True)
    monkeypatch.setattr("client.surface.tempfile.tempdir", str(tmp_path))
    surface = CodeSurface(LiveCode("<p>x</p>"), notifier)

    assert surface.open_in_new_tab() is True
    assert len(list(tmp_path.glob("uigen-preview-*.html"))) == 1

    surface.close()

    assert list(tmp_path.glob("uigen-preview-*.html")) == []


def test_surface_close_leaves_injected_browser_alone(surface) -> None:
    surface.open_in_new_tab()

    surface.close()

    assert surface.browser.documents == ["<div>Card</div>"]
