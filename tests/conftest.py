"""
Shared fixtures: fake Playwright objects so exporter tests run without Chromium.
"""

import asyncio
import time

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

import design_doc_pdf.exporter as exporter_module
from design_doc_pdf.templates import DIAGRAM_ABANDON_EXPRESSION, DIAGRAM_REPORT_EXPRESSION

PDF_BYTES = b"%PDF-1.4\n% fake\n%%EOF\n"


class FakeEngine:
    """Scripted behavior shared by every fake page of one test."""

    def __init__(self):
        self.events = []
        self.signal_delay = 0.0
        self.report = {"expected": 0, "rendered": 0, "failed": 0, "errors": [], "abandoned": False}
        self.pending_on_abandon = 0
        self.evaluate_hangs = False
        self.load_delay = 0.0
        self.pdf_result = PDF_BYTES
        self.pdf_error = None
        self.launch_error = None
        self.launches = 0
        self.contexts = []

    def record(self, name, **details):
        self.events.append((name, time.monotonic(), details))

    def names(self):
        return [name for name, _, _ in self.events]

    def time_of(self, name):
        return next(stamp for event, stamp, _ in self.events if event == name)


class FakePage:
    def __init__(self, engine, context):
        self.engine = engine
        self.context = context

    async def goto(self, url, wait_until=None):
        self.engine.record("goto", url=url, wait_until=wait_until)

    async def wait_for_load_state(self, state=None, timeout=None):
        limit = timeout / 1000 if timeout is not None else None
        if limit is not None and self.engine.load_delay > limit:
            await asyncio.sleep(limit)
            self.engine.record("load_timeout")
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        await asyncio.sleep(self.engine.load_delay)
        self.engine.record("loaded", state=state)

    async def wait_for_function(self, expression, timeout=None):
        self.engine.record("wait")
        limit = timeout / 1000 if timeout is not None else None
        if limit is not None and self.engine.signal_delay > limit:
            await asyncio.sleep(limit)
            self.engine.record("timeout")
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        await asyncio.sleep(self.engine.signal_delay)
        self.engine.record("signal")

    async def evaluate(self, expression):
        if self.engine.evaluate_hangs:
            self.engine.record("evaluate_stuck")
            await asyncio.Event().wait()
        if expression == DIAGRAM_ABANDON_EXPRESSION:
            self.engine.record("abandon")
            return self.engine.pending_on_abandon
        if expression == DIAGRAM_REPORT_EXPRESSION:
            self.engine.record("report")
            return dict(self.engine.report)
        raise AssertionError(f"unexpected expression: {expression}")

    async def pdf(self, **options):
        self.engine.record("pdf", options=options, context=self.context)
        if self.engine.pdf_error is not None:
            raise self.engine.pdf_error
        return self.engine.pdf_result


class FakeContext:
    def __init__(self, engine):
        self.engine = engine
        self.closed = False

    async def new_page(self):
        return FakePage(self.engine, self)

    async def close(self):
        self.closed = True
        self.engine.record("context_closed", context=self)


class FakeBrowser:
    def __init__(self, engine):
        self.engine = engine
        self.connected = True

    def is_connected(self):
        return self.connected

    async def new_context(self):
        context = FakeContext(self.engine)
        self.engine.contexts.append(context)
        return context

    async def close(self):
        self.connected = False
        self.engine.record("browser_closed")


class FakeChromium:
    def __init__(self, engine):
        self.engine = engine

    async def launch(self, headless=True, args=None):
        self.engine.launches += 1
        self.engine.record("launch", args=args)
        if self.engine.launch_error is not None:
            raise self.engine.launch_error
        return FakeBrowser(self.engine)


class FakePlaywright:
    def __init__(self, engine):
        self.chromium = FakeChromium(engine)

    async def stop(self):
        pass


class FakePlaywrightManager:
    def __init__(self, engine):
        self.engine = engine

    async def start(self):
        return FakePlaywright(self.engine)


@pytest.fixture
def fake_engine(monkeypatch):
    """Replace Playwright in the exporter module with a scripted fake."""
    engine = FakeEngine()
    monkeypatch.setattr(exporter_module, "async_playwright", lambda: FakePlaywrightManager(engine))
    return engine


@pytest.fixture
def sample_markdown(tmp_path):
    md_file = tmp_path / "design_document.md"
    md_file.write_text(
        "# Conservatory Design\n\n"
        "Some intro text.\n\n"
        "```mermaid\n"
        "graph TD\n"
        "    A[Aviary] --> B[Bird]\n"
        "```\n",
        encoding="utf-8",
    )
    return md_file
