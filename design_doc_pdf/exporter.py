#!/usr/bin/env python3
"""
HTML to PDF export using Playwright (Python equivalent of Puppeteer).

The exporter loads the rendered page in headless Chromium, waits for the
injected diagram script to signal completion (bounded by a timeout), then
paginates the page and writes the PDF.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import asyncio
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from playwright.async_api import async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .config import RenderConfiguration
from .errors import ConversionError, DiagramRenderTimeout, ExportError, RenderEngineError
from .log import ConsoleLogger
from .renderer import RenderedPage
from .templates import (
    DIAGRAM_ABANDON_EXPRESSION,
    DIAGRAM_DONE_EXPRESSION,
    DIAGRAM_REPORT_EXPRESSION,
    FOOTER_TEMPLATE,
)

# Error message fragments that mean the browser itself went away
ENGINE_CRASH_MARKERS = (
    "Connection closed", "Browser has been closed", "Target closed",
    "Target page, context or browser has been closed", "crashed", "Protocol error",
)


@dataclass
class DiagramReport:
    expected: int = 0
    rendered: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    timed_out: bool = False


@dataclass
class OutputArtifact:
    path: Path
    size: int
    diagrams: DiagramReport = field(default_factory=DiagramReport)


class Exporter:
    """Drives one Chromium instance; every export gets its own browser context."""

    def __init__(self, config: RenderConfiguration, logger: Optional[ConsoleLogger] = None):
        self.config = config
        self.logger = logger or ConsoleLogger()
        self._playwright = None
        self._browser = None
        self._start_lock: Optional[asyncio.Lock] = None

    async def __aenter__(self) -> "Exporter":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        """Launch Chromium unless a connected instance is already running."""
        if self._start_lock is None:
            self._start_lock = asyncio.Lock()
        async with self._start_lock:
            if self._browser is not None and self._browser.is_connected():
                return
            self.logger.debug("Initializing browser instance")
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.headless,
                    args=list(self.config.launch_args),
                )
            except Exception as e:
                await self.close()
                raise RenderEngineError(f"Failed to launch Chromium: {e}") from e

    async def close(self) -> None:
        """Close browser and cleanup resources."""
        # Grab references and null them out first to prevent double-close on crash
        browser = self._browser
        pw = self._playwright
        self._browser = None
        self._playwright = None

        if browser is not None and browser.is_connected():
            try:
                await browser.close()
            except Exception as e:
                self.logger.debug(f"Ignoring error while closing browser: {e}")
        if pw is not None:
            try:
                await pw.stop()
            except Exception as e:
                self.logger.debug(f"Ignoring error while stopping Playwright: {e}")

        self.logger.debug("Browser instance closed and cleaned up")

    @staticmethod
    def _pdf_options(config: RenderConfiguration) -> Dict[str, Any]:
        options = {
            'format': config.page_format,
            'margin': dict(config.margins),
            'print_background': config.print_background,
        }
        if config.page_numbers:
            options.update(
                display_header_footer=True,
                header_template='<div></div>',
                footer_template=FOOTER_TEMPLATE,
            )
        return options

    @staticmethod
    def _classify_failure(error: Exception) -> ConversionError:
        message = str(error)
        if any(marker in message for marker in ENGINE_CRASH_MARKERS):
            return RenderEngineError(f"Chromium crashed during export: {message}")
        return ExportError(f"Failed to convert HTML to PDF: {message}")

    @staticmethod
    async def _evaluate_bounded(browser_page, expression: str, config: RenderConfiguration):
        """Evaluate ``expression`` but give up if the page's main thread is stuck."""
        try:
            return await asyncio.wait_for(browser_page.evaluate(expression), timeout=config.diagram_timeout)
        except asyncio.TimeoutError as e:
            raise RenderEngineError(
                f"Page stopped responding for {config.diagram_timeout:g}s while finishing diagrams"
            ) from e

    async def _await_page_load(self, browser_page, config: RenderConfiguration) -> None:
        """Let images and other subresources finish, without blocking on a stalled fetch."""
        try:
            await browser_page.wait_for_load_state('load', timeout=config.diagram_timeout_ms)
        except PlaywrightTimeoutError:
            self.logger.warning(f"Page resources still loading after {config.diagram_timeout:g}s; exporting anyway")

    async def _await_diagrams(self, browser_page, page: RenderedPage, config: RenderConfiguration) -> DiagramReport:
        """Block until the diagram script signals completion or the timeout elapses.

        On timeout the script is told to abandon, which turns every pending
        placeholder back into code text, so pagination never sees a
        half-rendered diagram.
        """
        if not page.has_diagrams:
            return DiagramReport()

        timed_out = False
        try:
            await browser_page.wait_for_function(DIAGRAM_DONE_EXPRESSION, timeout=config.diagram_timeout_ms)
        except PlaywrightTimeoutError:
            pending = await self._evaluate_bounded(browser_page, DIAGRAM_ABANDON_EXPRESSION, config)
            timeout_error = DiagramRenderTimeout(config.diagram_timeout, pending or 0)
            self.logger.warning(f"{timeout_error}; proceeding with diagrams as text")
            timed_out = True

        data = await self._evaluate_bounded(browser_page, DIAGRAM_REPORT_EXPRESSION, config) or {}
        report = DiagramReport(
            expected=data.get('expected', page.diagram_count),
            rendered=data.get('rendered', 0),
            failed=data.get('failed', 0),
            errors=list(data.get('errors', [])),
            timed_out=timed_out,
        )
        for error in report.errors:
            self.logger.warning(f"Mermaid diagram left as text: {error}")
        self.logger.debug(f"Diagrams rendered: {report.rendered}/{report.expected}")
        return report

    def _write_pdf(self, pdf_bytes: bytes, output_path: Path) -> int:
        """Write the PDF next to its destination, then move it into place."""
        if not pdf_bytes:
            raise ExportError("Chromium produced an empty PDF")

        tmp_name = None
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent)
            with os.fdopen(fd, 'wb') as f:
                f.write(pdf_bytes)
            os.replace(tmp_name, output_path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ExportError(f"Failed to write PDF to {output_path}: {e}") from e

        return output_path.stat().st_size

    async def export(self, page: RenderedPage, config: Optional[RenderConfiguration] = None) -> OutputArtifact:
        """Paginate ``page`` into a PDF at ``config.output_path``."""
        config = config or self.config
        await self.start()

        context = None
        with tempfile.TemporaryDirectory(prefix="design_doc_pdf_") as temp_dir:
            html_file = Path(temp_dir) / "page.html"
            with open(html_file, 'w', encoding='utf-8') as f:
                f.write(page.html)

            try:
                context = await self._browser.new_context()
                browser_page = await context.new_page()
                await browser_page.goto(html_file.absolute().as_uri(), wait_until='domcontentloaded')

                report = await self._await_diagrams(browser_page, page, config)
                await self._await_page_load(browser_page, config)

                self.logger.debug(f"Converting HTML to PDF with margins: {config.margins}")
                pdf_bytes = await browser_page.pdf(**self._pdf_options(config))
            except ConversionError:
                raise
            except Exception as e:
                raise self._classify_failure(e) from e
            finally:
                if context is not None:
                    try:
                        await context.close()
                    except Exception as e:
                        self.logger.debug(f"Ignoring error while closing browser context: {e}")

        size = self._write_pdf(pdf_bytes, config.output_path)
        return OutputArtifact(path=config.output_path, size=size, diagrams=report)
