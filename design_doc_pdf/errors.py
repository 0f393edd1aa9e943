"""
Error types raised by the conversion pipeline.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""


class ConversionError(Exception):
    """Base class for every error the pipeline raises.

    ``fatal`` tells callers whether the invocation has to stop. Only
    DiagramRenderTimeout is recoverable.
    """

    fatal = True


class NotFoundError(ConversionError):
    """The input path is missing, not a file, or not readable as UTF-8."""


class RenderError(ConversionError):
    """The markdown could not be converted to HTML (pandoc missing or failed)."""


class RenderEngineError(ConversionError):
    """Chromium failed to launch or crashed while handling the page."""


class DiagramRenderTimeout(ConversionError):
    """The diagram script did not signal completion in time."""

    fatal = False

    def __init__(self, timeout: float, pending: int = 0):
        self.timeout = timeout
        self.pending = pending
        super().__init__(
            f"Diagram rendering did not finish within {timeout:g}s "
            f"({pending} diagram(s) left unrendered)"
        )


class ExportError(ConversionError):
    """Pagination or writing the PDF failed."""
