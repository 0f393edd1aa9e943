"""
Markdown design document to PDF converter with Mermaid diagram support.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from .config import RenderConfiguration
from .errors import (
    ConversionError,
    DiagramRenderTimeout,
    ExportError,
    NotFoundError,
    RenderEngineError,
    RenderError,
)
from .exporter import DiagramReport, Exporter, OutputArtifact
from .loader import SourceDocument, load_document
from .pipeline import convert, convert_async
from .renderer import RenderedPage, Renderer

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "DiagramRenderTimeout",
    "DiagramReport",
    "ExportError",
    "Exporter",
    "NotFoundError",
    "OutputArtifact",
    "RenderConfiguration",
    "RenderEngineError",
    "RenderError",
    "RenderedPage",
    "Renderer",
    "SourceDocument",
    "convert",
    "convert_async",
    "load_document",
]
