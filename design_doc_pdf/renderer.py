"""
Markdown to HTML rendering.

Pandoc turns the markdown into an HTML fragment. Mermaid fences come out as
ordinary code blocks (``<pre class="mermaid"><code>``) and are only turned
into diagrams later, inside the browser, by the injected diagram script.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import RenderConfiguration
from .errors import RenderError
from .loader import SourceDocument
from .log import ConsoleLogger
from .templates import DIAGRAM_LANGUAGE, create_html_page

PANDOC_COMMAND = [
    "pandoc",
    "--from", "gfm",
    "--to", "html5",
    "--no-highlight",
]

# A pandoc code block: <pre class="..."><code class="...">
_CODE_BLOCK = re.compile(r'<pre\b([^>]*)>\s*<code\b([^>]*)>', re.IGNORECASE)
_CLASS_ATTR = re.compile(r'\bclass\s*=\s*"([^"]*)"')

PAGE_BREAK_DIV = '<div class="page-break"></div>'


@dataclass
class RenderedPage:
    html: str
    title: str
    diagram_count: int
    source_path: Optional[Path] = None

    @property
    def has_diagrams(self) -> bool:
        return self.diagram_count > 0


def _classes(attrs: str) -> list:
    match = _CLASS_ATTR.search(attrs)
    return match.group(1).split() if match else []


def count_diagram_blocks(body: str) -> int:
    """Number of code blocks in pandoc's HTML tagged with the diagram language.

    Counting on the HTML catches fences nested in lists and blockquotes.
    """
    count = 0
    for pre_attrs, code_attrs in _CODE_BLOCK.findall(body):
        if DIAGRAM_LANGUAGE in _classes(pre_attrs) or f"language-{DIAGRAM_LANGUAGE}" in _classes(code_attrs):
            count += 1
    return count


def process_page_breaks(content: str) -> str:
    """Replace page break markers with a page-break div."""
    # <!-- page-break -->
    content = re.sub(r'<!--\s*page-break\s*-->', PAGE_BREAK_DIV, content, flags=re.IGNORECASE)
    # ```page-break
    # ```
    content = re.sub(r'```page-break\r?\n```', PAGE_BREAK_DIV, content, flags=re.IGNORECASE)
    # <page-break>
    content = re.sub(r'<page-break\s*/?>', PAGE_BREAK_DIV, content, flags=re.IGNORECASE)
    return content


class Renderer:
    """Builds the styled HTML page for one SourceDocument."""

    def __init__(self, config: RenderConfiguration, logger: Optional[ConsoleLogger] = None):
        self.config = config
        self.logger = logger or ConsoleLogger()

    def _markdown_to_html(self, content: str) -> str:
        try:
            result = subprocess.run(
                PANDOC_COMMAND,
                input=content,
                capture_output=True,
                text=True,
                encoding='utf-8',
            )
        except FileNotFoundError as e:
            raise RenderError("pandoc is required but not found. Please install pandoc.") from e

        if result.returncode != 0:
            raise RenderError(f"Pandoc failed: {result.stderr.strip()}")
        return result.stdout

    def render(self, document: SourceDocument) -> RenderedPage:
        content = process_page_breaks(document.content)
        page_breaks = content.count(PAGE_BREAK_DIV)
        if page_breaks:
            self.logger.debug(f"Processed {page_breaks} page break(s)")

        body = self._markdown_to_html(content)
        diagram_count = count_diagram_blocks(body)

        # Without diagrams the page never references the diagram library
        script = self.config.diagram_script if diagram_count else ""
        title = document.title
        base_href = document.path.resolve().parent.as_uri() + "/"
        page_html = create_html_page(body, title, self.config.stylesheet, script, base_href)
        self.logger.debug(f"Rendered '{title}' with {diagram_count} diagram block(s)")

        if self.config.html_output:
            self.config.html_output.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config.html_output, 'w', encoding='utf-8') as f:
                f.write(page_html)
            self.logger.debug(f"Saved HTML to {self.config.html_output}")

        return RenderedPage(
            html=page_html,
            title=title,
            diagram_count=diagram_count,
            source_path=document.path,
        )
