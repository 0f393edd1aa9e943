"""
Loads the markdown source document from disk.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import NotFoundError

FENCE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")


def _outside_fences(lines):
    """Blank out fenced code so comments in it are not read as headings."""
    visible = []
    fence = None
    for line in lines:
        match = FENCE.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                visible.append("")
                continue
            visible.append(line)
        else:
            if match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence) \
                    and not line.strip().strip(fence[0]):
                fence = None
            visible.append("")
    return visible


@dataclass(frozen=True)
class SourceDocument:
    path: Path
    content: str

    @property
    def title(self) -> str:
        """Extract the document title from markdown content.

        Preference order:
        1) First ATX H1 heading starting with '# '
        2) Setext H1 style (line followed by '===')
        3) Humanized filename stem
        """
        lines = _outside_fences(self.content.splitlines())

        for line in lines:
            stripped = line.strip()
            if stripped.startswith('# '):
                heading_text = stripped[2:].strip().rstrip('#').strip()
                if heading_text:
                    return heading_text

        for current, underline in zip(lines, lines[1:]):
            if current.strip() and re.fullmatch(r"=+", underline.strip()):
                return current.strip()

        stem = self.path.stem.replace('_', ' ').replace('-', ' ').strip()
        return stem.title() if stem else self.path.stem


def load_document(path: Union[str, Path]) -> SourceDocument:
    """Read a UTF-8 markdown file. Raises NotFoundError if it can't be read."""
    md_file = Path(path)
    if not md_file.is_file():
        raise NotFoundError(f"Input file not found: {md_file}")

    try:
        with open(md_file, 'r', encoding='utf-8') as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise NotFoundError(f"Input file is not valid UTF-8: {md_file}") from e
    except OSError as e:
        raise NotFoundError(f"Input file is not readable: {md_file} ({e})") from e

    return SourceDocument(path=md_file, content=content)
