"""
Render configuration for a single conversion.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from .templates import DEFAULT_DIAGRAM_SCRIPT, DEFAULT_STYLESHEET

# Paper sizes understood by Chromium's page.pdf(format=...)
PAGE_FORMATS = (
    "Letter", "Legal", "Tabloid", "Ledger",
    "A0", "A1", "A2", "A3", "A4", "A5", "A6",
)

DEFAULT_INPUT_PATH = Path("res") / "design_document.md"
DEFAULT_MARGIN = "20mm"
DEFAULT_DIAGRAM_TIMEOUT = 30.0
DEFAULT_LAUNCH_ARGS = (
    '--no-sandbox',              # Required in some environments
    '--disable-dev-shm-usage',   # Use /tmp instead of /dev/shm (prevents OOM crashes)
    '--disable-gpu',             # No GPU in headless mode
)

_MARGIN_PATTERN = re.compile(r'^(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)\s*(cm|in|mm|pt|px)?$')
_MARGIN_SIDES = ('top', 'right', 'bottom', 'left')


def validate_margin(margin_str: str) -> str:
    """Validate and normalize a single margin value."""
    match = _MARGIN_PATTERN.match(margin_str.strip())
    if not match:
        raise ValueError(f"Invalid margin format: '{margin_str}'. Use format like '1in', '2.5cm', '10mm', etc.")

    value_str, unit = match.groups()
    value = float(value_str)

    # Set default unit to 'in' if not specified
    if not unit:
        unit = 'in'

    # Convert to inches for validation
    if unit == 'cm':
        value_inches = value / 2.54
    elif unit == 'mm':
        value_inches = value / 25.4
    elif unit == 'pt':
        value_inches = value / 72
    elif unit == 'px':
        value_inches = value / 96  # Assuming 96 DPI
    else:  # 'in'
        value_inches = value

    # Validate range: minimum 0 inches, maximum 3 inches
    if value_inches < 0:
        raise ValueError(f"Margin cannot be negative: '{margin_str}'. Minimum value is 0.")
    elif value_inches > 3:
        raise ValueError(f"Margin too large: '{margin_str}'. Maximum value is 3 inches (7.62cm).")

    return f"{value:g}{unit}"


def parse_margins(margin: str) -> Dict[str, str]:
    """Parse a CSS-style margin shorthand (1, 2 or 4 values) into per-side values."""
    margin_parts = margin.split()

    if len(margin_parts) == 1:
        value = validate_margin(margin_parts[0])
        return dict.fromkeys(_MARGIN_SIDES, value)
    elif len(margin_parts) == 2:
        # Vertical and horizontal
        vertical = validate_margin(margin_parts[0])
        horizontal = validate_margin(margin_parts[1])
        return {'top': vertical, 'right': horizontal, 'bottom': vertical, 'left': horizontal}
    elif len(margin_parts) == 4:
        return dict(zip(_MARGIN_SIDES, (validate_margin(part) for part in margin_parts)))
    else:
        raise ValueError(f"Invalid margin format: '{margin}'. Use 1, 2, or 4 values.")


def normalize_page_format(page_format: str) -> str:
    """Return the canonical spelling of a paper size, e.g. 'a4' -> 'A4'."""
    for known in PAGE_FORMATS:
        if known.lower() == page_format.strip().lower():
            return known
    available = ", ".join(PAGE_FORMATS)
    raise ValueError(f"Invalid page format '{page_format}'. Available formats: {available}")


def default_output_path(input_path: Path) -> Path:
    """PDF path next to the markdown source."""
    return Path(input_path).with_suffix(".pdf")


@dataclass(frozen=True)
class RenderConfiguration:
    """Everything the renderer and exporter need for one document."""

    output_path: Path
    page_format: str = "A4"
    margin: str = DEFAULT_MARGIN
    print_background: bool = True
    stylesheet: str = DEFAULT_STYLESHEET
    diagram_script: str = DEFAULT_DIAGRAM_SCRIPT
    launch_args: Tuple[str, ...] = DEFAULT_LAUNCH_ARGS
    headless: bool = True
    diagram_timeout: float = DEFAULT_DIAGRAM_TIMEOUT
    page_numbers: bool = True
    html_output: Optional[Path] = None
    margins: Dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # frozen dataclass: normalized values go through object.__setattr__
        object.__setattr__(self, 'output_path', Path(self.output_path))
        object.__setattr__(self, 'page_format', normalize_page_format(self.page_format))
        object.__setattr__(self, 'margins', parse_margins(self.margin))
        object.__setattr__(self, 'launch_args', tuple(self.launch_args))
        if self.html_output is not None:
            object.__setattr__(self, 'html_output', Path(self.html_output))

        if isinstance(self.diagram_timeout, bool) or not isinstance(self.diagram_timeout, (int, float)):
            raise ValueError(f"Invalid diagram timeout '{self.diagram_timeout}'. Use a number of seconds.")
        if not math.isfinite(self.diagram_timeout) or self.diagram_timeout <= 0:
            raise ValueError(f"Diagram timeout must be a positive, finite number of seconds, got {self.diagram_timeout}.")
        if not self.output_path.name:
            raise ValueError("Output path must name a file.")

    @property
    def diagram_timeout_ms(self) -> float:
        return self.diagram_timeout * 1000
