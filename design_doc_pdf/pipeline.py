"""
Loader -> Renderer -> Exporter, one document per call.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import asyncio
from pathlib import Path
from typing import Optional, Union

from tqdm import tqdm

from .config import RenderConfiguration
from .exporter import Exporter, OutputArtifact
from .loader import load_document
from .log import ConsoleLogger
from .renderer import Renderer


async def convert_async(input_path: Union[str, Path], config: RenderConfiguration,
                        logger: Optional[ConsoleLogger] = None) -> OutputArtifact:
    """Convert one markdown file to PDF.

    The input is read before Chromium is launched, so a missing file fails
    with NotFoundError without starting the browser.
    """
    logger = logger or ConsoleLogger()
    filename = Path(input_path).name

    with tqdm(total=3, desc=f"  {filename}", unit="step", leave=False) as pbar:
        pbar.set_description(f"  {filename} - Reading")
        document = load_document(input_path)
        pbar.update(1)

        pbar.set_description(f"  {filename} - HTML")
        page = Renderer(config, logger).render(document)
        pbar.update(1)

        pbar.set_description(f"  {filename} - PDF")
        async with Exporter(config, logger) as exporter:
            artifact = await exporter.export(page)
        pbar.update(1)

    logger.debug(f"Wrote {artifact.size} bytes to {artifact.path}")
    return artifact


def convert(input_path: Union[str, Path], config: RenderConfiguration,
            logger: Optional[ConsoleLogger] = None) -> OutputArtifact:
    """Synchronous wrapper around convert_async."""
    return asyncio.run(convert_async(input_path, config, logger))
