"""Diagnostic screenshots for the journeys.

A failed capture never fails a test: the error is logged and ``None`` is
returned.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from playwright.async_api import Page

logger = logging.getLogger(__name__)


async def save_screenshot(page: Page, directory: Path, name: str, full_page: bool = True) -> Optional[Path]:
    """Write ``<directory>/<name>.png``; returns the path or None on failure."""
    filename = name if name.endswith(".png") else f"{name}.png"
    filepath = Path(directory) / filename
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=str(filepath), full_page=full_page)
    except Exception as exc:
        logger.warning(f"Failed to take screenshot {filepath}: {exc}")
        return None
    logger.info(f"Screenshot saved: {filepath}")
    return filepath


class ScreenshotHelper:
    """Numbered captures for one journey (``<prefix>-<NN>-<name>.png``)."""

    def __init__(self, page: Page, directory: Path, journey_prefix: str):
        self.page = page
        self.directory = Path(directory)
        self.journey_prefix = journey_prefix
        self._step = 0

    async def capture(self, name: str, description: str = "") -> Optional[Path]:
        self._step += 1
        filename = f"{self.journey_prefix}-{self._step:02d}-{name}.png"
        path = await save_screenshot(self.page, self.directory, filename)
        if path is not None:
            print(f"📸 {filename}: {description}" if description else f"📸 {filename}")
        return path
