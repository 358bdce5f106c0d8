"""Common plumbing for the Lutece page objects."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Sequence, Tuple
from urllib.parse import urljoin

from playwright.async_api import Locator, Page

logger = logging.getLogger(__name__)

ADMIN_MENU_PATH = "/jsp/admin/AdminMenu.jsp"
ADMIN_LOGIN_PATH = "/jsp/admin/AdminLogin.jsp"

# Bound to a flatpickr ``<input>``: drive the picker API when it is attached,
# otherwise assign the value and notify listeners.
SET_DATE_SCRIPT = """(el, date) => {
  if (el._flatpickr) {
    el._flatpickr.setDate(date, true);
    return true;
  }
  el.value = date;
  el.dispatchEvent(new Event('change', { bubbles: true }));
  return false;
}"""


@dataclass
class ElementNotFoundError(Exception):
    """Raised when no selector strategy locates the requested element."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


LocatorStrategy = Callable[[Page, str], Locator]


async def resolve_first(
    page: Page,
    label: str,
    strategies: Sequence[Tuple[str, LocatorStrategy]],
    operation: str,
) -> Locator:
    """Return the first match of the first strategy that finds anything.

    ``strategies`` is tried in order; exhausting it raises
    ``ElementNotFoundError`` naming ``label``.
    """
    for strategy_name, strategy in strategies:
        candidates = strategy(page, label)
        if await candidates.count() > 0:
            logger.debug(f"{operation}: '{label}' resolved by {strategy_name}")
            return candidates.first
    raise ElementNotFoundError(
        name=operation,
        payload={"label": label, "strategies": [name for name, _ in strategies]},
        message=f"No field found for label '{label}'",
    )


def css_string(value: str) -> str:
    """Quote ``value`` for use inside a CSS attribute selector."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class BasePage:
    """Adapter over a live Playwright page for one Lutece screen."""

    def __init__(self, page: Page, base_url: str) -> None:
        self.page = page
        self.base_url = base_url.rstrip("/")

    def url(self, path: str) -> str:
        return urljoin(self.base_url + "/", path.lstrip("/"))

    @property
    def current_url(self) -> str:
        return self.page.url

    async def open(self, path: str) -> None:
        await self.page.goto(self.url(path))
        await self.page.wait_for_load_state()

    async def dismiss_admin_message(self) -> None:
        """Confirm the AdminMessage interstitial when the app shows one."""
        if "AdminMessage" not in self.page.url:
            return
        logger.debug(f"Dismissing admin message at {self.page.url}")
        await self.page.get_by_text("OK", exact=True).first.click()
        await self.page.wait_for_load_state()

    async def dismiss_offcanvas_if_present(self) -> None:
        """Close an off-canvas panel that covers the page."""
        await self.page.wait_for_load_state()
        backdrop = self.page.locator(".offcanvas-backdrop")
        if await backdrop.count() > 0:
            await self.page.keyboard.press("Escape")
            await backdrop.first.wait_for(state="hidden")

    async def set_picker_date(self, field: Locator, value: str) -> bool:
        """Set a date-picker input; returns False when the fallback was used."""
        return await field.evaluate(SET_DATE_SCRIPT, value)
