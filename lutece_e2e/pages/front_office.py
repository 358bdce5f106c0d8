"""Front-office form view (``Portal.jsp?page=forms``).

Question labels are defined by the form author and the portal renders them
with different markup per question type, so text and number inputs are found
through an ordered list of strategies rather than a single selector:

1. accessible role + name
2. accessible label
3. placeholder / aria-label attribute (text inputs only)
4. first visible input of the type
5. first visible textarea (text inputs only)
"""
from __future__ import annotations

import logging
from typing import Sequence, Tuple

import anyio

from lutece_e2e.pages.base import BasePage, LocatorStrategy, css_string, resolve_first

logger = logging.getLogger(__name__)

FORM_VIEW_PATH = "/jsp/site/Portal.jsp?page=forms&view=formView&id_form={form_id}"
FORM_FIELDS = "input[type='text'], input[type='number'], textarea"
DATE_PICKER_INPUT = "input.flatpickr-input"

NEXT_STEP_BUTTON = "Etape suivante"
VIEW_SUMMARY_BUTTON = "Voir le récapitulatif"
VALIDATE_SUMMARY_BUTTON = "Valider le récapitulatif"


def _by_attribute(page, label: str):
    quoted = css_string(label)
    return page.locator(
        f"input[type='text'][placeholder*={quoted}], input[type='text'][aria-label*={quoted}]"
    )


TEXT_FIELD_STRATEGIES: Sequence[Tuple[str, LocatorStrategy]] = (
    ("role", lambda page, label: page.get_by_role("textbox", name=label)),
    ("label", lambda page, label: page.get_by_label(label)),
    ("attribute", _by_attribute),
    ("first-visible", lambda page, label: page.locator("input[type='text']:visible")),
    ("textarea", lambda page, label: page.locator("textarea:visible")),
)

NUMBER_FIELD_STRATEGIES: Sequence[Tuple[str, LocatorStrategy]] = (
    ("role", lambda page, label: page.get_by_role("spinbutton", name=label)),
    ("label", lambda page, label: page.get_by_label(label)),
    ("first-visible", lambda page, label: page.locator("input[type='number']:visible")),
)


class FormsFrontOfficePage(BasePage):

    async def navigate(self, form_id: str) -> "FormsFrontOfficePage":
        await self.open(FORM_VIEW_PATH.format(form_id=form_id))
        return self

    async def open_form_link(self, title: str) -> "FormsFrontOfficePage":
        """Follow the link to ``title`` when the portal lists forms instead of showing one."""
        link = self.page.get_by_role("link", name=title)
        if await link.count() > 0:
            await link.first.click()
            await self.page.wait_for_load_state()
        return self

    async def has_form_fields(self) -> bool:
        return await self.page.locator(FORM_FIELDS).count() > 0

    async def wait_for_form_fields(self, timeout: float = 5.0, interval: float = 0.5) -> bool:
        """Poll until the form renders an input; False once ``timeout`` elapses."""
        deadline = anyio.current_time() + timeout
        while anyio.current_time() <= deadline:
            if await self.has_form_fields():
                return True
            await anyio.sleep(interval)
        return False

    async def fill_text_field(self, label: str, value: str) -> "FormsFrontOfficePage":
        await self.page.wait_for_load_state()
        field = await resolve_first(self.page, label, TEXT_FIELD_STRATEGIES, "fill_text_field")
        await field.click()
        await field.fill(value)
        return self

    async def fill_number_field(self, label: str, value: str) -> "FormsFrontOfficePage":
        await self.page.wait_for_load_state()
        field = await resolve_first(self.page, label, NUMBER_FIELD_STRATEGIES, "fill_number_field")
        await field.click()
        await field.fill(value)
        return self

    async def fill_date_field(self, value: str) -> "FormsFrontOfficePage":
        pickers = self.page.locator(DATE_PICKER_INPUT)
        if await pickers.count() > 0:
            await self.set_picker_date(pickers.first, value)
        else:
            logger.info("No date picker on the page, date left empty")
        return self

    async def click_next_step(self) -> "FormsFrontOfficePage":
        await self.page.get_by_role("button", name=NEXT_STEP_BUTTON).click()
        await self.page.wait_for_load_state()
        return self

    async def click_view_summary(self) -> "FormsFrontOfficePage":
        await self.page.get_by_role("button", name=VIEW_SUMMARY_BUTTON).click()
        await self.page.wait_for_load_state()
        return self

    async def click_validate_summary(self) -> "FormsFrontOfficePage":
        await self.page.get_by_role("button", name=VALIDATE_SUMMARY_BUTTON).click()
        await self.page.wait_for_load_state("networkidle")
        return self

    async def is_submitted(self) -> bool:
        if "forms" in self.page.url:
            return True
        return "formulaire" in await self.page.content()
