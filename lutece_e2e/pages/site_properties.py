"""Site properties screen reached from the content menu."""
from __future__ import annotations

from lutece_e2e.pages.base import BasePage

DEFAULT_PROPERTIES_TAB = "Propriétés par défaut du site"


class SitePropertiesPage(BasePage):

    def _default_tab(self):
        return self.page.get_by_role("tab", name=DEFAULT_PROPERTIES_TAB)

    async def is_displayed(self) -> bool:
        await self.page.wait_for_load_state()
        return await self._default_tab().is_visible()

    async def click_default_properties_tab(self) -> "SitePropertiesPage":
        await self._default_tab().click()
        return self

    async def is_default_properties_tab_active(self) -> bool:
        return await self._default_tab().get_attribute("aria-selected") == "true"
