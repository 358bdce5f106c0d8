"""Back-office home (``AdminMenu.jsp``) and its top-level menus."""
from __future__ import annotations

from lutece_e2e.pages.base import ADMIN_MENU_PATH, BasePage

WORKFLOW_MANAGEMENT_PATH = "/jsp/admin/plugins/workflow/ManageWorkflow.jsp"
FORMS_MANAGEMENT_PATH = "/jsp/admin/plugins/forms/ManageForms.jsp"

MENU_CONTAINER = ".lutece-admin-menu, #admin-menu, nav"
LOGOUT_LINK = "a[href*='logout'], .logout-link, #logout"

# Menu buttons carry a leading icon, hence the leading space in their names.
CONTENT_MENU = " Contenu"
MANAGERS_MENU = " Gestionnaires"

SITE_PROPERTIES_LINK = "Gestion des propriétés du site"


class AdminMenuPage(BasePage):

    async def navigate(self) -> "AdminMenuPage":
        await self.open(ADMIN_MENU_PATH)
        return self

    async def is_logged_in(self) -> bool:
        await self.page.wait_for_load_state()
        if "AdminMenu" in self.page.url:
            return True
        return await self.page.locator(MENU_CONTAINER).first.is_visible()

    async def _click_menu(self, name: str) -> "AdminMenuPage":
        await self.page.get_by_role("button", name=name).click()
        return self

    async def click_system_menu(self) -> "AdminMenuPage":
        return await self._click_menu(CONTENT_MENU)

    async def click_managers_menu(self) -> "AdminMenuPage":
        return await self._click_menu(MANAGERS_MENU)

    async def go_to_workflow_management(self):
        from lutece_e2e.pages.workflow import WorkflowListPage

        await self.open(WORKFLOW_MANAGEMENT_PATH)
        return WorkflowListPage(self.page, self.base_url)

    async def go_to_forms_management(self):
        from lutece_e2e.pages.forms import FormsListPage

        await self.open(FORMS_MANAGEMENT_PATH)
        return FormsListPage(self.page, self.base_url)

    async def go_to_site_properties(self):
        from lutece_e2e.pages.site_properties import SitePropertiesPage

        await self.click_system_menu()
        await self.page.get_by_role("link", name=SITE_PROPERTIES_LINK).first.click()
        return SitePropertiesPage(self.page, self.base_url)

    async def logout(self):
        from lutece_e2e.pages.login import LoginPage

        await self.page.locator(LOGOUT_LINK).first.click()
        return LoginPage(self.page, self.base_url)
