"""Back-office login screen (``AdminLogin.jsp``)."""
from __future__ import annotations

import logging

from lutece_e2e.pages.base import ADMIN_LOGIN_PATH, BasePage

logger = logging.getLogger(__name__)

USERNAME_FIELD = "Code d'accès. *"
PASSWORD_FIELD = "Mot de passe *"
LOGIN_BUTTON = "Se connecter"
ERROR_BANNER = ".card-status-start.bg-danger"
WARNING_CONFIRM = "button:has-text('OK')"


class LoginPage(BasePage):

    async def navigate(self) -> "LoginPage":
        await self.open(ADMIN_LOGIN_PATH)
        return self

    async def is_displayed(self) -> bool:
        return "AdminLogin" in self.page.url

    async def dismiss_warning(self) -> "LoginPage":
        """Acknowledge the security warning some instances show before login."""
        confirm = self.page.locator(WARNING_CONFIRM)
        if await confirm.count() > 0 and await confirm.first.is_visible():
            await confirm.first.click()
        return self

    async def fill_username(self, username: str) -> "LoginPage":
        await self.page.get_by_role("textbox", name=USERNAME_FIELD).fill(username)
        return self

    async def fill_password(self, password: str) -> "LoginPage":
        await self.page.get_by_role("textbox", name=PASSWORD_FIELD).fill(password)
        return self

    async def click_login(self) -> None:
        await self.page.get_by_role("button", name=LOGIN_BUTTON).click()
        await self.page.wait_for_load_state()

    async def login_as(self, username: str, password: str):
        from lutece_e2e.pages.admin_menu import AdminMenuPage

        logger.info(f"Logging in as {username}")
        await self.fill_username(username)
        await self.fill_password(password)
        await self.click_login()
        return AdminMenuPage(self.page, self.base_url)

    async def has_error_message(self) -> bool:
        return await self.page.locator(ERROR_BANNER).first.is_visible()

    async def error_message(self) -> str:
        return (await self.page.locator(ERROR_BANNER).first.text_content() or "").strip()
