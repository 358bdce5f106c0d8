"""Access-control screens: roles, user rights and feature groups."""
from __future__ import annotations

import logging

from lutece_e2e.pages.base import BasePage

logger = logging.getLogger(__name__)

MANAGERS_MENU_LINK = "a:has-text('Gestionnaires')"
ROLE_MANAGEMENT_LINK = "a:has-text('Gestion des rôles')"
# Edit link of the n-th role card.
ROLE_EDIT_LINK = (
    "li:nth-child({position}) > .card > .card-body > .row"
    " > .col-md.d-flex.align-items-center.justify-content-end > a"
)
DEFAULT_ROLE_POSITION = 8

RESOURCE_TYPE_SELECT = "#resource_type"
ADD_CONTROL_BUTTON = "button:has-text('Ajouter un contrôle')"
NEXT_BUTTON = "button:has-text('Suivant')"
VALIDATE_BUTTON = "button:has-text('Valider')"

USER_RIGHTS_PATH = "/jsp/admin/user/ManageUserRights.jsp?id_user={user_id}"
MODIFY_RIGHTS = "a:has-text('Modifier'), button:has-text('Modifier')"
SELECT_ALL_BUTTON = "Selectionner tout"
APPLY_RIGHTS_BUTTON = "Appliquer cette liste de"

SYSTEM_MENU_LINK = "a:has-text('Système')"
TECHNICAL_SETTINGS_LINK = "a:has-text('Paramètres techniques')"
FEATURE_ASSIGNMENT_LINK = "a:has-text('Affectation des fonctionnalit')"
FEATURE_GROUP_SELECT = "#group_name-{feature}"
FEATURES_MANAGEMENT_PATH = "/jsp/admin/AdminTechnicalMenu.jsp?#features_management"


class RoleManagementPage(BasePage):

    async def open_from_menu(self, position: int = DEFAULT_ROLE_POSITION) -> "RoleManagementPage":
        await self.page.locator(MANAGERS_MENU_LINK).first.click()
        await self.page.locator(ROLE_MANAGEMENT_LINK).nth(1).click()
        await self.page.wait_for_load_state()
        return await self.open_role(position)

    async def open_role(self, position: int) -> "RoleManagementPage":
        await self.page.locator(ROLE_EDIT_LINK.format(position=position)).first.click()
        await self.page.wait_for_load_state()
        return self

    async def add_resource_control(self, resource_type: str) -> "RoleManagementPage":
        logger.info(f"Adding resource control {resource_type}")
        await self.page.locator(RESOURCE_TYPE_SELECT).select_option(resource_type)
        for button in (ADD_CONTROL_BUTTON, NEXT_BUTTON, VALIDATE_BUTTON):
            await self.page.locator(button).first.click()
            await self.page.wait_for_load_state()
        return self


class UserRightsPage(BasePage):

    async def navigate(self, user_id: int = 1) -> "UserRightsPage":
        await self.open(USER_RIGHTS_PATH.format(user_id=user_id))
        return self

    async def is_displayed(self) -> bool:
        if "ManageUserRights" in self.page.url:
            return True
        return await self.page.locator("text=Liste des droits").count() > 0 \
            or await self.page.locator("text=Droits").count() > 0

    async def click_modify(self) -> "UserRightsPage":
        await self.page.locator(MODIFY_RIGHTS).first.click()
        await self.page.wait_for_load_state()
        return self

    async def select_all(self) -> "UserRightsPage":
        await self.page.get_by_role("button", name=SELECT_ALL_BUTTON).first.click()
        return self

    async def apply_rights(self) -> "UserRightsPage":
        await self.page.get_by_role("button", name=APPLY_RIGHTS_BUTTON).first.click()
        await self.page.wait_for_load_state()
        return self


class FeatureAssignmentPage(BasePage):

    async def open_from_menu(self) -> "FeatureAssignmentPage":
        await self.page.locator(SYSTEM_MENU_LINK).first.click()
        await self.page.locator(TECHNICAL_SETTINGS_LINK).first.click()
        await self.page.wait_for_load_state()
        await self.page.locator(FEATURE_ASSIGNMENT_LINK).first.click()
        await self.page.wait_for_load_state()
        return self

    async def has_feature(self, feature: str) -> bool:
        return await self.page.locator(FEATURE_GROUP_SELECT.format(feature=feature)).count() > 0

    async def assign_feature(self, feature: str, group: str) -> "FeatureAssignmentPage":
        """Move ``feature`` to ``group`` and return to the feature list."""
        logger.info(f"Assigning feature {feature} to group {group}")
        await self.page.locator(FEATURE_GROUP_SELECT.format(feature=feature)).select_option(group)
        await self.open(FEATURES_MANAGEMENT_PATH)
        return self
