"""Workflow plugin screens: list, creation form and workflow editor."""
from __future__ import annotations

import logging

from lutece_e2e.pages.admin_menu import WORKFLOW_MANAGEMENT_PATH
from lutece_e2e.pages.base import BasePage, css_string

logger = logging.getLogger(__name__)

CREATE_WORKFLOW_LINK = "a:has-text('Créer un workflow'), a:has-text('Creer un workflow')"
WORKFLOW_ROW = "xpath=ancestor::*[contains(@class, 'row') or contains(@class, 'list-group-item')][1]"
ACTIVATE_BUTTON = "button.btn-success, a.btn-success, button:has(.fa-play), a:has(.fa-play)"

NAME_INPUT = "input[name='name']"
DESCRIPTION_INPUT = "textarea[name='description']"
SAVE_BUTTON = "Enregistrer"
PUBLISHED_RADIO = "Publié"

ADD_STATE_LINK = "a:has-text('Ajouter un état')"
INITIAL_STATE_CHECKBOX = "input#is_initial_state, input[name='is_initial_state']"
SAVE_STATE_BUTTON = "button:has-text('Enregistrer'), input[value='Enregistrer']"
ADD_ACTION_LINK = "a:has-text('Ajouter une action')"
STATE_AFTER_SELECT = "#id_state_after"
MODIFY_ACTION_LINK = "Modifier l'action"
MODIFY_WORKFLOW_LINK = "Modifier le workflow"
NEW_TASK_LABEL = "Nouvelle tâche"
INSERT_TASK_BUTTON = "Insérer"
BACK_TO_LIST_LINK = "Gestion des workflows"


def workflow_link_selector(name: str) -> str:
    return f"a:has-text({css_string(name)})"


class WorkflowListPage(BasePage):

    async def navigate(self) -> "WorkflowListPage":
        await self.open(WORKFLOW_MANAGEMENT_PATH)
        return self

    async def is_displayed(self) -> bool:
        await self.page.wait_for_load_state()
        if "ManageWorkflow" in self.page.url:
            return True
        if await self.page.locator(CREATE_WORKFLOW_LINK).first.is_visible():
            return True
        return await self.page.locator("text=Gestion des workflows").first.is_visible()

    async def click_create_workflow(self) -> "WorkflowCreationFormPage":
        await self.page.locator(CREATE_WORKFLOW_LINK).first.click()
        await self.page.wait_for_load_state()
        return WorkflowCreationFormPage(self.page, self.base_url)

    async def click_activate_workflow(self, name: str) -> "WorkflowListPage":
        """Press the green activation button on the row holding ``name``."""
        await self.page.wait_for_load_state()
        link = self.page.locator(workflow_link_selector(name)).first
        await link.locator(WORKFLOW_ROW).locator(ACTIVATE_BUTTON).first.click()
        await self.page.wait_for_load_state()
        return self

    async def has_workflow(self, name: str) -> bool:
        return await self.page.locator(workflow_link_selector(name)).first.is_visible()

    async def reload(self) -> "WorkflowListPage":
        await self.page.reload()
        await self.page.wait_for_load_state()
        return self


class WorkflowCreationFormPage(BasePage):

    async def fill_name(self, name: str) -> "WorkflowCreationFormPage":
        await self.page.locator(NAME_INPUT).fill(name)
        return self

    async def fill_description(self, description: str) -> "WorkflowCreationFormPage":
        await self.page.locator(DESCRIPTION_INPUT).fill(description)
        return self

    async def save(self) -> WorkflowListPage:
        await self.page.get_by_role("button", name=SAVE_BUTTON).click()
        await self.page.wait_for_load_state()
        await self.dismiss_admin_message()
        if "ManageWorkflow" not in self.page.url:
            await self.open(WORKFLOW_MANAGEMENT_PATH)
        return WorkflowListPage(self.page, self.base_url)


class WorkflowEditPage(BasePage):

    async def click_modify_workflow(self, name: str) -> "WorkflowEditPage":
        await self.page.wait_for_load_state()
        await self.page.locator(workflow_link_selector(name)).first.click()
        await self.page.wait_for_load_state()
        return self

    async def click_modify_workflow_link(self) -> "WorkflowEditPage":
        await self.page.get_by_role("link", name=MODIFY_WORKFLOW_LINK).click()
        await self.page.wait_for_load_state()
        return self

    async def ensure_on_edit_page(self, name: str) -> "WorkflowEditPage":
        """Open the editor of ``name`` unless the page already shows one."""
        await self.page.wait_for_load_state()
        url = self.page.url
        if "ManageWorkflow.jsp" in url and "id_workflow" not in url:
            await self.click_modify_workflow(name)
        elif "workflow" not in url:
            await self.open(WORKFLOW_MANAGEMENT_PATH)
            await self.click_modify_workflow(name)
        return self

    async def add_state(self, name: str, description: str, initial: bool) -> "WorkflowEditPage":
        logger.info(f"Adding state '{name}' (initial={initial})")
        await self.page.locator(ADD_STATE_LINK).first.click()
        await self.page.wait_for_load_state()
        await self.page.locator(NAME_INPUT).fill(name)
        await self.page.locator(DESCRIPTION_INPUT).fill(description)
        if initial:
            await self.page.locator(INITIAL_STATE_CHECKBOX).first.check()
        await self.page.locator(SAVE_STATE_BUTTON).first.click()
        await self.page.wait_for_load_state()
        await self.dismiss_admin_message()
        return self

    async def click_actions_tab(self) -> "WorkflowEditPage":
        await self.page.get_by_role("tab", name="Actions").click()
        return self

    async def add_action(
        self,
        name: str,
        description: str,
        linked_state: str,
        state_after: str,
    ) -> "WorkflowEditPage":
        logger.info(f"Adding action '{name}' ({linked_state} -> {state_after})")
        await self.page.locator(ADD_ACTION_LINK).first.click()
        await self.page.locator(NAME_INPUT).fill(name)
        await self.page.locator(DESCRIPTION_INPUT).fill(description)
        await self.page.get_by_role("checkbox", name=linked_state).check()
        await self.page.locator(STATE_AFTER_SELECT).select_option(label=state_after)
        await self.page.get_by_role("button", name=SAVE_BUTTON).click()
        await self.page.wait_for_load_state()
        await self.dismiss_admin_message()
        return self

    async def has_modify_action_link(self) -> bool:
        return await self.page.get_by_role("link", name=MODIFY_ACTION_LINK).first.is_visible()

    async def click_modify_action(self) -> "WorkflowEditPage":
        await self.page.get_by_role("link", name=MODIFY_ACTION_LINK).first.click()
        return self

    async def select_task(self, task_type: str) -> "WorkflowEditPage":
        await self.page.get_by_label(NEW_TASK_LABEL).select_option(task_type)
        return self

    async def click_insert_task(self) -> "WorkflowEditPage":
        await self.page.get_by_role("button", name=INSERT_TASK_BUTTON).click()
        await self.page.wait_for_load_state()
        return self

    async def publish_workflow(self) -> "WorkflowEditPage":
        await self.page.get_by_role("radio", name=PUBLISHED_RADIO, exact=True).check()
        await self.page.get_by_role("button", name=SAVE_BUTTON).click()
        await self.page.wait_for_load_state()
        await self.dismiss_admin_message()
        return self

    async def go_back_to_list(self) -> WorkflowListPage:
        await self.page.get_by_role("link", name=BACK_TO_LIST_LINK).first.click()
        await self.page.wait_for_load_state()
        return WorkflowListPage(self.page, self.base_url)
