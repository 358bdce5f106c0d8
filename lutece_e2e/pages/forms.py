"""Forms plugin back-office screens: list, creation, editor and responses."""
from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlparse

from lutece_e2e.pages.admin_menu import FORMS_MANAGEMENT_PATH
from lutece_e2e.pages.base import BasePage, ElementNotFoundError

logger = logging.getLogger(__name__)

ADD_FORM_LINK = "Ajouter un Formulaire"
FORM_ROW = ".list-group-item"
ROW_ACTIONS_TOGGLE = ".dropdown > .btn-action"
VIEW_RESPONSES_LINK = "Voir les réponses"
EDIT_PUBLICATION_LINK = "Editer la publication du"
HOME_LINK = "LUTECE"

TITLE_INPUT = "input[name='title']"
DATE_PICKER_INPUT = "input.flatpickr-input"
WORKFLOW_SELECT = "#idWorkflow"
CREATE_FORM_BUTTON = "Créer le formulaire"

STEPS_TAB = "Etapes"
QUESTIONS_TAB = "Liste des Questions"
STEP_PARAMETERS_TAB = "Paramètres de l'étape"

ADD_STEP_LINK = "Ajouter une étape"
ADD_STEP_FRAME = 'iframe[title="Ajouter une étape"]'
STEP_TITLE_INPUT = "#step-title"
FINAL_CHECKBOX = "Finale"
MODIFY_STEP_LINK = "Modifier l'étape"
STEP_ROWS = "[id^='step_']"
STEP_ROW_MODIFY = "a[title*='Modifier'], button[title*='Modifier']"
TRANSITIONS_MARKER = "Liste des liaisons"
SHOW_STEPS_BUTTON = " Afficher les étapes"

QUESTION_LIST = "#question-list"
ADD_QUESTION_BUTTON = "Ajouter une question"
QUESTION_TITLE = "Titre *"
SAVE_BUTTON = "Enregistrer"
CUSTOM_CODE_FIELD = "Code personnalisé"
RICH_TEXT_FRAME = 'iframe[title="Rich Text Area"]'
RICH_TEXT_REGION = "Zone de texte riche. Appuyez"
TEXTAREA_HEIGHT_FIELD = "Hauteur de la zone de texte *"

ADD_TRANSITION_LINK = "Ajouter une liaison"
OFFCANVAS_FRAME = 'iframe[title="Offcanvas"]'

QUESTION_TYPE_TEXT = "Texte court"
QUESTION_TYPE_NUMBER = "Nombre"
QUESTION_TYPE_DATE = "Date"
QUESTION_TYPE_COMMENT = "Commentaire"
QUESTION_TYPE_TEXT_LONG = "Zone de texte long"


def form_id_from_url(url: str, default: str = "1") -> str:
    """Form identifier from an editor URL (``id_form=`` first, then ``id=``)."""
    query = parse_qs(urlparse(url).query)
    for key in ("id_form", "id"):
        values = query.get(key)
        if values and values[0].strip():
            return values[0].strip()
    return default


def step_row_matches(row_text: str, step_name: str) -> bool:
    """True when ``step_name`` labels the row itself, not one of its transitions.

    A step row also lists the steps it links to after a "Liste des liaisons"
    heading, so the name must appear before that heading.
    """
    name_at = row_text.find(step_name)
    if name_at < 0:
        return False
    marker_at = row_text.find(TRANSITIONS_MARKER)
    return marker_at < 0 or name_at < marker_at


class FormsListPage(BasePage):

    async def navigate(self) -> "FormsListPage":
        await self.open(FORMS_MANAGEMENT_PATH)
        return self

    async def is_displayed(self) -> bool:
        await self.page.wait_for_load_state()
        if "ManageForms" in self.page.url:
            return True
        return await self.page.get_by_role("link", name=ADD_FORM_LINK).first.is_visible()

    async def click_add_form(self) -> "FormsCreationPage":
        await self.page.get_by_role("link", name=ADD_FORM_LINK).first.click()
        await self.page.wait_for_load_state()
        return FormsCreationPage(self.page, self.base_url)

    async def has_form(self, name: str) -> bool:
        return await self.page.get_by_text(name).first.is_visible()

    async def open_form(self, name: str) -> "FormsEditPage":
        await self.page.get_by_text(name).first.click()
        await self.page.wait_for_load_state()
        return FormsEditPage(self.page, self.base_url)

    async def open_actions_dropdown(self, name: str) -> "FormsListPage":
        row = self.page.locator(FORM_ROW).filter(has_text=name)
        await row.locator(ROW_ACTIONS_TOGGLE).first.click()
        return self

    async def click_view_responses(self) -> "FormsResponsesPage":
        await self.page.get_by_role("link", name=VIEW_RESPONSES_LINK).first.click()
        await self.page.wait_for_load_state()
        return FormsResponsesPage(self.page, self.base_url)

    async def click_lutece_home(self) -> "FormsListPage":
        await self.page.get_by_role("link", name=HOME_LINK, exact=True).click()
        await self.page.wait_for_load_state()
        return self


class FormsCreationPage(BasePage):

    async def fill_title(self, title: str) -> "FormsCreationPage":
        await self.page.locator(TITLE_INPUT).fill(title)
        return self

    async def set_start_date(self, date: str) -> "FormsCreationPage":
        await self.set_picker_date(self.page.locator(DATE_PICKER_INPUT).nth(0), date)
        return self

    async def set_end_date(self, date: str) -> "FormsCreationPage":
        await self.set_picker_date(self.page.locator(DATE_PICKER_INPUT).nth(1), date)
        return self

    async def select_workflow(self, workflow_name: str) -> "FormsCreationPage":
        await self.page.locator(WORKFLOW_SELECT).select_option(label=workflow_name)
        return self

    async def click_create_form(self) -> "FormsEditPage":
        await self.page.get_by_role("button", name=CREATE_FORM_BUTTON).click()
        await self.page.wait_for_load_state()
        return FormsEditPage(self.page, self.base_url)


class FormsEditPage(BasePage):
    """Form editor: steps, questions, transitions and portal publication."""

    def form_id(self, default: str = "1") -> str:
        return form_id_from_url(self.page.url, default)

    # ---- tabs -------------------------------------------------------------------
    async def _click_tab(self, name: str) -> "FormsEditPage":
        await self.page.get_by_role("tab", name=name).click()
        return self

    async def click_steps_tab(self) -> "FormsEditPage":
        return await self._click_tab(STEPS_TAB)

    async def click_questions_tab(self) -> "FormsEditPage":
        return await self._click_tab(QUESTIONS_TAB)

    async def click_step_parameters_tab(self) -> "FormsEditPage":
        return await self._click_tab(STEP_PARAMETERS_TAB)

    # ---- steps ------------------------------------------------------------------
    async def add_step(self, title: str, final: bool) -> "FormsEditPage":
        logger.info(f"Adding step '{title}' (final={final})")
        await self.page.get_by_role("link", name=ADD_STEP_LINK).click()
        dialog = self.page.frame_locator(ADD_STEP_FRAME)
        await dialog.locator(STEP_TITLE_INPUT).fill(title)
        if final:
            await dialog.get_by_role("checkbox", name=FINAL_CHECKBOX).check()
        await dialog.get_by_role("button", name="OK").click()
        await self.page.wait_for_load_state()
        return self

    async def open_step_edit_by_name(self, step_name: str) -> "FormsEditPage":
        await self.page.get_by_role("link", name=step_name, exact=True).last.click()
        await self.page.wait_for_load_state()
        return self

    async def click_step_by_name(self, step_name: str) -> "FormsEditPage":
        return await self.open_step_edit_by_name(step_name)

    async def click_modify_step(self) -> "FormsEditPage":
        await self.page.get_by_role("link", name=MODIFY_STEP_LINK).last.click()
        await self.page.wait_for_load_state()
        return self

    async def open_step_for_modification(self, step_name: str) -> "FormsEditPage":
        """Find the row of ``step_name`` among the steps and open its editor."""
        rows = self.page.locator(STEP_ROWS)
        row_count = await rows.count()
        logger.debug(f"Scanning {row_count} step rows for '{step_name}'")
        for index in range(row_count):
            row = rows.nth(index)
            label = row.get_by_text(step_name).first
            if await label.count() == 0 or not await label.is_visible():
                continue
            if not step_row_matches(await row.text_content() or "", step_name):
                continue
            modify = row.locator(STEP_ROW_MODIFY).first
            if await modify.count() == 0:
                modify = row.get_by_role("link", name=MODIFY_STEP_LINK).first
            logger.info(f"Opening step '{step_name}' (row {await row.get_attribute('id')})")
            await modify.click()
            await self.page.wait_for_load_state()
            return self
        raise ElementNotFoundError(
            name="open_step_for_modification",
            payload={"step": step_name, "rows": row_count},
            message=f"Step '{step_name}' not found among {row_count} steps",
        )

    async def uncheck_final_and_save(self) -> "FormsEditPage":
        await self.page.get_by_role("checkbox", name=FINAL_CHECKBOX).uncheck()
        await self.page.get_by_role("button", name="OK").click()
        await self.page.wait_for_load_state()
        return self

    async def configure_step_transition(self) -> "FormsEditPage":
        await self.page.get_by_role("link", name=ADD_TRANSITION_LINK).click()
        panel = self.page.frame_locator(OFFCANVAS_FRAME)
        await panel.get_by_role("button", name="OK").click()
        await self.page.wait_for_load_state()
        return self

    async def click_show_steps(self) -> "FormsEditPage":
        await self.page.get_by_role("button", name=SHOW_STEPS_BUTTON).click()
        await self.page.wait_for_load_state()
        return self

    async def click_form_by_name(self, name: str) -> "FormsEditPage":
        await self.page.get_by_role("link", name=name).last.click()
        await self.page.wait_for_load_state()
        return self

    # ---- questions --------------------------------------------------------------
    async def _open_question_menu(self) -> None:
        await self.page.locator(QUESTION_LIST).get_by_role("button", name="Actions").first.click()

    async def _add_titled_question(self, question_type: str, title: str) -> None:
        logger.info(f"Adding {question_type} question '{title}'")
        await self.page.get_by_role("button", name=ADD_QUESTION_BUTTON).click()
        await self.page.get_by_role("button", name=question_type).click()
        await self.page.get_by_role("textbox", name=QUESTION_TITLE).fill(title)
        await self.page.get_by_role("button", name=SAVE_BUTTON).click()
        await self.page.wait_for_load_state()

    async def add_text_question(self, title: str) -> "FormsEditPage":
        await self._add_titled_question(QUESTION_TYPE_TEXT, title)
        return self

    async def add_number_question(self, title: str) -> "FormsEditPage":
        await self._open_question_menu()
        await self._add_titled_question(QUESTION_TYPE_NUMBER, title)
        return self

    async def add_date_question(self, title: str) -> "FormsEditPage":
        await self._open_question_menu()
        await self._add_titled_question(QUESTION_TYPE_DATE, title)
        return self

    async def add_text_long_question(self, title: str, height: str) -> "FormsEditPage":
        await self._add_titled_question(QUESTION_TYPE_TEXT_LONG, title)
        height_field = self.page.get_by_role("textbox", name=TEXTAREA_HEIGHT_FIELD)
        if await height_field.is_visible():
            await height_field.fill(height)
            await self.page.get_by_role("button", name=SAVE_BUTTON).click()
            await self.page.wait_for_load_state()
        return self

    async def add_comment_question(self, custom_code: str, text: str) -> "FormsEditPage":
        logger.info(f"Adding comment question '{custom_code}'")
        await self.page.get_by_role("button", name=ADD_QUESTION_BUTTON).click()
        await self.page.get_by_role("button", name=QUESTION_TYPE_COMMENT).click()
        await self.page.get_by_role("textbox", name=CUSTOM_CODE_FIELD).fill(custom_code)
        editor = self.page.frame_locator(RICH_TEXT_FRAME)
        await editor.locator("html").click()
        await editor.get_by_label(RICH_TEXT_REGION).fill(text)
        await self.page.get_by_role("button", name=SAVE_BUTTON).click()
        await self.page.wait_for_load_state()
        return self

    # ---- publication ------------------------------------------------------------
    async def publish_on_portal(self, form_name: str, start_date: str) -> "FormsEditPage":
        """Publish ``form_name`` from the back-office home, starting ``start_date``."""
        logger.info(f"Publishing '{form_name}' on the portal from {start_date}")
        await self.page.get_by_role("link", name=HOME_LINK, exact=True).click()
        await self.page.wait_for_load_state()
        row = self.page.locator(FORM_ROW).filter(has_text=form_name)
        await row.locator(ROW_ACTIONS_TOGGLE).first.click()
        await self.page.get_by_role("link", name=EDIT_PUBLICATION_LINK).click()
        await self.set_picker_date(self.page.locator(DATE_PICKER_INPUT).first, start_date)
        await self.page.get_by_role("button", name="OK").click()
        await self.page.wait_for_load_state()
        return self


class FormsResponsesPage(BasePage):

    async def is_displayed(self) -> bool:
        await self.page.wait_for_load_state()
        return "forms" in self.page.url.lower()

    async def click_first_response(self, form_name: str) -> "FormsResponsesPage":
        await self.page.get_by_role("cell", name=form_name).first.click()
        await self.page.wait_for_load_state()
        return self

    async def click_workflow_action(self, action_label: str) -> "FormsResponsesPage":
        await self.page.get_by_role("link", name=action_label).first.click()
        await self.page.wait_for_load_state()
        return self

    async def confirm_action(self) -> "FormsResponsesPage":
        await self.page.get_by_role("button", name="Valider").click()
        await self.page.wait_for_load_state()
        return self
