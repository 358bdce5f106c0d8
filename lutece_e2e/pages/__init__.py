"""Page objects for the Lutece back office and front office."""
from lutece_e2e.pages.admin_menu import AdminMenuPage
from lutece_e2e.pages.base import BasePage, ElementNotFoundError
from lutece_e2e.pages.forms import (
    FormsCreationPage,
    FormsEditPage,
    FormsListPage,
    FormsResponsesPage,
    form_id_from_url,
    step_row_matches,
)
from lutece_e2e.pages.front_office import FormsFrontOfficePage
from lutece_e2e.pages.login import LoginPage
from lutece_e2e.pages.rbac import FeatureAssignmentPage, RoleManagementPage, UserRightsPage
from lutece_e2e.pages.site_properties import SitePropertiesPage
from lutece_e2e.pages.workflow import WorkflowCreationFormPage, WorkflowEditPage, WorkflowListPage

__all__ = [
    "AdminMenuPage",
    "BasePage",
    "ElementNotFoundError",
    "FeatureAssignmentPage",
    "FormsCreationPage",
    "FormsEditPage",
    "FormsFrontOfficePage",
    "FormsListPage",
    "FormsResponsesPage",
    "LoginPage",
    "RoleManagementPage",
    "SitePropertiesPage",
    "UserRightsPage",
    "WorkflowCreationFormPage",
    "WorkflowEditPage",
    "WorkflowListPage",
    "form_id_from_url",
    "step_row_matches",
]
