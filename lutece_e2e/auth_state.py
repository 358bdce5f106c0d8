"""
Authentication state shared by the back-office phases.

The first phase that logs in stores the browser session (cookies + origin
storage) in ``<work_dir>/auth-state.json``; later phases open their context
from it instead of logging in through the UI again.
"""
import logging
from pathlib import Path

from playwright.async_api import Page

from lutece_e2e.config import AdminCredentials
from lutece_e2e.pages.admin_menu import AdminMenuPage
from lutece_e2e.pages.login import LoginPage
from lutece_e2e.session_manager import BrowserSessionManager

logger = logging.getLogger(__name__)

AUTH_STATE_FILENAME = "auth-state.json"


def auth_state_path(work_dir: Path) -> Path:
    return Path(work_dir) / AUTH_STATE_FILENAME


def has_auth_state(path: Path) -> bool:
    """True when a non-empty stored session exists at ``path``."""
    try:
        return path.stat().st_size > 0
    except OSError:
        return False


def clear_auth_state(path: Path) -> bool:
    """Remove a stored session left over from a previous run.

    Returns:
        True if a file was removed
    """
    if not path.exists():
        return False
    path.unlink()
    logger.info(f"Cleared stale auth state {path}")
    return True


async def ensure_admin_session(
    page: Page,
    base_url: str,
    credentials: AdminCredentials,
    manager: BrowserSessionManager,
) -> AdminMenuPage:
    """
    Land on the back-office menu with a valid admin session.

    The page's context may come from stored state that is absent or expired;
    in both cases Lutece redirects to the login form, and this logs in through
    the UI and stores the fresh session.
    """
    menu = await AdminMenuPage(page, base_url).navigate()
    if "AdminLogin" not in page.url:
        logger.debug("Stored admin session accepted")
        return menu

    logger.info("Stored session missing or expired, logging in through the UI")
    login = LoginPage(page, base_url)
    await login.dismiss_warning()
    menu = await login.login_as(credentials.username, credentials.password)
    await manager.save_auth_state(page.context)
    return menu
