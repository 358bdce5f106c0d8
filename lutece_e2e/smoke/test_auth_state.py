"""A stored session opens the back office without going through the login form."""
import pytest

from lutece_e2e.pages import AdminMenuPage, LoginPage

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def test_stored_session_skips_login(browser_manager, run_context, tmp_path):
    state_path = tmp_path / "auth-state.json"

    context = await browser_manager.new_anonymous_context()
    try:
        page = await context.new_page()
        login = await LoginPage(page, run_context.base_url).navigate()
        await login.dismiss_warning()
        await login.login_as(run_context.credentials.username, run_context.credentials.password)
        await context.storage_state(path=str(state_path))
    finally:
        await browser_manager.close_context(context)

    restored = await browser_manager.new_authenticated_context(state_path=state_path)
    try:
        page = await restored.new_page()
        await AdminMenuPage(page, run_context.base_url).navigate()

        assert "AdminLogin" not in page.url, f"Stored session rejected, redirected to {page.url}"
    finally:
        await browser_manager.close_context(restored)
