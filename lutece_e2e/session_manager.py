"""
Browser Session Manager for the Lutece E2E phases.

Owns the single Playwright browser of a run and every browsing context opened
on it. Contexts share one configuration (viewport, locale, TLS tolerance,
default timeout); authenticated contexts are hydrated from the stored
auth state written by the first phase that logs in.
"""
import logging
from pathlib import Path
from typing import List, Optional, TypedDict

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

logger = logging.getLogger(__name__)


class ViewportSize(TypedDict):
    """Viewport size specification."""
    width: int
    height: int


class BrowserSessionManager:
    """
    Shared browser plus per-phase browsing contexts.

    Usage:
        async with BrowserSessionManager.from_settings(settings) as manager:
            await manager.launch_browser(headless=True)
            context = await manager.new_authenticated_context()
            page = await context.new_page()

    ``launch_browser`` and ``close_all`` are both idempotent, so the suite
    fixture and an interrupted phase can release resources without
    coordinating.
    """

    DEFAULT_VIEWPORT: ViewportSize = {'width': 1920, 'height': 1080}
    DEFAULT_LOCALE = 'fr-FR'
    DEFAULT_TIMEOUT_MS = 30000

    def __init__(
        self,
        auth_state_path: Path,
        viewport: Optional[ViewportSize] = None,
        locale: str = DEFAULT_LOCALE,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        browser_type: str = "chromium",
    ):
        """
        Args:
            auth_state_path: File holding the stored session (cookies + origin storage)
            viewport: Viewport for every context (defaults to 1920x1080)
            locale: Browser locale
            timeout_ms: Default timeout for every operation on the contexts
            browser_type: Playwright browser to launch
        """
        self.auth_state_path = Path(auth_state_path)
        self.viewport: ViewportSize = viewport or self.DEFAULT_VIEWPORT
        self.locale = locale
        self.timeout_ms = timeout_ms
        self.browser_type = browser_type

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []
        self._auth_state_saved = False

    @classmethod
    def from_settings(cls, settings) -> 'BrowserSessionManager':
        return cls(
            auth_state_path=settings.auth_state_path,
            viewport=settings.viewport,
            locale=settings.locale,
            timeout_ms=settings.timeout_ms,
        )

    async def __aenter__(self) -> 'BrowserSessionManager':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close_all()

    @property
    def is_launched(self) -> bool:
        return self._browser is not None

    @property
    def open_contexts(self) -> int:
        return len(self._contexts)

    async def launch_browser(self, headless: bool = True, slow_mo_ms: int = 0) -> Browser:
        """Start the browser once; later calls return the running instance."""
        if self._browser is not None:
            return self._browser

        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, self.browser_type)
        self._browser = await launcher.launch(
            headless=headless,
            slow_mo=0 if headless else slow_mo_ms,
        )
        logger.info(f"Launched {self.browser_type} (headless={headless}, slow_mo={0 if headless else slow_mo_ms}ms)")
        return self._browser

    async def new_anonymous_context(self) -> BrowserContext:
        """Fresh context without stored credentials."""
        return await self._new_context()

    async def new_authenticated_context(self, state_path: Optional[Path] = None) -> BrowserContext:
        """
        Context hydrated from the stored auth state.

        Behaves like an anonymous context when no state has been stored yet;
        callers recover through ``ensure_admin_session``.
        """
        path = Path(state_path) if state_path else self.auth_state_path
        if not path.exists():
            logger.info(f"No auth state at {path}, opening anonymous context")
            return await self._new_context()
        return await self._new_context(storage_state=path)

    async def save_auth_state(self, context: BrowserContext) -> Path:
        """Persist cookies and origin storage; only the first call of a run writes."""
        if self._auth_state_saved:
            logger.debug(f"Auth state already saved this run, keeping {self.auth_state_path}")
            return self.auth_state_path

        self.auth_state_path.parent.mkdir(parents=True, exist_ok=True)
        await context.storage_state(path=str(self.auth_state_path))
        self._auth_state_saved = True
        logger.info(f"Saved auth state to {self.auth_state_path}")
        return self.auth_state_path

    async def close_context(self, context: BrowserContext) -> None:
        """Close one context opened by this manager."""
        if context not in self._contexts:
            return
        self._contexts.remove(context)
        try:
            await context.close()
        except Exception as e:
            logger.warning(f"Error closing context: {e}")

    async def close_all(self) -> None:
        """Close every context, the browser and Playwright. Safe to call twice."""
        for context in list(self._contexts):
            await self.close_context(context)

        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")

        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")

    async def _new_context(self, storage_state: Optional[Path] = None) -> BrowserContext:
        if self._browser is None:
            raise RuntimeError("Browser not launched. Call launch_browser() first.")

        context = await self._browser.new_context(
            viewport=self.viewport,
            locale=self.locale,
            ignore_https_errors=True,
            storage_state=str(storage_state) if storage_state else None,
        )
        context.set_default_timeout(self.timeout_ms)
        self._contexts.append(context)
        logger.debug(f"Opened context (authenticated={storage_state is not None}, total={len(self._contexts)})")
        return context

