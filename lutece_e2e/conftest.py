"""
Fixtures and hooks for the Lutece journeys.

Runs:
    pytest lutece_e2e/journeys --suite local       # against lutece.base.url
    pytest lutece_e2e/journeys --suite container   # MariaDB + Lutece in Docker
    pytest lutece_e2e/journeys --phase forms_submission

Resource ownership:
- containers: session fixture ``lutece_environment`` (containerized mode only)
- browser: session fixture ``browser_manager``
- browsing context: one per phase class (``phase_page``), one per test for
  everything else (``anonymous_page``)
"""
import sys
from pathlib import Path
from typing import FrozenSet, Tuple

import pytest
import pytest_asyncio

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lutece_e2e.auth_state import clear_auth_state
from lutece_e2e.bus import PhaseBus
from lutece_e2e.config import RunContext, Settings, get_settings
from lutece_e2e.containers import ContainerDescriptor, LuteceEnvironment
from lutece_e2e.screenshots import ScreenshotHelper
from lutece_e2e.session_manager import BrowserSessionManager
from lutece_e2e.suites import (
    ALL_PHASES,
    ANONYMOUS,
    AUTHENTICATED,
    CONTAINER_SETUP,
    RBAC_CONFIGURATION,
    SESSION_MODES,
    SUITES,
    PhaseGate,
    order_items,
    phase_of,
    resolve_run_suffix,
    select_phases,
)

PHASES_KEY = pytest.StashKey[Tuple[str, ...]]()
COLLECTED_PHASES_KEY = pytest.StashKey[FrozenSet[str]]()
GATE_KEY = pytest.StashKey[PhaseGate]()


# ============================================================================
# Options and ordering
# ============================================================================

def pytest_addoption(parser):
    group = parser.getgroup("lutece", "Lutece E2E harness")
    group.addoption(
        "--suite",
        choices=sorted(SUITES),
        default="local",
        help="local: run against lutece.base.url; container: start MariaDB + Lutece first",
    )
    group.addoption(
        "--phase",
        choices=ALL_PHASES,
        default=None,
        help="run a single phase (reads earlier results from the work directory)",
    )


def pytest_configure(config):
    phases = select_phases(config.getoption("suite"), config.getoption("phase"))
    config.stash[PHASES_KEY] = phases
    config.stash[COLLECTED_PHASES_KEY] = frozenset()
    config.stash[GATE_KEY] = PhaseGate(phases)


def pytest_collection_modifyitems(config, items):
    phases = config.stash[PHASES_KEY]
    selected, deselected = order_items(
        items,
        phases,
        include_unphased=config.getoption("phase") is None,
    )
    if deselected:
        config.hook.pytest_deselected(items=deselected)
    items[:] = selected
    config.stash[COLLECTED_PHASES_KEY] = frozenset(
        phase for phase in map(phase_of, selected) if phase is not None
    )


def pytest_runtest_setup(item):
    reason = item.config.stash[GATE_KEY].skip_reason(phase_of(item))
    if reason:
        pytest.skip(reason)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.failed:
        item.config.stash[GATE_KEY].record_failure(phase_of(item))


# ============================================================================
# Run-level fixtures
# ============================================================================

@pytest.fixture(scope="session")
def settings() -> Settings:
    return get_settings()


@pytest.fixture(scope="session", autouse=True)
def setup_work_dirs(settings):
    """Create the work and screenshot directories once per session."""
    settings.work_dir.mkdir(parents=True, exist_ok=True)
    settings.screenshots_dir.mkdir(parents=True, exist_ok=True)


@pytest.fixture(scope="session")
def phase_bus(settings) -> PhaseBus:
    return PhaseBus(settings.work_dir)


@pytest.fixture(scope="session")
def lutece_environment(pytestconfig, settings):
    """Running MariaDB + Lutece pair, or None outside containerized mode."""
    if CONTAINER_SETUP not in pytestconfig.stash[PHASES_KEY]:
        yield None
        return

    with LuteceEnvironment(ContainerDescriptor.from_settings(settings)) as environment:
        yield environment


@pytest.fixture(scope="session")
def run_context(pytestconfig, settings, phase_bus, lutece_environment) -> RunContext:
    """Base URL, suffix and credentials shared read-only by every phase.

    A run that includes the RBAC or workflow phase publishes a fresh suffix;
    any other run reuses the suffix of the previous run from the bus.
    """
    base_url = lutece_environment.base_url if lutece_environment else settings.base_url
    collected = pytestconfig.stash[COLLECTED_PHASES_KEY]
    if RBAC_CONFIGURATION in collected:
        clear_auth_state(settings.auth_state_path)
    run_suffix = resolve_run_suffix(phase_bus, collected)

    context = RunContext(run_suffix=run_suffix, base_url=base_url, credentials=settings.credentials())
    print(f"[RUN] base_url={context.base_url} suffix={context.run_suffix}")
    return context


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def browser_manager(settings):
    """Single browser for the whole run, closed once at the end."""
    async with BrowserSessionManager.from_settings(settings) as manager:
        await manager.launch_browser(headless=settings.headless, slow_mo_ms=settings.slow_mo_ms)
        yield manager


# ============================================================================
# Browsing contexts
# ============================================================================

@pytest_asyncio.fixture(scope="class", loop_scope="session")
async def phase_page(request, browser_manager):
    """Page kept open across the ordered tests of one phase class.

    The class attribute ``session_mode`` picks the context type:
    ``anonymous`` (default) or ``authenticated`` (hydrated from auth state).
    """
    mode = getattr(request.cls, "session_mode", ANONYMOUS)
    if mode not in SESSION_MODES:
        raise ValueError(f"{request.cls.__name__}.session_mode must be one of {SESSION_MODES}, got {mode!r}")

    if mode == AUTHENTICATED:
        context = await browser_manager.new_authenticated_context()
    else:
        context = await browser_manager.new_anonymous_context()

    page = await context.new_page()
    try:
        yield page
    finally:
        await browser_manager.close_context(context)


@pytest_asyncio.fixture(loop_scope="session")
async def anonymous_page(browser_manager):
    """Fresh anonymous page for a single test."""
    context = await browser_manager.new_anonymous_context()
    page = await context.new_page()
    try:
        yield page
    finally:
        await browser_manager.close_context(context)


@pytest.fixture
def screenshot_helper(settings):
    """Factory fixture to create numbered screenshot helpers per journey."""
    def _create_helper(page, journey_prefix: str) -> ScreenshotHelper:
        return ScreenshotHelper(page, settings.screenshots_dir, journey_prefix)
    return _create_helper
