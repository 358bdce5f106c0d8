"""Shared configuration for the Lutece E2E harness.

Values come from ``e2e.properties`` at the repository root (or the file named
by ``LUTECE_E2E_PROPERTIES``). Each key can be overridden from the environment
using its upper-cased name with dots replaced by underscores:

- ``lutece.base.url``     -> ``LUTECE_BASE_URL``
- ``test.headless``       -> ``TEST_HEADLESS``
- ``test.admin.password`` -> ``TEST_ADMIN_PASSWORD``

Settings are read once per process (``get_settings``). The per-run values
(suffix, resolved base URL) live in an immutable ``RunContext`` built by the
orchestrating fixture.
"""
from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional
from urllib.parse import urljoin

from lutece_e2e.properties import load_properties

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_PROPERTIES_FILE = REPO_ROOT / "e2e.properties"
PROPERTIES_FILE_ENV = "LUTECE_E2E_PROPERTIES"

_REQUIRED = object()


def env_name(key: str) -> str:
    """Environment variable that overrides property ``key``."""
    return key.upper().replace(".", "_").replace("-", "_")


def generate_run_suffix(now_ms: Optional[int] = None) -> str:
    """Short numeric suffix that keeps fixture names unique across reruns."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return str(now_ms % 100000)


@dataclass(frozen=True)
class WorkflowFixture:
    name: str
    description: str
    state_initial: str
    state_final: str
    action_name: str
    action_description: str
    task_type: str


@dataclass(frozen=True)
class FormsFixture:
    title: str
    end_date: str
    step_initial: str
    step_final: str
    question_text: str
    question_number: str
    question_date: str
    comment_code: str
    comment_text: str
    submit_text: str
    submit_number: str
    submit_date: str


@dataclass(frozen=True)
class TextLongFixture:
    form_name: str
    step_name: str
    question_title: str
    textarea_height: str


@dataclass(frozen=True)
class ContainerFixture:
    image: str
    context_root: str
    db_password: str


class Settings:
    """Typed view over the property file plus environment overrides.

    Missing required keys fail fast with the key, its environment variable
    and the property file in the message.
    """

    def __init__(
        self,
        properties_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._environ: Mapping[str, str] = os.environ if environ is None else environ
        if properties_path is None:
            properties_path = Path(self._environ.get(PROPERTIES_FILE_ENV) or DEFAULT_PROPERTIES_FILE)
        self.properties_path = Path(properties_path)
        self._properties: Dict[str, str] = dict(load_properties(self.properties_path))

        self.base_url: str = self.get("lutece.base.url").rstrip("/")
        self.headless: bool = self.get_bool("test.headless", True)
        self.timeout_ms: int = self.get_int("test.timeout", 30000)
        self.slow_mo_ms: int = self.get_int("test.slowmo", 0)
        self.viewport: Dict[str, int] = {
            "width": self.get_int("test.viewport.width", 1920),
            "height": self.get_int("test.viewport.height", 1080),
        }
        self.locale: str = self.get("test.locale", "fr-FR")
        self.work_dir: Path = Path(self.get("test.work.dir", "target"))
        self.screenshots_dir: Path = Path(
            self.get("test.screenshots.path", str(self.work_dir / "screenshots"))
        )
        self.admin_username: str = self.get("test.admin.username")
        self.admin_password: str = self.get("test.admin.password")

        self.workflow = WorkflowFixture(
            name=self.get("test.workflow.name"),
            description=self.get("test.workflow.description"),
            state_initial=self.get("test.workflow.state.initial"),
            state_final=self.get("test.workflow.state.final"),
            action_name=self.get("test.workflow.action.name"),
            action_description=self.get("test.workflow.action.description"),
            task_type=self.get("test.workflow.task.type"),
        )
        self.forms = FormsFixture(
            title=self.get("test.forms.title"),
            end_date=self.get("test.forms.end.date", "2033-02-25"),
            step_initial=self.get("test.forms.step.initial"),
            step_final=self.get("test.forms.step.final"),
            question_text=self.get("test.forms.question.text"),
            question_number=self.get("test.forms.question.number"),
            question_date=self.get("test.forms.question.date"),
            comment_code=self.get("test.forms.question.comment.code"),
            comment_text=self.get("test.forms.question.comment.text"),
            submit_text=self.get("test.forms.submit.text"),
            submit_number=self.get("test.forms.submit.number"),
            submit_date=self.get("test.forms.submit.date"),
        )
        self.textlong = TextLongFixture(
            form_name=self.get("test.textlong.form.name", "Forms Test integration"),
            step_name=self.get("test.textlong.step.name", "Etape Initial"),
            question_title=self.get("test.textlong.question.title", "Text long"),
            textarea_height=self.get("test.textlong.textarea.height", "500"),
        )

    # ---- raw access -------------------------------------------------------------
    def get(self, key: str, default=_REQUIRED) -> str:
        override = self._environ.get(env_name(key))
        if override:
            return override
        if key in self._properties and self._properties[key] != "":
            return self._properties[key]
        if default is _REQUIRED:
            raise RuntimeError(
                f"Missing configuration key '{key}'\n"
                f"Set it in {self.properties_path} or export {env_name(key)}"
            )
        return default

    def get_bool(self, key: str, default: bool) -> bool:
        return self.get(key, str(default)).lower() in {"true", "1", "yes"}

    def get_int(self, key: str, default: int) -> int:
        raw = self.get(key, str(default))
        try:
            return int(raw)
        except ValueError:
            raise RuntimeError(f"Configuration key '{key}' must be an integer, got {raw!r}") from None

    # ---- derived values ---------------------------------------------------------
    @property
    def container(self) -> ContainerFixture:
        """Containerized-mode settings; ``lutece.image`` is only required here."""
        return ContainerFixture(
            image=self.get("lutece.image"),
            context_root=self.get("lutece.context.root", "/lutece"),
            db_password=self.get("lutece.db.password", "lutece"),
        )

    @property
    def auth_state_path(self) -> Path:
        return self.work_dir / "auth-state.json"

    def credentials(self) -> "AdminCredentials":
        return AdminCredentials(self.admin_username, self.admin_password)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    print(f"[CONFIG] Loaded {settings.properties_path.name} (base_url={settings.base_url})")
    return settings


@dataclass(frozen=True)
class AdminCredentials:
    username: str
    password: str = field(repr=False)

    def __repr__(self) -> str:
        return f"AdminCredentials(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class RunContext:
    """Values resolved once per suite run and shared read-only by every phase."""

    run_suffix: str
    base_url: str
    credentials: AdminCredentials

    def url(self, path: str) -> str:
        """Return an absolute URL for the provided application path."""
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    def suffixed(self, name: str) -> str:
        """Fixture name made unique for this run, e.g. ``"Workflow 12345"``."""
        return f"{name} {self.run_suffix}"
