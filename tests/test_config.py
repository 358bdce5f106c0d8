"""Property file parsing, environment overrides and per-run values."""

from __future__ import annotations

import pytest

from lutece_e2e.config import (
    DEFAULT_PROPERTIES_FILE,
    AdminCredentials,
    RunContext,
    Settings,
    env_name,
    generate_run_suffix,
)
from lutece_e2e.properties import parse_properties


def write_properties(tmp_path, drop=(), extra=""):
    """Copy of the shipped property file without the ``drop`` keys."""
    lines = [
        line for line in DEFAULT_PROPERTIES_FILE.read_text(encoding="utf-8").splitlines()
        if not any(line.startswith(f"{key}=") for key in drop)
    ]
    path = tmp_path / "e2e.properties"
    path.write_text("\n".join(lines) + "\n" + extra, encoding="utf-8")
    return path


def test_parse_properties_formats():
    text = """
# comment
! also a comment
lutece.base.url = http://localhost:8080/lutece
test.locale: fr-FR
test.forms.title="Forms Test integration"
test.admin.password='a=b:c'
not a property line
"""
    assert parse_properties(text) == {
        "lutece.base.url": "http://localhost:8080/lutece",
        "test.locale": "fr-FR",
        "test.forms.title": "Forms Test integration",
        "test.admin.password": "a=b:c",
    }


def test_env_name():
    assert env_name("lutece.base.url") == "LUTECE_BASE_URL"
    assert env_name("test.viewport-width") == "TEST_VIEWPORT_WIDTH"


def test_shipped_properties_load():
    settings = Settings(DEFAULT_PROPERTIES_FILE, environ={})

    assert settings.base_url == "http://localhost:8080/lutece"
    assert settings.viewport == {"width": 1920, "height": 1080}
    assert settings.locale == "fr-FR"
    assert settings.headless is True
    assert settings.workflow.task_type == "taskTypeComment"
    assert settings.forms.step_final == "Etape Final"
    assert settings.textlong.textarea_height == "500"
    assert settings.container.context_root == "/lutece"


def test_environment_overrides_properties(tmp_path):
    path = write_properties(tmp_path)

    settings = Settings(path, environ={
        "LUTECE_BASE_URL": "http://127.0.0.1:49153/lutece/",
        "TEST_HEADLESS": "false",
        "TEST_TIMEOUT": "5000",
    })

    assert settings.base_url == "http://127.0.0.1:49153/lutece"
    assert settings.headless is False
    assert settings.timeout_ms == 5000


def test_properties_file_from_environment(tmp_path):
    path = write_properties(tmp_path, extra="test.locale=en-GB\n")

    settings = Settings(environ={"LUTECE_E2E_PROPERTIES": str(path)})

    assert settings.properties_path == path
    assert settings.locale == "en-GB"


def test_missing_required_key_names_key_and_variable(tmp_path):
    path = write_properties(tmp_path, drop=("test.admin.password",))

    with pytest.raises(RuntimeError) as excinfo:
        Settings(path, environ={})

    message = str(excinfo.value)
    assert "test.admin.password" in message
    assert "TEST_ADMIN_PASSWORD" in message


def test_missing_optional_key_uses_default(tmp_path):
    path = write_properties(tmp_path, drop=("test.slowmo", "test.work.dir", "test.screenshots.path"))

    settings = Settings(path, environ={})

    assert settings.slow_mo_ms == 0
    assert str(settings.work_dir) == "target"
    assert settings.screenshots_dir == settings.work_dir / "screenshots"
    assert settings.auth_state_path == settings.work_dir / "auth-state.json"


def test_non_integer_value_is_rejected(tmp_path):
    path = write_properties(tmp_path)

    with pytest.raises(RuntimeError, match="test.timeout"):
        Settings(path, environ={"TEST_TIMEOUT": "soon"})


def test_run_suffix_is_last_five_digits_of_millis():
    assert generate_run_suffix(1_760_000_012_345) == "12345"
    assert generate_run_suffix(1_760_000_000_042) == "42"
    assert generate_run_suffix().isdigit()


def test_run_context_urls_and_suffixed_names():
    context = RunContext(
        run_suffix="12345",
        base_url="http://localhost:8080/lutece/",
        credentials=AdminCredentials("admin", "adminadmin"),
    )

    assert context.url("/jsp/admin/AdminMenu.jsp") == "http://localhost:8080/lutece/jsp/admin/AdminMenu.jsp"
    assert context.url("jsp/site/Portal.jsp") == "http://localhost:8080/lutece/jsp/site/Portal.jsp"
    assert context.suffixed("Workflow Test integration") == "Workflow Test integration 12345"


def test_credentials_repr_masks_password():
    credentials = AdminCredentials("admin", "adminadmin")

    assert "adminadmin" not in repr(credentials)
    assert "admin" in repr(credentials)


def test_container_image_only_required_in_containerized_mode(tmp_path):
    path = write_properties(tmp_path, drop=("lutece.image",))

    settings = Settings(path, environ={})
    assert settings.base_url == "http://localhost:8080/lutece"

    with pytest.raises(RuntimeError, match="LUTECE_IMAGE"):
        settings.container

    assert Settings(path, environ={"LUTECE_IMAGE": "lutece:test"}).container.image == "lutece:test"
