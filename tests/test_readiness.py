"""Readiness probe for the containerized Lutece instance.

No Docker here: HTTP goes through ``httpx.MockTransport`` and time is faked.
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest

from lutece_e2e.containers import (
    ApplicationNotReadyError,
    ContainerDescriptor,
    LuteceEnvironment,
    ReadinessProbe,
    is_login_page_ready,
)

BASE_URL = "http://localhost:32768/lutece"
LOGIN_HTML = '<form action="jsp/admin/DoAdminLogin.jsp"><input name="access_code"></form>'


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def probe_with(responses):
    """Probe whose client answers with ``responses`` in order (last one repeats)."""
    queue = list(responses)
    seen = []

    def handler(request):
        seen.append(str(request.url))
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, Exception):
            raise answer
        status, body = answer
        return httpx.Response(status, text=body)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ReadinessProbe(BASE_URL, client=client), seen


@pytest.mark.parametrize(
    "status, body, expected",
    [
        (200, LOGIN_HTML, True),
        (200, "<title>AdminLogin</title>", True),
        (200, '<input type="password">', True),
        (200, "<h1>Welcome to Open Liberty</h1>", False),
        (503, LOGIN_HTML, False),
        (404, "Context Root Not Found", False),
    ],
)
def test_login_page_ready_requires_200_and_login_markup(status, body, expected):
    assert is_login_page_ready(status, body) is expected


def test_probe_targets_login_page():
    probe, seen = probe_with([(200, LOGIN_HTML)])

    assert probe.check()
    assert seen == [f"{BASE_URL}/jsp/admin/AdminLogin.jsp"]


def test_probe_treats_connection_errors_as_not_ready():
    probe, _ = probe_with([httpx.ConnectError("connection refused")])

    assert probe.check() is False


def test_wait_until_ready_polls_until_login_page_served():
    clock = FakeClock()
    probe, seen = probe_with([
        httpx.ConnectError("connection refused"),
        (200, "<h1>Welcome to Open Liberty</h1>"),
        (200, LOGIN_HTML),
    ])

    probe.wait_until_ready(timeout=60, interval=5, sleep=clock.sleep, clock=clock)

    assert len(seen) == 3
    assert clock.sleeps == [5, 5]


def test_wait_until_ready_times_out_with_url_and_state():
    clock = FakeClock()
    probe, seen = probe_with([(503, "")])

    with pytest.raises(ApplicationNotReadyError) as excinfo:
        probe.wait_until_ready(
            timeout=12,
            interval=5,
            describe_state=lambda: "False",
            sleep=clock.sleep,
            clock=clock,
        )

    message = str(excinfo.value)
    assert f"{BASE_URL}/jsp/admin/AdminLogin.jsp" in message
    assert "Container running: False" in message
    assert clock.sleeps == [5, 5, 5]
    assert len(seen) == 4


def test_descriptor_normalizes_context_root():
    settings = SimpleNamespace(
        container=SimpleNamespace(image="lutece:test", context_root="lutece/", db_password="secret")
    )

    descriptor = ContainerDescriptor.from_settings(settings)

    assert descriptor.context_root == "/lutece"
    assert descriptor.image == "lutece:test"
    assert descriptor.db_password == "secret"
    assert descriptor.mapped_http_port is None


def test_environment_stop_is_ordered_and_idempotent():
    calls = []
    env = LuteceEnvironment(ContainerDescriptor(image="lutece:test"))
    env.application = MagicMock()
    env.application.stop.side_effect = lambda: calls.append("lutece")
    env.database = MagicMock()
    env.database.stop.side_effect = lambda: calls.append("mariadb")
    env.network = MagicMock()
    env.network.remove.side_effect = lambda: calls.append("network")

    env.stop()
    env.stop()

    assert calls == ["lutece", "mariadb", "network"]
    assert env.application is None


def test_environment_stop_continues_after_a_failing_container():
    env = LuteceEnvironment(ContainerDescriptor(image="lutece:test"))
    env.application = MagicMock()
    env.application.stop.side_effect = RuntimeError("already gone")
    database = env.database = MagicMock()
    network = env.network = MagicMock()

    env.stop()

    database.stop.assert_called_once_with()
    network.remove.assert_called_once_with()


def test_base_url_before_start_is_an_error():
    env = LuteceEnvironment(ContainerDescriptor(image="lutece:test"))

    with pytest.raises(RuntimeError, match="not started"):
        env.base_url
