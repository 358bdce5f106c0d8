"""
Journey 00: Container Setup (containerized mode only)

Starting the containers is done by the session fixture ``lutece_environment``;
this journey checks what it left behind before any browser phase runs:

1. Lutece and MariaDB containers are running
2. The mapped base URL is published to the environment
3. The HTTPS port is mapped as well
4. The login page passes the readiness check
"""
import os

import pytest

from lutece_e2e.containers import ReadinessProbe
from lutece_e2e.suites import CONTAINER_SETUP

pytestmark = pytest.mark.phase(CONTAINER_SETUP)


class TestContainerSetup:
    """Ephemeral Lutece environment is usable."""

    def test_01_containers_running(self, lutece_environment):
        assert lutece_environment is not None, "Container setup requires --suite container"
        assert lutece_environment.is_running(), "Lutece container is not running"
        assert lutece_environment.database is not None, "MariaDB container missing"

    def test_02_base_url_published(self, lutece_environment, run_context):
        descriptor = lutece_environment.descriptor
        print(f"[CONTAINER] {descriptor.image} -> {run_context.base_url}")

        assert os.environ.get("LUTECE_BASE_URL") == run_context.base_url
        assert lutece_environment.application.get_container_host_ip() in run_context.base_url
        assert f":{descriptor.mapped_http_port}{descriptor.context_root}" in run_context.base_url

    def test_03_secure_port_mapped(self, lutece_environment):
        secure_url = lutece_environment.application.secure_base_url

        assert secure_url.startswith("https://"), secure_url
        assert secure_url.endswith(lutece_environment.descriptor.context_root)
        assert secure_url != lutece_environment.base_url.replace("http://", "https://", 1)

    def test_04_application_ready(self, run_context):
        probe = ReadinessProbe(run_context.base_url)
        try:
            assert probe.check(), f"Login page not ready at {probe.url}"
        finally:
            probe.close()
