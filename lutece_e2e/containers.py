"""
Ephemeral Lutece environment for the containerized suite.

Starts a MariaDB container and a Lutece (Open Liberty) container on a private
Docker network, waits for Liberty to report the server as started, then polls
the login page until the application is really usable. Liberty opens its HTTP
port before the database migrations finish, so a bare HTTP 200 is not enough:
the login form markup has to be served as well.
"""

import atexit
import logging
import os
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

import httpx
from testcontainers.core.container import DockerContainer
from testcontainers.core.network import Network
from testcontainers.core.waiting_utils import wait_for_logs
from testcontainers.mysql import MySqlContainer

logger = logging.getLogger(__name__)

LOGIN_PATH = "/jsp/admin/AdminLogin.jsp"
READY_TOKENS = ("access_code", "AdminLogin", "password")

# Liberty: "CWWKF0011I: The server ... is ready to run a smarter planet."
STARTUP_LOG_MARKER = r".*CWWKF0011I.*"
STARTUP_TIMEOUT_S = 300
READINESS_TIMEOUT_S = 180
READINESS_INTERVAL_S = 5

DATABASE_IMAGE = "mariadb:10.11"


class ApplicationNotReadyError(RuntimeError):
    """Lutece did not serve its login page within the readiness window."""


def is_login_page_ready(status_code: int, body: str) -> bool:
    """HTTP 200 and the login form markup present in the body."""
    if status_code != 200:
        return False
    return any(token in body for token in READY_TOKENS)


class ReadinessProbe:
    """Polls the back-office login page of a Lutece instance."""

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.Client] = None,
        request_timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=request_timeout, follow_redirects=True, verify=False)

    @property
    def url(self) -> str:
        return f"{self.base_url}{LOGIN_PATH}"

    def check(self) -> bool:
        try:
            response = self._client.get(self.url)
        except httpx.HTTPError as exc:
            logger.debug(f"Readiness probe {self.url}: {exc.__class__.__name__}: {exc}")
            return False
        return is_login_page_ready(response.status_code, response.text)

    def wait_until_ready(
        self,
        timeout: float = READINESS_TIMEOUT_S,
        interval: float = READINESS_INTERVAL_S,
        describe_state: Callable[[], str] = lambda: "unknown",
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Block until ``check`` succeeds.

        Raises:
            ApplicationNotReadyError: after ``timeout`` seconds, with the URL and
                the container state in the message
        """
        deadline = clock() + timeout
        attempt = 0
        while True:
            attempt += 1
            if self.check():
                logger.info(f"Lutece ready at {self.base_url} (attempt {attempt})")
                return
            if clock() >= deadline:
                break
            logger.info(f"Waiting for Lutece at {self.url} (attempt {attempt})")
            sleep(interval)

        raise ApplicationNotReadyError(
            f"Lutece not ready after {timeout:.0f}s\n"
            f"URL: {self.url}\n"
            f"Container running: {describe_state()}"
        )

    def close(self) -> None:
        self._client.close()


@dataclass(frozen=True)
class ContainerDescriptor:
    """What to start; ``mapped_http_port`` is filled in once the app runs."""
    image: str
    context_root: str = "/lutece"
    database_alias: str = "mariadb"
    database_port: int = 3306
    database_name: str = "core"
    db_user: str = "lutece"
    db_password: str = "lutece"
    mapped_http_port: Optional[int] = None

    @classmethod
    def from_settings(cls, settings) -> "ContainerDescriptor":
        context_root = settings.container.context_root
        if not context_root.startswith("/"):
            context_root = "/" + context_root
        return cls(
            image=settings.container.image,
            context_root=context_root.rstrip("/"),
            db_password=settings.container.db_password,
        )


class LuteceContainer(DockerContainer):
    """Lutece on Open Liberty, configured to reach its database by alias."""

    HTTP_PORT = 9090
    HTTPS_PORT = 9443
    NETWORK_ALIAS = "lutece"

    def __init__(self, descriptor: ContainerDescriptor, network: Network):
        super().__init__(descriptor.image)
        self.descriptor = descriptor
        self.with_exposed_ports(self.HTTP_PORT, self.HTTPS_PORT)
        self.with_network(network)
        self.with_network_aliases(self.NETWORK_ALIAS)
        self.with_env("portal.serverName", descriptor.database_alias)
        self.with_env("portal.port", str(descriptor.database_port))
        self.with_env("portal.dbname", descriptor.database_name)
        self.with_env("portal.user", descriptor.db_user)
        self.with_env("portal.password", descriptor.db_password)

    def start(self) -> "LuteceContainer":
        super().start()
        wait_for_logs(self, STARTUP_LOG_MARKER, timeout=STARTUP_TIMEOUT_S)
        return self

    def _url(self, scheme: str, port: int) -> str:
        host = self.get_container_host_ip()
        mapped = self.get_exposed_port(port)
        return f"{scheme}://{host}:{mapped}{self.descriptor.context_root}"

    @property
    def base_url(self) -> str:
        return self._url("http", self.HTTP_PORT)

    @property
    def secure_base_url(self) -> str:
        return self._url("https", self.HTTPS_PORT)

    def is_running(self) -> bool:
        wrapped = self.get_wrapped_container()
        if wrapped is None:
            return False
        wrapped.reload()
        return wrapped.status == "running"

    def log_tail(self, lines: int = 40) -> str:
        stdout, stderr = self.get_logs()
        text = (stdout or b"").decode("utf-8", errors="replace") + (stderr or b"").decode("utf-8", errors="replace")
        return "\n".join(text.splitlines()[-lines:])


class LuteceEnvironment:
    """
    MariaDB + Lutece pair on one private network.

    Usage:
        with LuteceEnvironment(descriptor) as env:
            run(env.base_url)

    ``stop`` is idempotent, never raises, and is registered with ``atexit`` so
    an interrupted session still removes its containers.
    """

    def __init__(self, descriptor: ContainerDescriptor):
        self.descriptor = descriptor
        self.network: Optional[Network] = None
        self.database: Optional[MySqlContainer] = None
        self.application: Optional[LuteceContainer] = None
        self._base_url: Optional[str] = None
        self._stopped = False

    def __enter__(self) -> "LuteceEnvironment":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    @property
    def base_url(self) -> str:
        if not self._base_url:
            raise RuntimeError("Lutece environment not started")
        return self._base_url

    def start(self) -> str:
        """Start both containers and wait for readiness; returns the base URL."""
        atexit.register(self.stop)
        try:
            self.network = Network()
            self.network.create()

            logger.info(f"Starting {DATABASE_IMAGE} as '{self.descriptor.database_alias}'")
            self.database = MySqlContainer(
                image=DATABASE_IMAGE,
                username=self.descriptor.db_user,
                password=self.descriptor.db_password,
                dbname=self.descriptor.database_name,
            )
            self.database.with_network(self.network)
            self.database.with_network_aliases(self.descriptor.database_alias)
            self.database.start()

            logger.info(f"Starting {self.descriptor.image} (context root {self.descriptor.context_root})")
            self.application = LuteceContainer(self.descriptor, self.network).start()
            self.descriptor = replace(
                self.descriptor,
                mapped_http_port=int(self.application.get_exposed_port(LuteceContainer.HTTP_PORT)),
            )
            self._base_url = self.application.base_url

            probe = ReadinessProbe(self._base_url)
            try:
                probe.wait_until_ready(describe_state=self._describe_state)
            finally:
                probe.close()
        except ApplicationNotReadyError:
            if self.application is not None:
                logger.error(f"Last Lutece log lines:\n{self.application.log_tail()}")
            self.stop()
            raise
        except Exception:
            self.stop()
            raise

        os.environ["LUTECE_BASE_URL"] = self._base_url
        logger.info(f"Lutece available at {self._base_url}")
        return self._base_url

    def is_running(self) -> bool:
        return self.application is not None and self.application.is_running()

    def _describe_state(self) -> str:
        try:
            return str(self.is_running())
        except Exception as exc:
            return f"unknown ({exc})"

    def stop(self) -> None:
        """Stop Lutece, then MariaDB, then remove the network."""
        if self._stopped:
            return
        self._stopped = True

        for label, resource, release in (
            ("Lutece container", self.application, lambda r: r.stop()),
            ("MariaDB container", self.database, lambda r: r.stop()),
            ("network", self.network, lambda r: r.remove()),
        ):
            if resource is None:
                continue
            try:
                release(resource)
                logger.info(f"Stopped {label}")
            except Exception as exc:
                logger.error(f"Error stopping {label}: {exc}")
        self.application = None
        self.database = None
        self.network = None
