from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .net import is_port_listening
from .systemd import active_state

logger = logging.getLogger(__name__)


class ServiceNotReadyError(RuntimeError):
    def __init__(self, *, service: str, port: int, waited_s: float, last_state: str, listening: bool):
        super().__init__(
            f"{service} not ready after {waited_s:.0f}s "
            f"(systemctl is-active={last_state}, port {port} listening={listening})"
        )
        self.service = service
        self.port = port
        self.waited_s = waited_s
        self.last_state = last_state
        self.listening = listening


@dataclass(frozen=True)
class Readiness:
    state: str
    listening: bool
    waited_s: float

    @property
    def ready(self) -> bool:
        return self.state == "active" and self.listening


def wait_for_service(
    *,
    service: str,
    host: str,
    port: int,
    timeout_s: float,
    interval_s: float,
    probe_state: Callable[[str], str] = active_state,
    probe_port: Callable[[str, int], bool] = is_port_listening,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> Readiness:
    """Poll until the unit is active and the port accepts connections.

    Raises ServiceNotReadyError once timeout_s has elapsed.
    """

    start = clock()
    while True:
        state = probe_state(service)
        listening = probe_port(host, port)
        waited = clock() - start
        r = Readiness(state=state, listening=listening, waited_s=waited)
        if r.ready:
            logger.info("%s ready after %.0fs (port %s listening)", service, waited, port)
            return r

        if state == "failed":
            logger.error("%s entered failed state", service)
        if waited >= timeout_s:
            raise ServiceNotReadyError(
                service=service, port=port, waited_s=waited, last_state=state, listening=listening
            )

        logger.info("Waiting for %s (state=%s, port %s listening=%s)", service, state, port, listening)
        sleep(min(interval_s, max(timeout_s - waited, 0.0)))
