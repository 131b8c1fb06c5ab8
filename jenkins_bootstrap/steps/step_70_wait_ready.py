from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.readiness import ServiceNotReadyError, wait_for_service
from ..lib.systemd import status_text
from ..provision_config import ProvisionConfig
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class WaitReadyStep:
    step_id = "70_wait_ready"

    def __init__(self, cfg: ProvisionConfig):
        self.cfg = cfg

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = self.cfg
        if cfg.dry_run:
            logger.info("Would wait up to %ss for %s on port %s", cfg.readiness_timeout_s, cfg.service_name, cfg.jenkins_port)
            return state

        try:
            r = wait_for_service(
                service=cfg.service_name,
                host=cfg.readiness_host,
                port=cfg.jenkins_port,
                timeout_s=cfg.readiness_timeout_s,
                interval_s=cfg.readiness_interval_s,
            )
        except ServiceNotReadyError:
            logger.error("systemctl status:\n%s", status_text(cfg.service_name))
            raise

        logger.info("systemctl status:\n%s", status_text(cfg.service_name))
        record_decision(state, "ready_after_s", round(r.waited_s, 1))
        return state
