from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.systemd import daemon_reload, enable_and_start
from ..provision_config import ProvisionConfig

logger = logging.getLogger(__name__)


class StartServiceStep:
    step_id = "60_start_service"

    def __init__(self, cfg: ProvisionConfig):
        self.cfg = cfg

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        daemon_reload(dry_run=self.cfg.dry_run)
        enable_and_start(self.cfg.service_name, dry_run=self.cfg.dry_run)
        logger.info("Service %s enabled and started", self.cfg.service_name)
        return state
