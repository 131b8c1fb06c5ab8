from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.dnf import dnf_update
from ..provision_config import ProvisionConfig

logger = logging.getLogger(__name__)


class UpdateSystemStep:
    step_id = "10_update_system"

    def __init__(self, cfg: ProvisionConfig):
        self.cfg = cfg

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        dnf_update(dry_run=self.cfg.dry_run)
        logger.info("System packages updated")
        return state
