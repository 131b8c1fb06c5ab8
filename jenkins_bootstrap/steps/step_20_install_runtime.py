from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.command import run_cmd
from ..lib.dnf import dnf_install
from ..provision_config import ProvisionConfig
from ..state_store import record_decision

logger = logging.getLogger(__name__)


def _first_line(text: str) -> str:
    return next((line.strip() for line in text.splitlines() if line.strip()), "")


class InstallRuntimeStep:
    """Java, git and the small tools Jenkins expects (fonts for headless AWT)."""

    step_id = "20_install_runtime"

    def __init__(self, cfg: ProvisionConfig):
        self.cfg = cfg

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        dry_run = self.cfg.dry_run

        for pkg in self.cfg.runtime_packages:
            dnf_install([pkg], dry_run=dry_run)
        dnf_install(self.cfg.tool_packages, dry_run=dry_run)

        # java prints its version banner on stderr.
        java = run_cmd(["java", "-version"], dry_run=dry_run)
        git = run_cmd(["git", "--version"], dry_run=dry_run)

        record_decision(state, "java_version", _first_line(java.stderr or java.stdout))
        record_decision(state, "git_version", _first_line(git.stdout))
        logger.info("Runtime installed: %s", ", ".join(self.cfg.runtime_packages + self.cfg.tool_packages))
        return state
