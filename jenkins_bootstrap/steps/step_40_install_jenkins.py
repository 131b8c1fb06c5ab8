from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..lib.dnf import dnf_install, rpm_install_local
from ..lib.download import download_file
from ..lib.fallback import FallbackExhaustedError, install_with_fallback, rpm_artifact_name
from ..provision_config import ProvisionConfig
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class InstallJenkinsStep:
    step_id = "40_install_jenkins"

    def __init__(self, cfg: ProvisionConfig, *, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.session = session

    def _fetch(self, url: str, dest: str) -> bool:
        return download_file(url, dest, session=self.session, timeout=self.cfg.http_timeout_s)

    def _install(self, path: str) -> bool:
        return rpm_install_local(path, dry_run=self.cfg.dry_run)

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = self.cfg
        package = cfg.jenkins_package

        if dnf_install([package], check=False, dry_run=cfg.dry_run):
            record_decision(state, "jenkins_install", {"method": "dnf"})
            logger.info("%s installed via dnf", package)
            return state

        logger.warning("dnf install %s failed; trying direct RPM download", package)
        result = install_with_fallback(
            versions=cfg.fallback_versions,
            mirrors=cfg.fallback_mirrors,
            work_dir=cfg.work_dir,
            fetch=self._fetch,
            install=self._install,
            artifact_name=lambda v: rpm_artifact_name(v, package=package, release=cfg.rpm_release),
            cleanup_glob=f"{package}-*.rpm",
        )
        if not result.installed:
            raise FallbackExhaustedError(result.attempts)

        record_decision(
            state,
            "jenkins_install",
            {
                "method": "rpm",
                "version": result.version,
                "mirror": result.mirror,
                "attempts": len(result.attempts),
            },
        )
        return state
