from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..provision_config import ProvisionConfig

logger = logging.getLogger(__name__)


def render_sysconfig(cfg: ProvisionConfig) -> str:
    return "\n".join(
        [
            "# Jenkins configuration file",
            "",
            "# Java options",
            f'JENKINS_JAVA_OPTIONS="{cfg.java_options}"',
            "",
            "# Jenkins user",
            f'JENKINS_USER="{cfg.jenkins_user}"',
            "",
            "# Jenkins port (default 8080)",
            f'JENKINS_PORT="{cfg.jenkins_port}"',
            "",
            "# Jenkins home directory",
            f'JENKINS_HOME="{cfg.jenkins_home}"',
            "",
            "# Java command",
            f'JAVA_CMD="{cfg.java_cmd}"',
            "",
        ]
    )


class WriteSysconfigStep:
    step_id = "50_write_sysconfig"

    def __init__(self, cfg: ProvisionConfig):
        self.cfg = cfg

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        p = Path(self.cfg.sysconfig_path)
        contents = render_sysconfig(self.cfg)
        if self.cfg.dry_run:
            logger.info("Would write %s", str(p))
            return state

        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(contents, encoding="utf-8")
        logger.info("Wrote %s (port=%s home=%s)", str(p), self.cfg.jenkins_port, self.cfg.jenkins_home)
        return state
