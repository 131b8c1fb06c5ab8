from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests
from rich.console import Console

from ..lib.net import public_ipv4
from ..provision_config import ProvisionConfig

logger = logging.getLogger(__name__)

IP_PLACEHOLDER = "<instance-public-ip>"

Section = Tuple[str, List[str]]


@dataclass(frozen=True)
class SummaryFacts:
    public_ip: Optional[str]
    admin_password: Optional[str]
    java_version: str
    git_version: str


def read_admin_password(path: str) -> Optional[str]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return text or None


def build_summary(cfg: ProvisionConfig, facts: SummaryFacts) -> List[Section]:
    """Operator-facing report: where Jenkins is, how to log in, how to debug it."""

    home = cfg.jenkins_home
    port = cfg.jenkins_port
    svc = cfg.service_name
    url = f"http://{facts.public_ip or IP_PLACEHOLDER}:{port}"
    pw_path = cfg.admin_password_path

    if facts.admin_password:
        password = [
            facts.admin_password,
            "Save this password, it is needed for the first login.",
        ]
    else:
        password = [
            "Initial password not available yet.",
            "Wait 1-2 minutes, then retrieve it with:",
            f"  sudo cat {pw_path}",
        ]

    return [
        (
            "Jenkins Details",
            [
                f"Installation Path: {home}",
                f"Port: {port}",
                f"Service User: {cfg.jenkins_user}",
            ],
        ),
        ("Web Access", [f"Jenkins URL: {url}"]),
        ("Initial Admin Password", password),
        ("Versions", [f"Java: {facts.java_version or 'unknown'}", f"Git: {facts.git_version or 'unknown'}"]),
        (
            "AWS Security Group",
            [
                "Make sure your Security Group allows inbound traffic on:",
                f"  - Port {port} (TCP) from your IP or 0.0.0.0/0",
            ],
        ),
        (
            "First Time Setup",
            [
                f"1. Open: {url}",
                "2. Enter the Initial Admin Password shown above",
                "3. Click 'Install suggested plugins'",
                "4. Create your first admin user",
                "5. Start using Jenkins!",
            ],
        ),
        (
            "Useful Commands",
            [
                f"Check status:        sudo systemctl status {svc}",
                f"Stop Jenkins:        sudo systemctl stop {svc}",
                f"Start Jenkins:       sudo systemctl start {svc}",
                f"Restart Jenkins:     sudo systemctl restart {svc}",
                f"View logs:           sudo tail -f {cfg.jenkins_log_path}",
                f"Get admin password:  sudo cat {pw_path}",
            ],
        ),
        (
            "Jenkins Home Directory",
            [
                f"Jobs:        {home}/jobs/",
                f"Plugins:     {home}/plugins/",
                f"Workspace:   {home}/workspace/",
                f"Config:      {home}/config.xml",
            ],
        ),
        (
            "Performance Tips for t2.micro/t3.micro",
            [
                "- Jenkins may take 2-3 minutes to fully start on micro instances",
                "- Limit concurrent builds to 1-2",
                "- Use lightweight plugins only",
                "- Monitor memory with: free -h",
            ],
        ),
        (
            "Troubleshooting",
            [
                "If Jenkins won't start:",
                f"  1. Check logs: sudo journalctl -u {svc} -n 100 --no-pager",
                "  2. Check Java: java -version",
                "  3. Check memory: free -h",
                f"  4. Restart: sudo systemctl restart {svc}",
                "If you can't access the Jenkins UI:",
                f"  1. Verify port {port}: sudo ss -tulpn | grep {port}",
                f"  2. Check the Security Group has port {port} open",
                "  3. Check firewall: sudo firewall-cmd --list-all",
            ],
        ),
    ]


def print_summary(sections: List[Section], console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print("\n[bold green]Installation Complete![/bold green]")
    for title, lines in sections:
        console.print(f"\n[bold cyan]{title}[/bold cyan]")
        for line in lines:
            console.print(line, markup=False, highlight=False)


class SummaryStep:
    step_id = "90_summary"

    def __init__(
        self,
        cfg: ProvisionConfig,
        *,
        session: Optional[requests.Session] = None,
        console: Optional[Console] = None,
    ):
        self.cfg = cfg
        self.session = session
        self.console = console

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = self.cfg
        decisions = (state.get("execution") or {}).get("decisions") or {}

        public_ip = None
        if not cfg.dry_run:
            public_ip = public_ipv4(cfg.metadata_base_url, session=self.session, timeout=cfg.metadata_timeout_s)
        if public_ip is None:
            logger.info("Public IP unknown; summary uses a placeholder")

        facts = SummaryFacts(
            public_ip=public_ip,
            admin_password=read_admin_password(cfg.admin_password_path),
            java_version=str(decisions.get("java_version") or ""),
            git_version=str(decisions.get("git_version") or ""),
        )
        print_summary(build_summary(cfg, facts), self.console)
        logger.info("Jenkins URL: http://%s:%s", public_ip or IP_PLACEHOLDER, cfg.jenkins_port)
        return state
