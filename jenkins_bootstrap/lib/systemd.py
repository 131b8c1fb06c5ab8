from __future__ import annotations

import logging

from .command import run_cmd

logger = logging.getLogger(__name__)


def daemon_reload(*, dry_run: bool = False) -> None:
    run_cmd(["systemctl", "daemon-reload"], dry_run=dry_run)


def enable_and_start(service: str, *, dry_run: bool = False) -> None:
    run_cmd(["systemctl", "enable", service], dry_run=dry_run)
    run_cmd(["systemctl", "start", service], dry_run=dry_run)


def active_state(service: str, *, dry_run: bool = False) -> str:
    """Return the `systemctl is-active` word (active, activating, failed, ...)."""

    if dry_run:
        return "active"
    r = run_cmd(["systemctl", "is-active", service], check=False)
    return r.stdout.strip() or "unknown"


def status_text(service: str, *, dry_run: bool = False) -> str:
    r = run_cmd(["systemctl", "status", service, "--no-pager"], check=False, dry_run=dry_run)
    return r.stdout
