from __future__ import annotations

import logging
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def dnf_update(*, dry_run: bool = False) -> None:
    run_cmd(["dnf", "update", "-y"], dry_run=dry_run)


def dnf_install(packages: Sequence[str], *, check: bool = True, dry_run: bool = False) -> bool:
    """Install packages with dnf.

    With check=False a failed transaction is reported as False instead of raising.
    """
    if not packages:
        return True
    r = run_cmd(["dnf", "install", "-y", *packages], check=check, dry_run=dry_run)
    return r.ok


def rpm_import_key(url: str, *, dry_run: bool = False) -> bool:
    r = run_cmd(["rpm", "--import", url], check=False, dry_run=dry_run)
    if not r.ok:
        logger.warning("rpm --import failed for %s", url)
    return r.ok


def rpm_install_local(path: str, *, dry_run: bool = False) -> bool:
    """Install a downloaded .rpm directly, bypassing the repository."""

    r = run_cmd(["rpm", "-ivh", path], check=False, dry_run=dry_run)
    return r.ok
