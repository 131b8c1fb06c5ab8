from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import requests

from .dnf import rpm_import_key
from .download import download_file

logger = logging.getLogger(__name__)


def render_manual_descriptor(*, repo_id: str = "jenkins", name: str = "Jenkins-stable", baseurl: str) -> str:
    return "\n".join(
        [
            f"[{repo_id}]",
            f"name={name}",
            f"baseurl={baseurl}",
            "gpgcheck=1",
            "",
        ]
    )


def register_repository(
    *,
    descriptor_url: str,
    descriptor_path: str,
    baseurl: str,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
    dry_run: bool = False,
) -> str:
    """Install the .repo descriptor, writing it by hand if the remote copy is unreachable.

    Returns "remote" or "manual".
    """

    if dry_run:
        logger.info("Would fetch %s -> %s", descriptor_url, descriptor_path)
        return "remote"

    if download_file(descriptor_url, descriptor_path, session=session, timeout=timeout):
        logger.info("Repository descriptor added from %s", descriptor_url)
        return "remote"

    logger.warning("Repository descriptor unavailable at %s; writing %s manually", descriptor_url, descriptor_path)
    p = Path(descriptor_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(render_manual_descriptor(baseurl=baseurl), encoding="utf-8")
    return "manual"


def import_first_key(urls: Sequence[str], *, dry_run: bool = False) -> str:
    """Import the first GPG key URL that rpm accepts and return it.

    The candidates are not cross-checked against each other.
    """

    for url in urls:
        if rpm_import_key(url, dry_run=dry_run):
            return url
    raise RuntimeError(f"Could not import repository GPG key from any of: {', '.join(urls)}")
