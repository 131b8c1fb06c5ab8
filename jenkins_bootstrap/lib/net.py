from __future__ import annotations

import logging
import socket
from typing import Optional

import requests

logger = logging.getLogger(__name__)

IMDS_TOKEN_TTL_S = "60"


def is_port_listening(host: str, port: int, *, timeout: float = 1.0) -> bool:
    """Best-effort TCP connect check."""

    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def public_ipv4(
    base_url: str = "http://169.254.169.254",
    *,
    session: Optional[requests.Session] = None,
    timeout: float = 2.0,
) -> Optional[str]:
    """Ask the EC2 metadata service for the instance's public IPv4.

    Tries an IMDSv2 session token first and falls back to a plain IMDSv1
    request. Returns None when the address is unknown (not on EC2, no public
    IP, metadata blocked).
    """

    http = session or requests.Session()
    headers = {}
    try:
        r = http.put(
            f"{base_url}/latest/api/token",
            headers={"X-aws-ec2-metadata-token-ttl-seconds": IMDS_TOKEN_TTL_S},
            timeout=timeout,
        )
        if r.status_code == 200 and r.text.strip():
            headers["X-aws-ec2-metadata-token"] = r.text.strip()
    except requests.RequestException as e:
        logger.info("IMDSv2 token unavailable: %s", e)

    try:
        r = http.get(f"{base_url}/latest/meta-data/public-ipv4", headers=headers, timeout=timeout)
    except requests.RequestException as e:
        logger.info("Metadata service unreachable: %s", e)
        return None

    if r.status_code != 200:
        logger.info("Metadata service returned %s for public-ipv4", r.status_code)
        return None
    return r.text.strip() or None
