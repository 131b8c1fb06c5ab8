from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 64


def download_file(
    url: str,
    dest: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = 30.0,
) -> bool:
    """Fetch url into dest.

    Any failure (DNS, timeout, HTTP error status) returns False and leaves no
    partial file behind.
    """

    http = session or requests.Session()
    p = Path(dest)
    logger.info("GET %s -> %s", url, str(p))
    try:
        with http.get(url, stream=True, timeout=timeout) as r:
            r.raise_for_status()
            p.parent.mkdir(parents=True, exist_ok=True)
            with p.open("wb") as f:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except (requests.RequestException, OSError) as e:
        logger.info("Download failed for %s: %s", url, e)
        p.unlink(missing_ok=True)
        return False
    return True
