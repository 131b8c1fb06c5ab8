"""Install a pinned artifact by scanning (candidate, mirror) pairs in order.

Candidates are tried top-to-bottom, and for each candidate every mirror in
order. The first pair whose artifact downloads *and* installs wins; nothing
after it is attempted. Download errors of any kind count as "not available".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DOWNLOAD_FAILED = "download_failed"
INSTALL_FAILED = "install_failed"
INSTALLED = "installed"

# fetch(url, dest) -> fetched?; install(path) -> installed?
Fetcher = Callable[[str, str], bool]
Installer = Callable[[str], bool]


class FallbackExhaustedError(RuntimeError):
    def __init__(self, attempts: Sequence["FallbackAttempt"]):
        tried = sorted({a.version for a in attempts})
        super().__init__(
            f"Could not install from any source ({len(attempts)} attempts; versions tried: {', '.join(tried) or 'none'})"
        )
        self.attempts = list(attempts)


@dataclass(frozen=True)
class FallbackAttempt:
    version: str
    mirror: str
    url: str
    outcome: str


@dataclass(frozen=True)
class FallbackResult:
    version: Optional[str]
    mirror: Optional[str]
    attempts: List[FallbackAttempt] = field(default_factory=list)

    @property
    def installed(self) -> bool:
        return self.version is not None


def rpm_artifact_name(version: str, *, package: str = "jenkins", release: str = "1.1") -> str:
    return f"{package}-{version}-{release}.noarch.rpm"


def candidate_pairs(versions: Sequence[str], mirrors: Sequence[str]) -> Iterator[Tuple[str, str]]:
    for version in versions:
        for mirror in mirrors:
            yield version, mirror


def _discard(path: Path) -> None:
    if path.exists():
        logger.info("Discarding %s", str(path))
        path.unlink()


def install_with_fallback(
    *,
    versions: Sequence[str],
    mirrors: Sequence[str],
    work_dir: str,
    fetch: Fetcher,
    install: Installer,
    artifact_name: Callable[[str], str] = rpm_artifact_name,
    cleanup_glob: str = "jenkins-*.rpm",
) -> FallbackResult:
    """Linear scan with short-circuit on first success.

    Never raises for an unavailable candidate; an exhausted scan returns a
    result with installed=False and leaves no artifact in work_dir.
    """

    wd = Path(work_dir)
    attempts: List[FallbackAttempt] = []
    current: Optional[str] = None

    for version, mirror in candidate_pairs(versions, mirrors):
        if version != current:
            if current is not None:
                for stale in wd.glob(cleanup_glob):
                    _discard(stale)
            current = version
            logger.info("Trying version %s", version)

        name = artifact_name(version)
        url = f"{mirror.rstrip('/')}/{name}"
        dest = wd / name

        if not fetch(url, str(dest)):
            attempts.append(FallbackAttempt(version, mirror, url, DOWNLOAD_FAILED))
            _discard(dest)
            continue

        if install(str(dest)):
            attempts.append(FallbackAttempt(version, mirror, url, INSTALLED))
            logger.info("Installed %s from %s", version, mirror)
            return FallbackResult(version=version, mirror=mirror, attempts=attempts)

        attempts.append(FallbackAttempt(version, mirror, url, INSTALL_FAILED))
        _discard(dest)

    if wd.exists():
        for stale in wd.glob(cleanup_glob):
            _discard(stale)

    logger.error("No candidate installed (%d attempts)", len(attempts))
    return FallbackResult(version=None, mirror=None, attempts=attempts)
