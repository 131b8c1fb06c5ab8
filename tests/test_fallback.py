from __future__ import annotations

from pathlib import Path

import pytest

from jenkins_bootstrap.lib.fallback import (
    DOWNLOAD_FAILED,
    INSTALL_FAILED,
    INSTALLED,
    candidate_pairs,
    install_with_fallback,
    rpm_artifact_name,
)

M1 = "https://mirror-one.example/redhat-stable"
M2 = "https://mirror-two.example/redhat-stable"


class Mirrors:
    """Fake fetch/install pair backed by a set of URLs that exist."""

    def __init__(self, available=(), broken=()):
        self.available = set(available)
        self.broken = set(broken)
        self.fetched = []
        self.installed = []

    def fetch(self, url: str, dest: str) -> bool:
        self.fetched.append(url)
        if url not in self.available:
            return False
        Path(dest).parent.mkdir(parents=True, exist_ok=True)
        Path(dest).write_bytes(b"rpm")
        return True

    def install(self, path: str) -> bool:
        self.installed.append(path)
        return Path(path).name not in self.broken


def _url(mirror: str, version: str) -> str:
    return f"{mirror}/{rpm_artifact_name(version)}"


def test_artifact_name():
    assert rpm_artifact_name("2.462.3") == "jenkins-2.462.3-1.1.noarch.rpm"
    assert rpm_artifact_name("2.1", package="foo", release="2") == "foo-2.1-2.noarch.rpm"


def test_pairs_are_candidate_major():
    assert list(candidate_pairs(["a", "b"], ["m1", "m2"])) == [
        ("a", "m1"),
        ("a", "m2"),
        ("b", "m1"),
        ("b", "m2"),
    ]


@pytest.mark.parametrize("k", [0, 2, 4])
def test_first_mirror_success_short_circuits(tmp_path, k):
    versions = ["2.462.3", "2.462.2", "2.462.1", "2.452.4", "2.452.3"]
    m = Mirrors(available={_url(M1, versions[k])})

    result = install_with_fallback(
        versions=versions, mirrors=[M1, M2], work_dir=str(tmp_path), fetch=m.fetch, install=m.install
    )

    assert result.installed
    assert result.version == versions[k]
    assert result.mirror == M1
    assert m.fetched[-1] == _url(M1, versions[k])
    assert len(m.fetched) == 2 * k + 1
    assert [a.outcome for a in result.attempts][-1] == INSTALLED


def test_second_mirror_wins_and_older_partial_is_discarded(tmp_path):
    m = Mirrors(available={_url(M2, "2.462.2")})

    result = install_with_fallback(
        versions=["2.462.3", "2.462.2"], mirrors=[M1, M2], work_dir=str(tmp_path), fetch=m.fetch, install=m.install
    )

    assert result.installed
    assert (result.version, result.mirror) == ("2.462.2", M2)
    assert [a.outcome for a in result.attempts] == [DOWNLOAD_FAILED, DOWNLOAD_FAILED, DOWNLOAD_FAILED, INSTALLED]
    assert not (tmp_path / rpm_artifact_name("2.462.3")).exists()
    assert (tmp_path / rpm_artifact_name("2.462.2")).exists()


def test_stale_partial_from_previous_candidate_is_removed(tmp_path):
    # A leftover from an interrupted earlier attempt is swept when moving on.
    (tmp_path / rpm_artifact_name("2.462.3")).write_bytes(b"partial")
    m = Mirrors(available={_url(M1, "2.462.2")})

    result = install_with_fallback(
        versions=["2.462.3", "2.462.2"], mirrors=[M1, M2], work_dir=str(tmp_path), fetch=m.fetch, install=m.install
    )

    assert result.version == "2.462.2"
    assert not (tmp_path / rpm_artifact_name("2.462.3")).exists()


def test_install_failure_falls_through_to_next_mirror(tmp_path):
    name = rpm_artifact_name("2.462.3")
    m = Mirrors(available={_url(M1, "2.462.3"), _url(M2, "2.462.3")})
    calls = {"n": 0}

    def install(path: str) -> bool:
        calls["n"] += 1
        return calls["n"] > 1

    result = install_with_fallback(
        versions=["2.462.3"], mirrors=[M1, M2], work_dir=str(tmp_path), fetch=m.fetch, install=install
    )

    assert (result.version, result.mirror) == ("2.462.3", M2)
    assert [a.outcome for a in result.attempts] == [INSTALL_FAILED, INSTALLED]
    assert (tmp_path / name).exists()


def test_exhausted_scan_fails_and_leaves_nothing_on_disk(tmp_path):
    versions = ["2.462.3", "2.462.2"]
    # Downloadable but never installable, so files do land on disk mid-scan.
    m = Mirrors(
        available={_url(mi, v) for mi in (M1, M2) for v in versions},
        broken={rpm_artifact_name(v) for v in versions},
    )

    result = install_with_fallback(
        versions=versions, mirrors=[M1, M2], work_dir=str(tmp_path), fetch=m.fetch, install=m.install
    )

    assert not result.installed
    assert result.version is None and result.mirror is None
    assert len(result.attempts) == 4
    assert all(a.outcome == INSTALL_FAILED for a in result.attempts)
    assert list(tmp_path.glob("*.rpm")) == []


def test_empty_candidate_list_is_a_failure(tmp_path):
    m = Mirrors()
    result = install_with_fallback(versions=[], mirrors=[M1, M2], work_dir=str(tmp_path), fetch=m.fetch, install=m.install)
    assert not result.installed
    assert result.attempts == []
    assert m.fetched == []
