from __future__ import annotations

from pathlib import Path

import pytest

from jenkins_bootstrap.lib.fallback import FallbackExhaustedError
from jenkins_bootstrap.provision_config import ProvisionConfig
from jenkins_bootstrap.state_store import ensure_defaults
from jenkins_bootstrap.steps import InstallJenkinsStep
from tests.conftest import FakeSession

M1 = "https://pkg.jenkins.io/redhat-stable"
M2 = "https://archives.jenkins.io/redhat-stable"


def _cfg(cfg: ProvisionConfig, versions) -> ProvisionConfig:
    raw = dict(cfg.raw)
    raw["fallback"] = {**raw["fallback"], "versions": list(versions)}
    return ProvisionConfig(raw=raw)


def test_dnf_success_skips_fallback(cfg, runner):
    session = FakeSession()
    state = InstallJenkinsStep(cfg, session=session).run(ensure_defaults({}))

    assert runner.ran("dnf", "install") == [["dnf", "install", "-y", "jenkins"]]
    assert runner.ran("rpm", "-ivh") == []
    assert session.requests == []
    assert state["execution"]["decisions"]["jenkins_install"] == {"method": "dnf"}


def test_falls_back_to_second_mirror(cfg, runner):
    runner.on(["dnf", "install", "-y", "jenkins"], returncode=1)
    cfg = _cfg(cfg, ["2.462.3", "2.462.2"])
    session = FakeSession({f"{M2}/jenkins-2.462.2-1.1.noarch.rpm": b"rpm-bytes"})

    state = InstallJenkinsStep(cfg, session=session).run(ensure_defaults({}))

    assert session.urls() == [
        f"{M1}/jenkins-2.462.3-1.1.noarch.rpm",
        f"{M2}/jenkins-2.462.3-1.1.noarch.rpm",
        f"{M1}/jenkins-2.462.2-1.1.noarch.rpm",
        f"{M2}/jenkins-2.462.2-1.1.noarch.rpm",
    ]
    work = Path(cfg.work_dir)
    assert runner.ran("rpm", "-ivh") == [["rpm", "-ivh", str(work / "jenkins-2.462.2-1.1.noarch.rpm")]]
    assert not (work / "jenkins-2.462.3-1.1.noarch.rpm").exists()
    decision = state["execution"]["decisions"]["jenkins_install"]
    assert decision["method"] == "rpm"
    assert decision["version"] == "2.462.2"
    assert decision["mirror"] == M2
    assert decision["attempts"] == 4


def test_rpm_failure_tries_next_mirror(cfg, runner):
    runner.on(["dnf", "install", "-y", "jenkins"], returncode=1)
    # First rpm -ivh fails (e.g. corrupt download), second succeeds.
    runner.on(["rpm", "-ivh"], returncodes=[1, 0])
    cfg = _cfg(cfg, ["2.462.3"])
    work = Path(cfg.work_dir)
    session = FakeSession(
        {
            f"{M1}/jenkins-2.462.3-1.1.noarch.rpm": b"bad",
            f"{M2}/jenkins-2.462.3-1.1.noarch.rpm": b"good",
        }
    )

    state = InstallJenkinsStep(cfg, session=session).run(ensure_defaults({}))

    assert state["execution"]["decisions"]["jenkins_install"]["mirror"] == M2
    assert len(runner.ran("rpm", "-ivh")) == 2
    assert (work / "jenkins-2.462.3-1.1.noarch.rpm").read_bytes() == b"good"


def test_every_source_failing_raises(cfg, runner):
    runner.on(["dnf", "install", "-y", "jenkins"], returncode=1)
    cfg = _cfg(cfg, ["2.462.3", "2.462.2"])

    with pytest.raises(FallbackExhaustedError) as exc:
        InstallJenkinsStep(cfg, session=FakeSession()).run(ensure_defaults({}))

    assert len(exc.value.attempts) == 4
    assert "Could not install" in str(exc.value)
    work = Path(cfg.work_dir)
    assert not work.exists() or list(work.glob("*.rpm")) == []
