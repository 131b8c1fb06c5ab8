from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_FALLBACK_VERSIONS = ["2.462.3", "2.462.2", "2.462.1", "2.452.4", "2.452.3"]
DEFAULT_MIRRORS = [
    "https://pkg.jenkins.io/redhat-stable",
    "https://archives.jenkins.io/redhat-stable",
]
DEFAULT_GPG_KEY_URLS = [
    "https://pkg.jenkins.io/redhat-stable/jenkins.io-2023.key",
    "https://pkg.jenkins.io/redhat/jenkins.io-2023.key",
]


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"provision config: {name} must be a mapping")
    return value


def _str_list(value: Any, default: List[str], *, key: str) -> List[str]:
    if value is None:
        return list(default)
    if not isinstance(value, list):
        raise ValueError(f"provision config: {key} must be a list")
    return [str(v).strip() for v in value if str(v).strip()]


def _number(value: Any, default: float, *, key: str, minimum: float, exclusive: bool = False) -> float:
    """An explicit value is used as given (0 included) or rejected; only a missing key gets the default."""
    if value is None:
        return float(default)
    if isinstance(value, bool):
        raise ValueError(f"provision config: {key} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"provision config: {key} must be a number, got {value!r}") from e
    if number < minimum or (exclusive and number == minimum):
        bound = f"> {minimum:g}" if exclusive else f">= {minimum:g}"
        raise ValueError(f"provision config: {key} must be {bound}, got {value!r}")
    return number


@dataclass(frozen=True)
class ProvisionConfig:
    """Everything the bootstrap needs to know, passed explicitly to each step.

    Defaults reproduce a stock Amazon Linux 2023 Jenkins install. Any key can
    be overridden from YAML; unknown keys are ignored.
    """

    raw: Dict[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def dry_run(self) -> bool:
        return bool(self.raw.get("dry_run", False))

    def with_dry_run(self, dry_run: bool) -> "ProvisionConfig":
        return dataclasses.replace(self, raw={**self.raw, "dry_run": bool(dry_run)})

    # packages

    @property
    def runtime_packages(self) -> List[str]:
        return _str_list(
            _section(self.raw, "packages").get("runtime"),
            ["java-17-amazon-corretto-devel", "git"],
            key="packages.runtime",
        )

    @property
    def tool_packages(self) -> List[str]:
        return _str_list(_section(self.raw, "packages").get("tools"), ["wget", "fontconfig"], key="packages.tools")

    @property
    def jenkins_package(self) -> str:
        return str(_section(self.raw, "packages").get("jenkins") or "jenkins")

    # repository

    @property
    def descriptor_url(self) -> str:
        return str(
            _section(self.raw, "repository").get("descriptor_url")
            or "https://pkg.jenkins.io/redhat-stable/jenkins.repo"
        )

    @property
    def descriptor_path(self) -> str:
        return str(_section(self.raw, "repository").get("descriptor_path") or "/etc/yum.repos.d/jenkins.repo")

    @property
    def repo_baseurl(self) -> str:
        return str(_section(self.raw, "repository").get("baseurl") or "https://pkg.jenkins.io/redhat-stable")

    @property
    def gpg_key_urls(self) -> List[str]:
        return _str_list(
            _section(self.raw, "repository").get("gpg_key_urls"),
            DEFAULT_GPG_KEY_URLS,
            key="repository.gpg_key_urls",
        )

    # fallback

    @property
    def fallback_versions(self) -> List[str]:
        return _str_list(
            _section(self.raw, "fallback").get("versions"),
            DEFAULT_FALLBACK_VERSIONS,
            key="fallback.versions",
        )

    @property
    def fallback_mirrors(self) -> List[str]:
        return _str_list(_section(self.raw, "fallback").get("mirrors"), DEFAULT_MIRRORS, key="fallback.mirrors")

    @property
    def rpm_release(self) -> str:
        return str(_section(self.raw, "fallback").get("rpm_release") or "1.1")

    @property
    def work_dir(self) -> str:
        return str(_section(self.raw, "fallback").get("work_dir") or "/tmp")

    # jenkins

    @property
    def java_options(self) -> str:
        return str(
            _section(self.raw, "jenkins").get("java_options")
            or "-Djava.awt.headless=true -Xms512m -Xmx1024m"
        )

    @property
    def jenkins_user(self) -> str:
        return str(_section(self.raw, "jenkins").get("user") or "jenkins")

    @property
    def jenkins_port(self) -> int:
        port = _number(_section(self.raw, "jenkins").get("port"), 8080, key="jenkins.port", minimum=1)
        if port > 65535 or not port.is_integer():
            raise ValueError(f"provision config: jenkins.port must be an integer in 1-65535, got {port:g}")
        return int(port)

    @property
    def jenkins_home(self) -> str:
        return str(_section(self.raw, "jenkins").get("home") or "/var/lib/jenkins")

    @property
    def java_cmd(self) -> str:
        return str(_section(self.raw, "jenkins").get("java_cmd") or "/usr/bin/java")

    @property
    def sysconfig_path(self) -> str:
        return str(_section(self.raw, "jenkins").get("sysconfig_path") or "/etc/sysconfig/jenkins")

    @property
    def service_name(self) -> str:
        return str(_section(self.raw, "jenkins").get("service") or "jenkins")

    @property
    def jenkins_log_path(self) -> str:
        return str(_section(self.raw, "jenkins").get("log_path") or "/var/log/jenkins/jenkins.log")

    @property
    def admin_password_path(self) -> str:
        return str(Path(self.jenkins_home) / "secrets" / "initialAdminPassword")

    # readiness

    @property
    def readiness_timeout_s(self) -> float:
        return _number(_section(self.raw, "readiness").get("timeout_s"), 180, key="readiness.timeout_s", minimum=0)

    @property
    def readiness_interval_s(self) -> float:
        return _number(
            _section(self.raw, "readiness").get("interval_s"), 5, key="readiness.interval_s", minimum=0, exclusive=True
        )

    @property
    def readiness_host(self) -> str:
        return str(_section(self.raw, "readiness").get("host") or "127.0.0.1")

    # metadata service / http

    @property
    def metadata_base_url(self) -> str:
        return str(_section(self.raw, "metadata").get("base_url") or "http://169.254.169.254").rstrip("/")

    @property
    def metadata_timeout_s(self) -> float:
        return _number(
            _section(self.raw, "metadata").get("timeout_s"), 2, key="metadata.timeout_s", minimum=0, exclusive=True
        )

    @property
    def http_timeout_s(self) -> float:
        return _number(_section(self.raw, "http").get("timeout_s"), 30, key="http.timeout_s", minimum=0, exclusive=True)


def load_provision_config(path: Optional[str] = None) -> ProvisionConfig:
    """Load a YAML provision config; no path means all defaults."""

    if path is None:
        return ProvisionConfig()

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("provision config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p.name} must contain a mapping/object")

    return ProvisionConfig(raw=raw)
