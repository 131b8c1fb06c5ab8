from __future__ import annotations

import itertools
import subprocess
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

import pytest
import requests

from jenkins_bootstrap.lib import command
from jenkins_bootstrap.provision_config import ProvisionConfig


class FakeRunner:
    """Stands in for subprocess.run; every command succeeds unless a rule says otherwise."""

    def __init__(self):
        self.calls: List[List[str]] = []
        self._rules: List[Tuple[Tuple[str, ...], Iterator[int], str, str]] = []

    def on(
        self,
        prefix: Sequence[str],
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        returncodes: Optional[Sequence[int]] = None,
    ) -> "FakeRunner":
        """Later rules win. `returncodes` answers successive matching calls, then repeats the last one."""
        codes = list(returncodes) if returncodes else [returncode]
        seq = itertools.chain(codes, itertools.repeat(codes[-1]))
        self._rules.insert(0, (tuple(prefix), seq, stdout, stderr))
        return self

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        for prefix, seq, out, err in self._rules:
            if tuple(argv[: len(prefix)]) == prefix:
                return subprocess.CompletedProcess(argv, next(seq), out, err)
        return subprocess.CompletedProcess(argv, 0, "", "")

    def ran(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]


class FakeResponse:
    def __init__(self, url: str, status_code: int, body: bytes):
        self.url = url
        self.status_code = status_code
        self._body = body

    @property
    def text(self) -> str:
        return self._body.decode("utf-8")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} for {self.url}", response=None)

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self._body), chunk_size):
            yield self._body[i : i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


Route = Union[bytes, int, Exception]


class FakeSession:
    """Minimal requests.Session: unknown URLs are 404s."""

    def __init__(self, routes: Optional[Dict[str, Route]] = None, put_routes: Optional[Dict[str, Route]] = None):
        self.routes: Dict[str, Route] = dict(routes or {})
        self.put_routes: Dict[str, Route] = dict(put_routes or {})
        self.requests: List[Tuple[str, str, dict]] = []

    def _respond(self, table: Dict[str, Route], url: str) -> FakeResponse:
        route = table.get(url, 404)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, int):
            return FakeResponse(url, route, b"")
        return FakeResponse(url, 200, route)

    def get(self, url, **kwargs):
        self.requests.append(("GET", url, kwargs))
        return self._respond(self.routes, url)

    def put(self, url, **kwargs):
        self.requests.append(("PUT", url, kwargs))
        return self._respond(self.put_routes, url)

    def urls(self, method: str = "GET") -> List[str]:
        return [u for m, u, _ in self.requests if m == method]


@pytest.fixture
def runner(monkeypatch) -> FakeRunner:
    r = FakeRunner()
    monkeypatch.setattr(command.subprocess, "run", r)
    return r


@pytest.fixture
def cfg(tmp_path) -> ProvisionConfig:
    """Defaults, with every file the bootstrap writes redirected under tmp_path."""
    return ProvisionConfig(
        raw={
            "repository": {"descriptor_path": str(tmp_path / "yum.repos.d" / "jenkins.repo")},
            "fallback": {"work_dir": str(tmp_path / "work")},
            "jenkins": {
                "sysconfig_path": str(tmp_path / "sysconfig" / "jenkins"),
                "home": str(tmp_path / "jenkins-home"),
            },
            "readiness": {"timeout_s": 10, "interval_s": 1},
        }
    )
