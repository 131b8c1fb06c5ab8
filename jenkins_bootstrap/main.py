from __future__ import annotations

import argparse
import logging
import os
from typing import Any, Dict, Optional

import requests
from rich.console import Console

from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import run_pipeline
from .provision_config import ProvisionConfig, load_provision_config
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    AddRepositoryStep,
    InstallJenkinsStep,
    InstallRuntimeStep,
    StartServiceStep,
    SummaryStep,
    UpdateSystemStep,
    WaitReadyStep,
    WriteSysconfigStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = "/var/lib/jenkins-bootstrap/state.json"


def build_steps(
    cfg: ProvisionConfig,
    *,
    session: Optional[requests.Session] = None,
    console: Optional[Console] = None,
):
    return [
        UpdateSystemStep(cfg),
        InstallRuntimeStep(cfg),
        AddRepositoryStep(cfg, session=session),
        InstallJenkinsStep(cfg, session=session),
        WriteSysconfigStep(cfg),
        StartServiceStep(cfg),
        WaitReadyStep(cfg),
        SummaryStep(cfg, session=session, console=console),
    ]


def ensure_root(cfg: ProvisionConfig) -> None:
    if cfg.dry_run:
        return
    if os.geteuid() != 0:
        raise RuntimeError("jenkins-bootstrap must run as root (use sudo), or pass --dry-run")


def run(
    *,
    cfg: ProvisionConfig,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    session: Optional[requests.Session] = None,
    console: Optional[Console] = None,
) -> Dict[str, Any]:
    """Run the bootstrap pipeline, persisting state for resume.

    Every failure is logged with its traceback before it propagates. A state
    file that could not be loaded is left untouched.
    """

    actual_log_path = configure_logging(log_path=log_path)

    state: Optional[Dict[str, Any]] = None
    try:
        state = ensure_defaults(load_state(state_path))
        paths = state.setdefault("execution", {}).setdefault("paths", {})
        paths["log_path_requested"] = log_path
        paths["log_path_actual"] = actual_log_path
        state["execution"]["dry_run"] = cfg.dry_run

        steps = build_steps(cfg, session=session or requests.Session(), console=console)

        ensure_root(cfg)
        result = run_pipeline(
            state=state,
            steps=steps,
            start_at=start_at,
            stop_after=stop_after,
            force=force,
        )
        state = result.state
        state.setdefault("execution", {}).setdefault("summary", {})["ran_steps"] = result.ran_steps
        state.setdefault("execution", {}).setdefault("summary", {})["skipped_steps"] = result.skipped_steps
        return state
    except Exception as e:
        logger.exception("Bootstrap failed")
        if state is not None:
            state.setdefault("execution", {}).setdefault("errors", []).append(
                {
                    "step": (state.get("execution") or {}).get("current_step"),
                    "error": str(e),
                }
            )
        raise
    finally:
        if state is None:
            logger.error("State not loaded; leaving %s as is", state_path)
        elif cfg.dry_run:
            logger.info("Dry run; state not saved to %s", state_path)
        else:
            try:
                save_state(state_path, state)
            except Exception:
                logger.exception("Could not save state to %s", state_path)
                raise


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="jenkins-bootstrap")
    p.add_argument("--config", default=None, help="Optional YAML provision config overriding the defaults")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to bootstrap state (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to bootstrap log")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 40_install_jenkins)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log)

    try:
        cfg = load_provision_config(args.config)
    except Exception:
        logger.exception("Invalid provision config %s", args.config)
        return 1
    if args.dry_run:
        cfg = cfg.with_dry_run(True)

    try:
        run(
            cfg=cfg,
            state_path=args.state,
            log_path=args.log,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=bool(args.force),
        )
    except Exception:
        # Already logged with traceback by run().
        return 1
    return 0
