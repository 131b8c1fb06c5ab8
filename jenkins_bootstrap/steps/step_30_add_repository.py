from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..lib.yum_repo import import_first_key, register_repository
from ..provision_config import ProvisionConfig
from ..state_store import record_decision, record_warning

logger = logging.getLogger(__name__)


class AddRepositoryStep:
    step_id = "30_add_repository"

    def __init__(self, cfg: ProvisionConfig, *, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.session = session

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = self.cfg

        source = register_repository(
            descriptor_url=cfg.descriptor_url,
            descriptor_path=cfg.descriptor_path,
            baseurl=cfg.repo_baseurl,
            session=self.session,
            timeout=cfg.http_timeout_s,
            dry_run=cfg.dry_run,
        )
        record_decision(state, "repository_descriptor", source)
        if source == "manual":
            record_warning(state, {"repository": "descriptor_unreachable", "url": cfg.descriptor_url})

        key_urls = cfg.gpg_key_urls
        key_url = import_first_key(key_urls, dry_run=cfg.dry_run)
        record_decision(state, "gpg_key_url", key_url)
        if key_urls and key_url != key_urls[0]:
            # Same trust as the primary key; nothing checks the material matches.
            logger.warning("Imported repository key from alternative URL %s", key_url)
            record_warning(state, {"gpg_key": "alternative_url_used", "url": key_url})

        logger.info("Repository registered (descriptor=%s key=%s)", source, key_url)
        return state
