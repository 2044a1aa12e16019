#!/usr/bin/env python3
"""
KUBESYNC CONFIGURATION
----------------------
Loads sync repository options from a YAML file and the environment.

    sync:
      repo:
        owner: acme
        repo: k8s-specs
        url: https://github.com/acme/k8s-specs.git
        branch: main
      credentials:
        token: ghp_...
      secretKey: correct horse battery staple
      orderedFileNames: false

Environment variables override the file: KUBESYNC_SYNC_REPO_URL,
KUBESYNC_SYNC_BRANCH, KUBESYNC_SYNC_TOKEN and KUBESYNC_SECRET_KEY.

Author: KubeSync Team
Date: 2026-10-18
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kubesync.core.errors import ValidationError
from kubesync.core.models import SyncOptions, SyncRepoRef

logger = logging.getLogger("kubesync.config")

ENV_REPO_URL = "KUBESYNC_SYNC_REPO_URL"
ENV_BRANCH = "KUBESYNC_SYNC_BRANCH"
ENV_TOKEN = "KUBESYNC_SYNC_TOKEN"
ENV_SECRET_KEY = "KUBESYNC_SECRET_KEY"


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = YAML(typ="safe").load(path.read_text(encoding="utf-8-sig"))
    except (OSError, YAMLError) as e:
        logger.error(f"Unable to load configuration from {path}")
        raise ValidationError(f"Failed to load configuration {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"Configuration {path} is not a mapping")
    return data


def load_sync_options(path: Optional[str] = None,
                      env: Optional[Mapping[str, str]] = None) -> SyncOptions:
    """Builds SyncOptions from the optional config file at `path` and `env`."""
    env = os.environ if env is None else env
    sync: Dict[str, Any] = {}
    if path:
        sync = _read_config_file(Path(path)).get("sync") or {}

    repo = dict(sync.get("repo") or {})
    if env.get(ENV_REPO_URL):
        repo["url"] = env[ENV_REPO_URL]
    if env.get(ENV_BRANCH):
        repo["branch"] = env[ENV_BRANCH]
    credentials = sync.get("credentials") or {}

    repo_ref = None
    if repo:
        repo_ref = SyncRepoRef(
            owner=repo.get("owner"),
            repo=repo.get("repo"),
            url=repo.get("url"),
            branch=repo.get("branch"),
        )
    return SyncOptions(
        repo=repo_ref,
        token=env.get(ENV_TOKEN) or credentials.get("token"),
        secret_key=env.get(ENV_SECRET_KEY) or sync.get("secretKey"),
        ordered_file_names=bool(sync.get("orderedFileNames", False)),
    )


def valid_sync_options(options: Optional[SyncOptions]) -> bool:
    """True if `options` identify a sync repository that can be cloned."""
    return bool(options and options.repo and options.repo.clone_url())
