#!/usr/bin/env python3
"""
KUBESYNC SPEC HISTORY
---------------------
Looks up earlier versions of spec files in the sync repository.

Author: KubeSync Team
Date: 2026-10-18
"""

import logging

from git import Repo
from git.exc import GitError

logger = logging.getLogger("kubesync.history")


def previous_spec_version(base_dir: str, spec_path: str, sha: str) -> str:
    """
    Returns the content of `spec_path` in the parent of commit `sha`.

    Returns an empty string if it cannot be retrieved, e.g. because the
    file was created by that commit.
    """
    try:
        return Repo(base_dir).git.show(f"{sha}~1:{spec_path}")
    except GitError as e:
        logger.debug(f"No previous version of {spec_path} before {sha}: {e}")
        return ""
