#!/usr/bin/env python3
"""
KUBESYNC SYNC PROJECT - The Working Copy
----------------------------------------
File access to a checked-out sync repository. `SpecProject` handles the
files and tracks which ones a sync pass actually changed; `GitSpecProject`
adds commit and push through GitPython.

The working copy is exclusively owned by one sync pass at a time. Locking
between concurrent deploys of the same repository is the caller's job.

Author: KubeSync Team
Date: 2026-10-18
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Optional, Set
from urllib.parse import urlsplit, urlunsplit

from git import Actor, Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from kubesync.core.errors import SyncError
from kubesync.core.models import SyncOptions

logger = logging.getLogger("kubesync.project")

SPEC_GLOBS = ("*.json", "*.yaml", "*.yml")
DEFAULT_AUTHOR = Actor("KubeSync", "kubesync@users.noreply.github.com")


class SpecProject(ABC):
    """
    A directory of spec files. Subclasses decide how changes are committed
    and published.

    Writes go through a temp file and `os.replace`, so a crash never leaves
    a half-written spec behind. Only writes that change content and deletes
    of existing files mark the project as modified.
    """

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir).resolve()
        self._changed: Set[str] = set()

    def _path(self, path: str) -> Path:
        full_path = (self.base_dir / path).resolve()
        if self.base_dir not in full_path.parents:
            raise ValueError(f"Path escapes project directory: {path}")
        return full_path

    def spec_files(self, patterns: Iterable[str] = SPEC_GLOBS) -> List[str]:
        """Spec files at the repository root, sorted by name."""
        found = set()
        for pattern in patterns:
            found.update(
                f.name for f in self.base_dir.glob(pattern)
                if f.is_file() and not f.is_symlink()
            )
        return sorted(found)

    def exists(self, path: str) -> bool:
        return self._path(path).exists()

    def read(self, path: str) -> str:
        return self._path(path).read_text(encoding="utf-8")

    def write(self, path: str, content: str) -> bool:
        """Writes `content` to `path`; returns True if the file changed."""
        full_path = self._path(path)
        if full_path.exists() and full_path.read_text(encoding="utf-8") == content:
            return False
        self._atomic_write(full_path, content)
        self._changed.add(path)
        return True

    def delete(self, path: str) -> bool:
        full_path = self._path(path)
        if not full_path.exists():
            return False
        full_path.unlink()
        self._changed.add(path)
        return True

    def changed_files(self) -> List[str]:
        return sorted(self._changed)

    def is_clean(self) -> bool:
        return not self._changed

    @abstractmethod
    def commit(self, message: str) -> None:
        """Records every change made so far."""

    @abstractmethod
    def push(self) -> None:
        """Publishes recorded changes."""

    def _atomic_write(self, target_path: Path, content: str):
        target_path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = target_path.with_name(target_path.name + ".kubesync.tmp")
        try:
            temp_file.write_text(content, encoding="utf-8")
            os.replace(temp_file, target_path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise IOError(f"Atomic write failed for {target_path}: {e}") from e


class GitSpecProject(SpecProject):
    """A spec project backed by a git clone."""

    def __init__(self, base_dir: str, remote: str = "origin", branch: Optional[str] = None,
                 author: Actor = DEFAULT_AUTHOR, push_enabled: bool = True):
        super().__init__(base_dir)
        try:
            self.repo = Repo(self.base_dir)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise SyncError(f"Not a git working copy: {self.base_dir}") from e
        self.remote = remote
        self.branch = branch
        self.author = author
        self.push_enabled = push_enabled

    def is_clean(self) -> bool:
        return not self.repo.is_dirty(untracked_files=True)

    def commit(self, message: str) -> None:
        self.repo.git.add(all=True)
        commit = self.repo.index.commit(message, author=self.author, committer=self.author)
        self._changed.clear()
        logger.info(f"Committed {commit.hexsha[:7]} to {self.base_dir}")

    def push(self) -> None:
        if not self.push_enabled:
            logger.info(f"Push disabled, leaving commit in {self.base_dir}")
            return
        branch = self.branch or self.repo.active_branch.name
        results = self.repo.remote(self.remote).push(f"HEAD:refs/heads/{branch}")
        for info in results:
            if info.flags & info.ERROR:
                raise SyncError(f"Push to {self.remote}/{branch} was rejected: {info.summary.strip()}")
        logger.info(f"Pushed {self.base_dir} to {self.remote}/{branch}")


def authenticated_url(url: str, token: Optional[str]) -> str:
    """Embeds `token` into an https clone URL; other URLs are returned as is."""
    if not token:
        return url
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        return url
    netloc = f"x-access-token:{token}@{parts.hostname}"
    if parts.port:
        netloc += f":{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))


def clone_sync_repo(options: SyncOptions, target_dir: str) -> GitSpecProject:
    """Clones the configured sync repository into `target_dir`."""
    ref = options.repo
    url = ref.clone_url() if ref else None
    if not url:
        raise SyncError("Sync repository has no clone URL")
    kwargs = {"depth": 1}
    if ref.branch:
        kwargs["branch"] = ref.branch
    try:
        Repo.clone_from(authenticated_url(url, options.token), target_dir, **kwargs)
    except GitCommandError as e:
        raise SyncError(f"Failed to clone sync repo {ref.slug}: {e.stderr.strip() or e}") from e
    logger.info(f"Cloned sync repo {ref.slug} into {target_dir}")
    return GitSpecProject(target_dir, branch=ref.branch)
