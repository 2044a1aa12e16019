#!/usr/bin/env python3
"""
KUBESYNC RECONCILER - The Bookkeeper
------------------------------------
Keeps the sync repository in step with what was just applied to (or deleted
from) the cluster. One pass:

1. Scan: parse every spec file at the repository root; files that fail to
   parse are logged and ignored.
2. Match & apply: for each resource, in caller order, find the file holding
   the same object. Upserts overwrite it in its existing format or create a
   new uniquely named JSON file; deletes remove it.
3. Commit: if anything changed, commit with a tagged message and push.

Running the same upsert twice leaves the working copy clean the second
time, so no empty commits are produced.

Author: KubeSync Team
Date: 2026-10-18
"""

import logging
import tempfile
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union

from kubesync.api.request import app_name, resource_slug
from kubesync.core.config import valid_sync_options
from kubesync.core.errors import SpecParseError, SyncError
from kubesync.core.models import (
    DeleteRequest, K8sObject, ProjectFileSpec, SyncAction, SyncOptions,
)
from kubesync.spec.basename import kubernetes_spec_file_basename, spec_file_basename
from kubesync.spec.serializer import parse_spec, spec_format_for_path, stringify
from kubesync.sync.matcher import match_spec
from kubesync.sync.project import SpecProject, clone_sync_repo

logger = logging.getLogger("kubesync.reconciler")

GENERATED_MARKER = "[atomist:generated]"
SYNC_COMMIT_NAME = "kubesync"
SPEC_EXTENSION = ".json"


def commit_tag() -> str:
    """Tag other tooling uses to recognise commits made by a sync pass."""
    return f"[atomist:sync-commit={SYNC_COMMIT_NAME}]"


def commit_message(app: DeleteRequest, action: SyncAction) -> str:
    verb = "Delete" if action == SyncAction.DELETE else "Update"
    return f"{verb} specs for {app_name(app)}\n\n{GENERATED_MARKER} {commit_tag()}\n"


def unique_spec_file(resource: K8sObject, project: SpecProject,
                     basename: Callable[[K8sObject], str] = spec_file_basename) -> str:
    """
    Returns a spec file path for `resource` not yet present in `project`.
    On collision a short random suffix is added before the extension.
    """
    spec_root = basename(resource)
    spec_path = spec_root + SPEC_EXTENSION
    while project.exists(spec_path):
        spec_path = f"{spec_root}_{uuid.uuid4().hex[:8]}{SPEC_EXTENSION}"
    return spec_path


@dataclass
class SyncReport:
    """Outcome of one sync pass."""
    action: SyncAction
    changes: List[dict] = field(default_factory=list)  # {"path", "resource", "status"}
    skipped: List[str] = field(default_factory=list)   # Unparseable spec files
    committed: bool = False

    def record(self, path: Optional[str], resource: str, status: str):
        self.changes.append({"path": path, "resource": resource, "status": status})


class SpecSynchronizer:
    """
    Applies changed resources to a sync repository working copy.

    Holds only the caller's sync options; all per-pass state lives in the
    SyncReport and the scanned file specs.
    """

    def __init__(self, options: SyncOptions):
        self.options = options
        self.basename = (kubernetes_spec_file_basename if options.ordered_file_names
                         else spec_file_basename)

    def scan(self, project: SpecProject, report: Optional[SyncReport] = None) -> List[ProjectFileSpec]:
        """Parses all spec files in `project`, skipping the ones that fail."""
        specs = []
        for path in project.spec_files():
            try:
                specs.append(ProjectFileSpec(path, parse_spec(project.read(path), path)))
            except (SpecParseError, OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to process sync repo spec {path}, ignoring: {e}")
                if report is not None:
                    report.skipped.append(path)
        return specs

    def sync_resources(self, app: DeleteRequest, resources: Sequence[K8sObject],
                       action: Union[SyncAction, str], project: SpecProject) -> SyncReport:
        """
        Runs one sync pass for `resources` of `app` against `project`.

        Commit and push failures are raised as SyncError; the pass is only
        successful if both succeed.
        """
        action = SyncAction(action)
        report = SyncReport(action)
        specs = self.scan(project, report)

        for resource in resources:
            fs = match_spec(resource, specs)
            if action == SyncAction.DELETE:
                self._resource_deleted(resource, project, fs, specs, report)
            else:
                self._resource_upserted(resource, project, fs, specs, report)

        if project.is_clean():
            logger.info(f"Sync repo already up to date for {app_name(app)}")
            return report

        try:
            project.commit(commit_message(app, action))
            project.push()
        except Exception as e:
            msg = f"Failed to commit and push resource changes to sync repo: {e}"
            logger.error(msg)
            raise SyncError(msg) from e
        report.committed = True
        return report

    def _resource_upserted(self, resource: K8sObject, project: SpecProject,
                           fs: Optional[ProjectFileSpec], specs: List[ProjectFileSpec],
                           report: SyncReport):
        slug = resource_slug(resource)
        if fs:
            content = stringify(resource, spec_format_for_path(fs.path), self.options.secret_key)
            changed = project.write(fs.path, content)
            fs.spec = resource
            report.record(fs.path, slug, "UPDATED" if changed else "UNCHANGED")
            return

        spec_path = unique_spec_file(resource, project, self.basename)
        project.write(spec_path, stringify(resource, secret_key=self.options.secret_key))
        specs.append(ProjectFileSpec(spec_path, resource))
        logger.info(f"Created sync repo spec {spec_path} for {slug}")
        report.record(spec_path, slug, "CREATED")

    def _resource_deleted(self, resource: K8sObject, project: SpecProject,
                          fs: Optional[ProjectFileSpec], specs: List[ProjectFileSpec],
                          report: SyncReport):
        slug = resource_slug(resource)
        if not fs:
            report.record(None, slug, "NOT_FOUND")
            return
        project.delete(fs.path)
        specs.remove(fs)
        logger.info(f"Deleted sync repo spec {fs.path} for {slug}")
        report.record(fs.path, slug, "DELETED")


def sync_application(app: DeleteRequest, resources: Sequence[K8sObject],
                     action: Union[SyncAction, str], options: SyncOptions,
                     clone: Callable[[SyncOptions, str], SpecProject] = clone_sync_repo) -> Optional[SyncReport]:
    """
    Synchronizes `resources` of `app` to the configured sync repository.

    Does nothing and returns None when no sync repository is configured or
    there are no resources. The repository is cloned into a temporary
    directory that is removed afterwards.
    """
    if not valid_sync_options(options) or not resources:
        return None
    try:
        with tempfile.TemporaryDirectory(prefix="kubesync-") as work_dir:
            project = clone(options, work_dir)
            return SpecSynchronizer(options).sync_resources(app, resources, action, project)
    except Exception as e:
        msg = (f"Failed to perform sync resources from {app_name(app)} to sync repo "
               f"{options.repo.slug}: {e}")
        logger.error(msg)
        raise SyncError(msg) from e
