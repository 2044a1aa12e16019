#!/usr/bin/env python3
"""
KUBESYNC RECONCILER SUITE
-------------------------
End-to-end sync passes against a spec directory whose commit and push are
recorded instead of sent to a remote.

Author: KubeSync Team
Date: 2026-10-18
"""

import copy
import json
import re

import pytest
from ruamel.yaml import YAML

from kubesync.core.errors import SyncError
from kubesync.core.models import DeleteRequest, SyncOptions, SyncRepoRef
from kubesync.spec.secret import decrypt
from kubesync.spec.serializer import stringify
from kubesync.sync.project import SpecProject
from kubesync.sync.reconciler import (
    SpecSynchronizer, commit_message, sync_application, unique_spec_file,
)

APP = DeleteRequest(name="tonina", ns="black-angel")
REPO = SyncRepoRef(owner="tonina", repo="black-angel", url="https://github.com/tonina/black-angel")
SECRET_KEY = "10. Historia De Un Amor (feat. Javier Limón & Tali Rubinstein)"
UPDATE_MESSAGE = "Update specs for black-angel/tonina\n\n[atomist:generated] [atomist:sync-commit=kubesync]\n"
DELETE_MESSAGE = "Delete specs for black-angel/tonina\n\n[atomist:generated] [atomist:sync-commit=kubesync]\n"

SA_YAML = """apiVersion: v1
kind: ServiceAccount
metadata:
  name: tonina
  namespace: black-angel
"""


class RecordingProject(SpecProject):
    """Spec directory that records commits and pushes."""

    def __init__(self, base_dir, fail_push=False):
        super().__init__(base_dir)
        self.commits = []
        self.pushed = 0
        self.fail_push = fail_push

    def commit(self, message):
        self.commits.append(message)
        self._changed.clear()

    def push(self):
        if self.fail_push:
            raise RuntimeError("remote end hung up unexpectedly")
        self.pushed += 1


def _meta(**extra):
    m = {"name": "tonina", "namespace": "black-angel"}
    m.update(extra)
    return m


def _secret():
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "type": "Opaque",
        "metadata": _meta(),
        "data": {
            "Track01": "w4FyYm9sIERlIExhIFZpZGE=",
            "Track02": "Q2FseXBzbyBCbHVlcw==",
        },
    }


def _app_resources():
    labels = {"atomist.com/workspaceId": "T0N1N4"}
    return [
        {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": _meta(labels=dict(labels))},
        {"apiVersion": "v1", "kind": "Service", "metadata": _meta()},
        {"apiVersion": "extensions/v1beta1", "kind": "Ingress", "metadata": _meta()},
        {"apiVersion": "v1", "kind": "ServiceAccount", "metadata": _meta(labels=dict(labels))},
    ]


def _files(root):
    return sorted(p.name for p in root.iterdir() if p.is_file())


def _seed(root, files):
    for name, content in files.items():
        (root / name).write_text(content, encoding="utf-8")


def test_create_spec_files(tmp_path):
    p = RecordingProject(tmp_path)
    rs = [
        {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": _meta()},
        {"apiVersion": "v1", "kind": "Service", "metadata": _meta()},
        {"apiVersion": "v1", "kind": "ServiceAccount", "metadata": _meta()},
        _secret(),
    ]
    report = SpecSynchronizer(SyncOptions(repo=REPO)).sync_resources(APP, rs, "upsert", p)

    assert p.commits == [UPDATE_MESSAGE]
    assert p.pushed == 1, "commit was not pushed"
    assert report.committed
    assert _files(tmp_path) == [
        "black-angel-tonina-deployment.json",
        "black-angel-tonina-secret.json",
        "black-angel-tonina-service-account.json",
        "black-angel-tonina-service.json",
    ]
    d = (tmp_path / "black-angel-tonina-deployment.json").read_text()
    assert d == json.dumps(rs[0], indent=2) + "\n"
    s = json.loads((tmp_path / "black-angel-tonina-secret.json").read_text())
    assert s == rs[3]
    assert [c["status"] for c in report.changes] == ["CREATED"] * 4


def test_update_spec_files_and_avoid_conflicts(tmp_path):
    _seed(tmp_path, {
        "black-angel-tonina-deployment.json": json.dumps(
            {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": _meta()}),
        "black-angel-tonina-service.json": "{}\n",
        "black-angel-tonina-service-acct.yaml": SA_YAML,
    })
    p = RecordingProject(tmp_path)
    rs = _app_resources() + [_secret()]
    opts = SyncOptions(repo=REPO, secret_key=SECRET_KEY)
    report = SpecSynchronizer(opts).sync_resources(APP, rs, "upsert", p)

    assert p.commits == [UPDATE_MESSAGE]
    assert p.pushed == 1
    assert report.skipped == ["black-angel-tonina-service.json"]

    files = _files(tmp_path)
    assert len(files) == 6
    assert "black-angel-tonina-ingress.json" in files
    assert "black-angel-tonina-secret.json" in files

    dep = json.loads((tmp_path / "black-angel-tonina-deployment.json").read_text())
    assert dep == rs[0]

    sa = (tmp_path / "black-angel-tonina-service-acct.yaml").read_text()
    assert sa == stringify(rs[3], "yaml")
    assert YAML(typ="safe").load(sa) == rs[3]

    # the unparseable service file is left alone and the new spec avoids its name
    assert (tmp_path / "black-angel-tonina-service.json").read_text() == "{}\n"
    new_service = [f for f in files if re.match(r"^black-angel-tonina-service_[a-f0-9]{8}\.json$", f)]
    assert len(new_service) == 1, "failed to find new service spec"
    assert json.loads((tmp_path / new_service[0]).read_text()) == rs[1]

    sec = json.loads((tmp_path / "black-angel-tonina-secret.json").read_text())
    assert sec["metadata"] == _meta()
    assert sec["type"] == "Opaque"
    for k, v in _secret()["data"].items():
        assert sec["data"][k] != v
        assert decrypt(sec["data"][k], SECRET_KEY) == v

    statuses = {c["resource"]: c["status"] for c in report.changes}
    assert statuses["Deployment/black-angel/tonina"] == "UPDATED"
    assert statuses["ServiceAccount/black-angel/tonina"] == "UPDATED"
    assert statuses["Ingress/black-angel/tonina"] == "CREATED"
    assert statuses["Service/black-angel/tonina"] == "CREATED"


def test_delete_spec_files(tmp_path):
    _seed(tmp_path, {
        "black-angel-tonina-deployment.json": json.dumps(
            {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": _meta()}),
        "black-angel-tonina-service.json": "{}\n",
        "black-angel-tonina-service-acct.yaml": SA_YAML,
        "black-angel-tonina-svc.json": json.dumps(
            {"apiVersion": "v1", "kind": "Service", "metadata": _meta()}),
    })
    p = RecordingProject(tmp_path)
    report = SpecSynchronizer(SyncOptions(repo=REPO)).sync_resources(APP, _app_resources(), "delete", p)

    assert p.commits == [DELETE_MESSAGE]
    assert p.pushed == 1
    assert _files(tmp_path) == ["black-angel-tonina-service.json"]
    assert (tmp_path / "black-angel-tonina-service.json").read_text() == "{}\n"
    statuses = [c["status"] for c in report.changes]
    assert statuses == ["DELETED", "DELETED", "NOT_FOUND", "DELETED"]


def test_delete_nothing_matched_does_not_commit(tmp_path):
    _seed(tmp_path, {"other.json": json.dumps(
        {"apiVersion": "v1", "kind": "Service", "metadata": {"name": "other", "namespace": "x"}})})
    p = RecordingProject(tmp_path)
    report = SpecSynchronizer(SyncOptions(repo=REPO)).sync_resources(APP, _app_resources(), "delete", p)
    assert p.commits == []
    assert p.pushed == 0
    assert not report.committed
    assert _files(tmp_path) == ["other.json"]


def test_second_identical_pass_is_clean(tmp_path):
    rs = _app_resources() + [_secret()]
    opts = SyncOptions(repo=REPO, secret_key=SECRET_KEY)

    first = RecordingProject(tmp_path)
    SpecSynchronizer(opts).sync_resources(APP, copy.deepcopy(rs), "upsert", first)
    assert len(first.commits) == 1
    before = {f: (tmp_path / f).read_text() for f in _files(tmp_path)}

    second = RecordingProject(tmp_path)
    report = SpecSynchronizer(opts).sync_resources(APP, copy.deepcopy(rs), "upsert", second)
    assert second.commits == []
    assert second.pushed == 0
    assert not report.committed
    assert {c["status"] for c in report.changes} == {"UNCHANGED"}
    assert {f: (tmp_path / f).read_text() for f in _files(tmp_path)} == before


def test_duplicate_resources_in_one_pass_share_a_file(tmp_path):
    p = RecordingProject(tmp_path)
    dep = {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": _meta()}
    newer = {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": _meta(labels={"v": "2"})}
    SpecSynchronizer(SyncOptions(repo=REPO)).sync_resources(APP, [dep, newer], "upsert", p)
    assert _files(tmp_path) == ["black-angel-tonina-deployment.json"]
    assert json.loads((tmp_path / "black-angel-tonina-deployment.json").read_text()) == newer


def test_ordered_file_names(tmp_path):
    p = RecordingProject(tmp_path)
    rs = [
        {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": _meta()},
        {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "black-angel"}},
    ]
    SpecSynchronizer(SyncOptions(repo=REPO, ordered_file_names=True)).sync_resources(APP, rs, "upsert", p)
    assert _files(tmp_path) == ["10_black-angel_namespace.json", "70_black-angel_tonina_deployment.json"]


def test_push_failure_is_wrapped(tmp_path):
    p = RecordingProject(tmp_path, fail_push=True)
    with pytest.raises(SyncError, match="Failed to commit and push resource changes to sync repo: remote end hung up"):
        SpecSynchronizer(SyncOptions(repo=REPO)).sync_resources(APP, _app_resources(), "upsert", p)


def test_unique_spec_file(tmp_path):
    p = RecordingProject(tmp_path)
    dep = {"apiVersion": "apps/v1", "kind": "Deployment", "metadata": _meta()}
    assert unique_spec_file(dep, p) == "black-angel-tonina-deployment.json"
    (tmp_path / "black-angel-tonina-deployment.json").write_text("{}")
    assert re.match(r"^black-angel-tonina-deployment_[a-f0-9]{8}\.json$", unique_spec_file(dep, p))


def test_commit_message():
    assert commit_message(APP, "upsert") == UPDATE_MESSAGE
    assert commit_message(APP, "delete") == DELETE_MESSAGE


def test_sync_application_without_repo_does_nothing():
    def clone(options, work_dir):
        raise AssertionError("should not clone")

    assert sync_application(APP, _app_resources(), "upsert", SyncOptions(), clone=clone) is None
    assert sync_application(APP, [], "upsert", SyncOptions(repo=REPO), clone=clone) is None


def test_sync_application_clones_and_syncs():
    projects = []

    def clone(options, work_dir):
        projects.append(RecordingProject(work_dir))
        return projects[-1]

    report = sync_application(APP, _app_resources(), "upsert", SyncOptions(repo=REPO), clone=clone)
    assert report.committed
    assert projects[0].commits == [UPDATE_MESSAGE]
    assert len(report.changes) == 4


def test_sync_application_wraps_failures():
    def clone(options, work_dir):
        raise RuntimeError("authentication failed")

    with pytest.raises(SyncError) as e:
        sync_application(APP, _app_resources(), "upsert", SyncOptions(repo=REPO), clone=clone)
    assert str(e.value) == ("Failed to perform sync resources from black-angel/tonina to sync repo "
                            "tonina/black-angel: authentication failed")
