#!/usr/bin/env python3
"""
KUBESYNC REQUEST HELPERS
------------------------
Small helpers describing how an application and its resources are
identified when talking to the API server: the application slug, the label
selector matching its resources, and the headers used for patches.

Author: KubeSync Team
Date: 2026-10-18
"""

from typing import Dict, Optional

from kubesync.core.models import DeleteRequest, K8sObject, metadata_of
from kubesync.core.registry import DEFAULT_REGISTRY, KindRegistry

NAME_LABEL = "app.kubernetes.io/name"
WORKSPACE_LABEL = "atomist.com/workspaceId"

STRATEGIC_MERGE_PATCH = "application/strategic-merge-patch+json"


def app_name(request: DeleteRequest) -> str:
    """Unique slug for an application, `namespace/name`."""
    return f"{request.ns}/{request.name}"


def app_labels(request: DeleteRequest) -> Dict[str, str]:
    """The identity labels placed on every resource of an application."""
    labels = {NAME_LABEL: request.name}
    if request.workspace_id:
        labels[WORKSPACE_LABEL] = request.workspace_id
    return labels


def label_selector(request: DeleteRequest) -> str:
    """Label selector matching all resources of an application."""
    return ",".join(f"{k}={v}" for k, v in app_labels(request).items())


def patch_headers() -> Dict[str, Dict[str, str]]:
    """Request options for PATCH calls, which use strategic merge patches."""
    return {"headers": {"Content-Type": STRATEGIC_MERGE_PATCH}}


def resource_slug(resource: K8sObject, registry: Optional[KindRegistry] = None) -> str:
    """Human readable `Kind/namespace/name` (`Kind/name` for cluster kinds)."""
    registry = registry or DEFAULT_REGISTRY
    kind = resource.get("kind", "Unknown")
    metadata = metadata_of(resource)
    info = registry.lookup(kind)
    if (info and info.is_cluster_scoped) or not metadata.get("namespace"):
        return f"{kind}/{metadata.get('name')}"
    return f"{kind}/{metadata.get('namespace')}/{metadata.get('name')}"
