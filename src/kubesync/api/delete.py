#!/usr/bin/env python3
"""
KUBESYNC RESOURCE DELETION
--------------------------
Deletes single resource specs and whole applications through an injected
API client. The HTTP client itself is an external collaborator: anything
offering the small call surface below will do, e.g. thin wrappers around
the official `kubernetes` client calling with `_preload_content=False`.

    client.read(spec) / client.delete(spec)
    lister([namespace,] label_selector=...) -> {"items": [...]}
    deleter(name, [namespace,] propagation_policy="Background")

No retry policy lives here; failures are wrapped with context and raised.

Author: KubeSync Team
Date: 2026-10-18
"""

import logging
from typing import Any, Callable, List, Optional, Protocol

from kubesync.api.classifier import is_cluster_resource
from kubesync.api.paths import spec_uri_path
from kubesync.api.request import app_name, label_selector
from kubesync.core.errors import DeleteError
from kubesync.core.models import Action, DeleteRequest, K8sObject, metadata_of
from kubesync.core.registry import DEFAULT_REGISTRY, KindRegistry

logger = logging.getLogger("kubesync.delete")


class ObjectClient(Protocol):
    def read(self, spec: K8sObject) -> Any: ...
    def delete(self, spec: K8sObject) -> Any: ...


def delete_spec(spec: K8sObject, client: ObjectClient) -> Optional[Any]:
    """
    Deletes the resource described by `spec` if it exists.

    Returns the client's delete response, or None when the resource does
    not exist.
    """
    slug = spec_uri_path(spec, Action.READ)
    try:
        client.read(spec)
    except Exception as e:
        logger.debug(f"Kubernetes resource {slug} does not exist: {e}")
        return None

    logger.info(f"Deleting resource {slug}")
    try:
        return client.delete(spec)
    except Exception as e:
        msg = f"Failed to delete resource {slug}: {e}"
        logger.error(msg)
        raise DeleteError(msg) from e


def delete_app_resources(kind: str, request: DeleteRequest,
                         lister: Callable[..., Any], deleter: Callable[..., Any],
                         registry: KindRegistry = DEFAULT_REGISTRY) -> List[K8sObject]:
    """
    Deletes every `kind` resource labelled as belonging to `request`.

    Returns the deleted resources, possibly empty. Individual delete
    failures do not stop the loop; they are collected and raised together
    as one DeleteError once every resource has been attempted.
    """
    slug = app_name(request)
    selector = label_selector(request)
    cluster = is_cluster_resource(Action.LIST, kind, registry)

    try:
        if cluster:
            response = lister(label_selector=selector)
        else:
            response = lister(request.ns, label_selector=selector)
        to_delete = [_with_kind(item, kind) for item in _items(response)]
    except Exception as e:
        msg = f"Failed to list {kind} for {slug}: {e}"
        logger.error(msg)
        raise DeleteError(msg) from e

    deleted: List[K8sObject] = []
    errors: List[str] = []
    for resource in to_delete:
        metadata = metadata_of(resource)
        name = metadata.get("name")
        resource_slug = f"{kind}/{name}" if cluster else f"{kind}/{metadata.get('namespace')}/{name}"
        logger.info(f"Deleting {resource_slug} for {slug}")
        try:
            if cluster:
                deleter(name, propagation_policy="Background")
            else:
                deleter(name, metadata.get("namespace"), propagation_policy="Background")
            deleted.append(resource)
        except Exception as e:
            errors.append(f"Failed to delete {resource_slug} for {slug}: {e}")

    if errors:
        msg = f"Failed to delete {kind} resources for {slug}: {'; '.join(errors)}"
        logger.error(msg)
        raise DeleteError(msg)
    return deleted


def _items(response: Any) -> List[K8sObject]:
    if isinstance(response, dict):
        return list(response.get("items") or [])
    return list(getattr(response, "items", None) or [])


def _with_kind(item: K8sObject, kind: str) -> K8sObject:
    # List responses do not include the kind of their items
    if not item.get("kind"):
        item["kind"] = kind
    return item
