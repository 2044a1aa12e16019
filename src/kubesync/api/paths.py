#!/usr/bin/env python3
"""
KUBESYNC URI PATH BUILDER
-------------------------
Maps a Kubernetes resource object and an API action onto the REST path of
the resource (or of its collection):

    {apiVersion}/[namespaces/{namespace}/]{plural}[/{name}]

Author: KubeSync Team
Date: 2026-10-18
"""

import json
from dataclasses import dataclass
from typing import Union

from kubesync.api.classifier import is_cluster_resource
from kubesync.core.errors import ValidationError
from kubesync.core.models import Action, K8sObject, metadata_of
from kubesync.core.registry import DEFAULT_REGISTRY, KindRegistry

# Actions addressing a single named resource rather than a collection
_NAMED_ACTIONS = frozenset({Action.DELETE, Action.PATCH, Action.READ, Action.REPLACE})


@dataclass(frozen=True)
class UriOpts:
    append_name: bool         # Path ends with the resource name
    namespace_required: bool  # Path must carry a namespace segment


def uri_opts(action: Union[Action, str], kind: str,
             registry: KindRegistry = DEFAULT_REGISTRY) -> UriOpts:
    """Path shape for `action` on `kind`."""
    action = Action.coerce(action)
    cluster = is_cluster_resource(action, kind, registry)
    return UriOpts(
        append_name=action in _NAMED_ACTIONS,
        namespace_required=not cluster,
    )


def spec_uri_path(resource: K8sObject, action: Union[Action, str],
                  registry: KindRegistry = DEFAULT_REGISTRY) -> str:
    """
    Returns the API path of `resource` for `action`.

    Raises ValidationError when the kind is missing, or when the action
    needs a name or namespace the resource does not provide. Collection
    calls (create, list) on namespaced kinds leave out a missing namespace.
    """
    kind = resource.get("kind")
    if not kind:
        raise ValidationError(f"Spec does not contain kind: {_describe(resource)}")
    action = Action.coerce(action)
    opts = uri_opts(action, kind, registry)
    metadata = metadata_of(resource)

    api_version = resource.get("apiVersion") or registry.preferred_api_version(kind)
    if not api_version:
        raise ValidationError(f"Spec does not contain apiVersion: {_describe(resource)}")
    parts = [api_version]

    namespace = metadata.get("namespace")
    if opts.namespace_required:
        if namespace:
            parts += ["namespaces", namespace]
        elif opts.append_name:
            raise ValidationError(f"Spec does not contain namespace: {_describe(resource)}")

    parts.append(registry.plural(kind))

    if opts.append_name:
        name = metadata.get("name")
        if not name:
            raise ValidationError(f"Spec does not contain name: {_describe(resource)}")
        parts.append(name)

    return "/".join(parts)


def _describe(resource: K8sObject) -> str:
    return json.dumps(resource, sort_keys=True, default=str)
