#!/usr/bin/env python3
"""
KUBESYNC RESOURCE CLASSIFIER
----------------------------
Decides whether a kind is addressed at cluster scope for a given action.

Author: KubeSync Team
Date: 2026-10-18
"""

from typing import Optional, Union

from kubesync.core.models import Action
from kubesync.core.registry import DEFAULT_REGISTRY, KindRegistry


def is_cluster_resource(action: Union[Action, str], kind: Optional[str],
                        registry: KindRegistry = DEFAULT_REGISTRY) -> bool:
    """
    Returns True if `kind` is a cluster resource for `action`.

    Cluster kinds (Namespace, ClusterRole, ...) are cluster resources for
    every action, status subresources only for patch/read/replace and
    ComponentStatus only for list/read. Unknown kinds are namespaced.
    """
    return Action.coerce(action) in registry.cluster_actions(kind)
