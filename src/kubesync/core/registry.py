#!/usr/bin/env python3
"""
KUBESYNC KIND REGISTRY - The Catalog
------------------------------------
A single data-driven table describing every resource kind KubeSync has
special knowledge of: its preferred API group/version, its REST plural, the
actions for which it is addressed at cluster scope, and its apply-ordering
priority. The classifier, the path builder, the spec builder and the file
basename generator all read from this table so they can never disagree
about a kind.

Plurals are literal entries. A kind missing from the table falls back to
`kind.lower() + "s"`; irregular kinds must be added as explicit entries.

Author: KubeSync Team
Date: 2026-10-18
"""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional

from kubesync.core.models import Action

ALL_ACTIONS: FrozenSet[Action] = frozenset(Action)
STATUS_ACTIONS: FrozenSet[Action] = frozenset({Action.PATCH, Action.READ, Action.REPLACE})
COMPONENT_STATUS_ACTIONS: FrozenSet[Action] = frozenset({Action.LIST, Action.READ})
NO_ACTIONS: FrozenSet[Action] = frozenset()

DEFAULT_PRIORITY = 90


@dataclass(frozen=True)
class KindInfo:
    """Everything KubeSync knows about one resource kind."""
    kind: str
    api_version: Optional[str] = None        # Preferred "group/version" or "v1"
    plural: Optional[str] = None             # REST collection name
    cluster_actions: FrozenSet[Action] = NO_ACTIONS  # Actions addressed at cluster scope
    priority: int = DEFAULT_PRIORITY         # Two-digit apply-ordering prefix
    buildable: bool = False                  # Spec builder can create it from a request

    @property
    def is_cluster_scoped(self) -> bool:
        return self.cluster_actions == ALL_ACTIONS


def _cluster(kind: str, api_version: Optional[str] = None, plural: Optional[str] = None,
             priority: int = DEFAULT_PRIORITY, buildable: bool = False) -> KindInfo:
    return KindInfo(kind, api_version, plural, ALL_ACTIONS, priority, buildable)


def _status(kind: str) -> KindInfo:
    return KindInfo(kind, cluster_actions=STATUS_ACTIONS)


def _namespaced(kind: str, api_version: Optional[str] = None, plural: Optional[str] = None,
                priority: int = DEFAULT_PRIORITY, buildable: bool = False) -> KindInfo:
    return KindInfo(kind, api_version, plural, NO_ACTIONS, priority, buildable)


_RBAC = "rbac.authorization.k8s.io/v1"

_DEFAULT_KINDS = (
    # Cluster-scoped kinds: cluster resources for every action
    _cluster("APIService", "apiregistration.k8s.io/v1", "apiservices"),
    _cluster("AuditSink", "auditregistration.k8s.io/v1alpha1", "auditsinks"),
    _cluster("CertificateSigningRequest", "certificates.k8s.io/v1", "certificatesigningrequests"),
    _cluster("ClusterCustomObject"),
    _cluster("ClusterRole", _RBAC, "clusterroles", priority=25, buildable=True),
    _cluster("ClusterRoleBinding", _RBAC, "clusterrolebindings", priority=30, buildable=True),
    _cluster("CustomResourceDefinition", "apiextensions.k8s.io/v1", "customresourcedefinitions"),
    _cluster("InitializerConfiguration", "admissionregistration.k8s.io/v1alpha1",
             "initializerconfigurations"),
    _cluster("MutatingWebhookConfiguration", "admissionregistration.k8s.io/v1",
             "mutatingwebhookconfigurations"),
    _cluster("Namespace", "v1", "namespaces", priority=10, buildable=True),
    _cluster("Node", "v1", "nodes"),
    _cluster("PersistentVolume", "v1", "persistentvolumes", priority=15),
    _cluster("PodSecurityPolicy", "policy/v1beta1", "podsecuritypolicies", priority=40),
    _cluster("PriorityClass", "scheduling.k8s.io/v1", "priorityclasses"),
    _cluster("SelfSubjectAccessReview", "authorization.k8s.io/v1", "selfsubjectaccessreviews"),
    _cluster("SelfSubjectRulesReview", "authorization.k8s.io/v1", "selfsubjectrulesreviews"),
    _cluster("StorageClass", "storage.k8s.io/v1", "storageclasses", priority=15),
    _cluster("SubjectAccessReview", "authorization.k8s.io/v1", "subjectaccessreviews"),
    _cluster("TokenReview", "authentication.k8s.io/v1", "tokenreviews"),
    _cluster("ValidatingWebhookConfiguration", "admissionregistration.k8s.io/v1",
             "validatingwebhookconfigurations"),
    _cluster("VolumeAttachment", "storage.k8s.io/v1", "volumeattachments"),

    # Status subresources: cluster scoped only for patch/read/replace
    _status("APIServiceStatus"),
    _status("CertificateSigningRequestStatus"),
    _status("CustomResourceDefinitionStatus"),
    _status("NamespaceStatus"),
    _status("NodeStatus"),
    _status("PersistentVolumeStatus"),
    _status("VolumeAttachmentStatus"),
    KindInfo("ComponentStatus", "v1", "componentstatuses", COMPONENT_STATUS_ACTIONS),

    # Namespaced kinds
    _namespaced("ServiceAccount", "v1", "serviceaccounts", priority=20, buildable=True),
    _namespaced("Role", _RBAC, "roles", priority=25, buildable=True),
    _namespaced("RoleBinding", _RBAC, "rolebindings", priority=30, buildable=True),
    _namespaced("NetworkPolicy", "networking.k8s.io/v1", "networkpolicies", priority=40),
    _namespaced("PersistentVolumeClaim", "v1", "persistentvolumeclaims", priority=40),
    _namespaced("Service", "v1", "services", priority=50, buildable=True),
    _namespaced("ConfigMap", "v1", "configmaps", priority=60),
    _namespaced("Secret", "v1", "secrets", priority=60, buildable=True),
    _namespaced("CronJob", "batch/v1", "cronjobs", priority=70),
    _namespaced("DaemonSet", "apps/v1", "daemonsets", priority=70),
    _namespaced("Deployment", "apps/v1", "deployments", priority=70, buildable=True),
    _namespaced("StatefulSet", "apps/v1", "statefulsets", priority=70),
    _namespaced("HorizontalPodAutoscaler", "autoscaling/v1", "horizontalpodautoscalers", priority=80),
    _namespaced("Ingress", "extensions/v1beta1", "ingresses", priority=80, buildable=True),
    _namespaced("PodDisruptionBudget", "policy/v1", "poddisruptionbudgets", priority=80),
    _namespaced("Pod", "v1", "pods"),
    _namespaced("Endpoints", "v1", "endpoints"),
    _namespaced("Event", "v1", "events"),
    _namespaced("Job", "batch/v1", "jobs"),
    _namespaced("LimitRange", "v1", "limitranges"),
    _namespaced("ReplicaSet", "apps/v1", "replicasets"),
    _namespaced("ReplicationController", "v1", "replicationcontrollers"),
    _namespaced("ResourceQuota", "v1", "resourcequotas"),
)


class KindRegistry:
    """
    Immutable lookup table of KindInfo keyed by kind name.

    Registries are never modified after construction; `with_kinds` returns a
    new registry, which is how custom resources are made known to the
    classifier and path builder.
    """

    def __init__(self, kinds: Iterable[KindInfo]):
        self._kinds: Mapping[str, KindInfo] = MappingProxyType({k.kind: k for k in kinds})

    def __contains__(self, kind: object) -> bool:
        return kind in self._kinds

    def __len__(self) -> int:
        return len(self._kinds)

    def kinds(self) -> Iterable[str]:
        return self._kinds.keys()

    def lookup(self, kind: Optional[str]) -> Optional[KindInfo]:
        if not kind:
            return None
        return self._kinds.get(kind)

    def plural(self, kind: str) -> str:
        info = self.lookup(kind)
        if info and info.plural:
            return info.plural
        return kind.lower() + "s"

    def preferred_api_version(self, kind: str) -> Optional[str]:
        info = self.lookup(kind)
        return info.api_version if info else None

    def priority(self, kind: Optional[str]) -> int:
        info = self.lookup(kind)
        return info.priority if info else DEFAULT_PRIORITY

    def cluster_actions(self, kind: Optional[str]) -> FrozenSet[Action]:
        info = self.lookup(kind)
        return info.cluster_actions if info else NO_ACTIONS

    def is_buildable(self, kind: Optional[str]) -> bool:
        info = self.lookup(kind)
        return bool(info and info.buildable)

    def with_kinds(self, *extra: KindInfo) -> "KindRegistry":
        """Returns a new registry with `extra` added or overriding existing kinds."""
        merged = dict(self._kinds)
        for info in extra:
            base = merged.get(info.kind)
            merged[info.kind] = info if base is None else replace(base, **_overrides(info))
        return KindRegistry(merged.values())


def _overrides(info: KindInfo) -> dict:
    """Non-default fields of `info`, so partial entries only override what they set."""
    blank = KindInfo(info.kind)
    return {
        field: getattr(info, field)
        for field in ("api_version", "plural", "cluster_actions", "priority", "buildable")
        if getattr(info, field) != getattr(blank, field)
    }


DEFAULT_REGISTRY = KindRegistry(_DEFAULT_KINDS)
