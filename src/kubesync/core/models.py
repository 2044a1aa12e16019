#!/usr/bin/env python3
"""
KUBESYNC CORE MODELS
--------------------
Defines the fundamental data structures used across the KubeSync engine.
Resource objects themselves stay plain dictionaries (exactly what JSON/YAML
parsing yields); these models describe everything around them.

Author: KubeSync Team
Date: 2026-10-18
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from kubesync.core.errors import ValidationError

# A Kubernetes resource object as parsed from a spec file or API response
K8sObject = Dict[str, Any]


class Action(str, Enum):
    """Operations that can be requested against the Kubernetes API."""
    CREATE = "create"
    DELETE = "delete"
    LIST = "list"
    PATCH = "patch"
    READ = "read"
    REPLACE = "replace"

    @classmethod
    def coerce(cls, action: Union["Action", str]) -> "Action":
        """Accepts either an Action or its string value."""
        if isinstance(action, cls):
            return action
        try:
            return cls(action)
        except ValueError:
            raise ValidationError(f"Unsupported Kubernetes API action: {action}")


class SyncAction(str, Enum):
    """What happened to the resources being synchronized."""
    UPSERT = "upsert"
    DELETE = "delete"


@dataclass(frozen=True)
class DeleteRequest:
    """
    Identifies an application deployed to Kubernetes.

    Used to build resource objects, label selectors and sync commit
    messages for the application.
    """
    name: str                          # Application (resource) name
    ns: str                            # Namespace the application lives in
    workspace_id: Optional[str] = None  # Workspace that owns the deployment


@dataclass
class ProjectFileSpec:
    """A spec file in the sync repository paired with its parsed resource."""
    path: str         # Path relative to the repository root
    spec: K8sObject   # Parsed resource object


@dataclass(frozen=True)
class SyncRepoRef:
    """Location of the sync repository."""
    owner: Optional[str] = None
    repo: Optional[str] = None
    url: Optional[str] = None
    branch: Optional[str] = None

    @property
    def slug(self) -> str:
        if self.owner and self.repo:
            return f"{self.owner}/{self.repo}"
        return self.url or "<unknown>"

    def clone_url(self) -> Optional[str]:
        if self.url:
            return self.url
        if self.owner and self.repo:
            return f"https://github.com/{self.owner}/{self.repo}.git"
        return None


@dataclass(frozen=True)
class SyncOptions:
    """
    Configuration of the sync repository.

    Owned by the caller and passed through the sync pass untouched.
    """
    repo: Optional[SyncRepoRef] = None
    token: Optional[str] = None              # Credentials for clone/push
    secret_key: Optional[str] = None         # Encrypts Secret data values when set
    ordered_file_names: bool = False         # Use NN_ prefixed names for new spec files


def metadata_of(resource: K8sObject) -> Dict[str, Any]:
    """Returns the metadata mapping of a resource, empty if absent."""
    metadata = resource.get("metadata") if isinstance(resource, dict) else None
    return metadata if isinstance(metadata, dict) else {}
