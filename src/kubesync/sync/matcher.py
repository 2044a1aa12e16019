#!/usr/bin/env python3
"""
KUBESYNC SPEC MATCHER
---------------------
Finds the spec file describing the same object as a resource.

Author: KubeSync Team
Date: 2026-10-18
"""

from typing import Iterable, Optional

from kubesync.core.models import K8sObject, ProjectFileSpec, metadata_of


def match_spec(resource: K8sObject, file_specs: Iterable[ProjectFileSpec]) -> Optional[ProjectFileSpec]:
    """
    Returns the first file spec with the same kind, name and namespace as
    `resource`, or None. A missing namespace only matches a missing
    namespace. apiVersion is not compared, so a resource moved to a new
    group/version still updates its existing file.
    """
    metadata = metadata_of(resource)
    key = (resource.get("kind"), metadata.get("name"), metadata.get("namespace"))
    for fs in file_specs:
        fs_metadata = metadata_of(fs.spec)
        if (fs.spec.get("kind"), fs_metadata.get("name"), fs_metadata.get("namespace")) == key:
            return fs
    return None
