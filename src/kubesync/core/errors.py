#!/usr/bin/env python3
"""
KUBESYNC ERRORS
---------------
Exception taxonomy shared by the addressing, spec and sync layers.

ValidationError is raised immediately for bad input and never retried.
SpecParseError is recoverable: the sync scanner logs it and skips the file.
SyncError and DeleteError wrap collaborator failures with context.

Author: KubeSync Team
Date: 2026-10-18
"""


class KubeSyncError(Exception):
    """Base class for every error raised by KubeSync."""


class ValidationError(KubeSyncError, ValueError):
    """A resource spec or request is missing something an operation needs."""


class SpecParseError(KubeSyncError):
    """A spec file could not be parsed into a Kubernetes resource object."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse spec file {path}: {reason}")


class SyncError(KubeSyncError):
    """Committing, pushing or cloning the sync repository failed."""


class DeleteError(KubeSyncError):
    """Listing or deleting application resources failed."""
