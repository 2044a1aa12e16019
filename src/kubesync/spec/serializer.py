#!/usr/bin/env python3
"""
KUBESYNC SPEC SERIALIZER - Stable Round-Trip
--------------------------------------------
Converts resource objects to stable strings for spec files and parses spec
files back into resource objects.

JSON output is recursively key-sorted with a 2-space indent and a trailing
newline. YAML output is key-sorted block style. Both are deterministic, so
writing an unchanged resource leaves its file byte-identical.

Author: KubeSync Team
Date: 2026-10-18
"""

import io
import json
from typing import Any, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kubesync.core.errors import SpecParseError
from kubesync.core.models import K8sObject
from kubesync.spec.secret import encrypt_secret

JSON_FORMAT = "json"
YAML_FORMAT = "yaml"
YAML_EXTENSIONS = (".yaml", ".yml")


def _yaml() -> YAML:
    yaml = YAML(typ="safe", pure=True)
    yaml.default_flow_style = False
    yaml.allow_unicode = True
    yaml.width = 4096
    return yaml


def spec_format_for_path(path: Optional[str]) -> str:
    """YAML for `.yaml`/`.yml` files, JSON for everything else."""
    if path and path.lower().endswith(YAML_EXTENSIONS):
        return YAML_FORMAT
    return JSON_FORMAT


def _sorted(data: Any) -> Any:
    """Recursively rebuilds mappings with sorted keys; list order is kept."""
    if isinstance(data, dict):
        return {k: _sorted(data[k]) for k in sorted(data, key=str)}
    if isinstance(data, list):
        return [_sorted(item) for item in data]
    return data


def stringify(resource: K8sObject, format: str = JSON_FORMAT,
              secret_key: Optional[str] = None) -> str:
    """
    Returns the stable string representation of `resource`.

    When `secret_key` is given, the data values of Secret resources are
    encrypted first. `resource` itself is never modified.
    """
    if resource.get("kind") == "Secret" and secret_key:
        resource = encrypt_secret(resource, secret_key)

    ordered = _sorted(resource)
    if format == YAML_FORMAT:
        stream = io.StringIO()
        _yaml().dump(ordered, stream)
        return stream.getvalue()
    return json.dumps(ordered, indent=2, ensure_ascii=False) + "\n"


def parse_spec(text: str, path: str = "") -> K8sObject:
    """
    Parses spec file content into a resource object.

    The format is chosen from the file extension of `path`. Raises
    SpecParseError unless the result is a mapping with a kind and metadata.
    """
    text = text.lstrip("\ufeff")
    try:
        if spec_format_for_path(path) == YAML_FORMAT:
            spec = _yaml().load(text)
        else:
            spec = json.loads(text)
    except (ValueError, YAMLError) as e:
        raise SpecParseError(path, str(e)) from e

    if not isinstance(spec, dict):
        raise SpecParseError(path, "content is not a mapping")
    if not spec.get("kind"):
        raise SpecParseError(path, "spec does not contain kind")
    if not isinstance(spec.get("metadata"), dict):
        raise SpecParseError(path, "spec does not contain metadata")
    return spec
