"""
CrudCamp Scaffolder — pyproject.toml Patching
===============================================

What:  Creates or updates the generated project's pyproject.toml.
How:   Parse with tomllib, merge into plain dicts, write back with tomli-w.

Patching is idempotent and additive:
    - [project].name is set to the project name
    - required dependencies are appended unless a requirement with the same
      distribution name is already listed (the existing pin wins)
    - unrelated tables and keys are preserved
Comments and formatting in an existing file are not preserved.
"""

import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Dict, List

import tomli_w

from app.scaffold.templates import BASE_DEPENDENCIES, TEST_DEPENDENCIES

logger = logging.getLogger(__name__)

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def requirement_name(requirement: str) -> str:
    """
    Canonical distribution name of a requirement string (PEP 503 style).

    >>> requirement_name("Python_Jose[cryptography]>=3.3")
    'python-jose'
    """
    match = _REQUIREMENT_NAME.match(requirement)
    if not match:
        raise ValueError(f"Not a valid requirement: {requirement!r}")
    return re.sub(r"[-_.]+", "-", match.group(1)).lower()


def merge_requirements(existing: List[str], required: List[str]) -> List[str]:
    """
    Returns `existing` plus each required entry whose name is not present yet.

    Existing entries without a leading distribution name (local paths,
    bare URLs) are kept as they are and never match a required entry.
    """
    merged = list(existing)
    present = set()
    for entry in existing:
        try:
            present.add(requirement_name(entry))
        except ValueError:
            logger.debug("Keeping unnamed requirement as-is: %s", entry)
    for req in required:
        name = requirement_name(req)
        if name not in present:
            merged.append(req)
            present.add(name)
    return merged


def default_manifest(name: str, package: str) -> Dict[str, Any]:
    return {
        "build-system": {
            "requires": ["setuptools>=68", "wheel"],
            "build-backend": "setuptools.build_meta",
        },
        "project": {
            "name": name,
            "version": "0.1.0",
            "requires-python": ">=3.11",
            "dependencies": [],
        },
        "tool": {
            "setuptools": {"packages": {"find": {"where": ["src"], "include": [f"{package}*"]}}},
        },
    }


def patch_manifest_data(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Applies the scaffolder's requirements to an already-parsed manifest in place."""
    project = data.setdefault("project", {})
    project["name"] = name
    project.setdefault("version", "0.1.0")
    project["dependencies"] = merge_requirements(project.get("dependencies", []), BASE_DEPENDENCIES)

    extras = project.setdefault("optional-dependencies", {})
    extras["test"] = merge_requirements(extras.get("test", []), TEST_DEPENDENCIES)

    pytest_options = data.setdefault("tool", {}).setdefault("pytest", {}).setdefault("ini_options", {})
    pytest_options["testpaths"] = ["tests"]
    pytest_options.setdefault("pythonpath", ["src"])
    return data


def patch_manifest(path: Path, name: str, package: str) -> Dict[str, Any]:
    """
    Creates `path` from the default template if missing, then patches it.

    Raises:
        tomllib.TOMLDecodeError: the existing file is not valid TOML
    """
    if path.exists():
        with path.open("rb") as fh:
            data = tomllib.load(fh)
        logger.debug("Patching existing %s", path)
    else:
        data = default_manifest(name, package)
        logger.debug("Creating %s", path)

    patch_manifest_data(data, name)

    with path.open("wb") as fh:
        tomli_w.dump(data, fh)
    return data
