"""Canonical object keys for a combination's derived 3D files."""

from __future__ import annotations

from typing import NamedTuple

from .models import NOT_APPLICABLE

VENDOR_PREFIX = "EXGRIP-"
ROOT_PREFIX = "3d-files"
MESH_EXTENSION = "STL"
CAD_EXTENSION = "step"


class ArtifactPaths(NamedTuple):
    mesh_key: str
    cad_key: str


def _token(sku: str) -> str:
    return sku.removeprefix(VENDOR_PREFIX)


def base_name(master_holder: str, extension_adapter: str, clamping_extension: str) -> str:
    """Join the component tokens with "+", skipping an unused adapter slot."""
    parts = [_token(master_holder)]
    if extension_adapter != NOT_APPLICABLE:
        parts.append(_token(extension_adapter))
    parts.append(_token(clamping_extension))
    return "+".join(parts)


def resolve_paths(
    spindle: str,
    master_holder: str,
    extension_adapter: str,
    clamping_extension: str,
) -> ArtifactPaths:
    """Build the STL and STEP keys for one combination.

    resolve_paths("BBT40", "EXGRIP-A1", "NA", "EXGRIP-C1")
        -> ("3d-files/BBT40/A1+C1.STL", "3d-files/BBT40/A1+C1.step")
    """
    name = base_name(master_holder, extension_adapter, clamping_extension)
    return ArtifactPaths(
        mesh_key=f"{ROOT_PREFIX}/{spindle}/{name}.{MESH_EXTENSION}",
        cad_key=f"{ROOT_PREFIX}/{spindle}/{name}.{CAD_EXTENSION}",
    )
