"""Dependency loaders: the interface the converger consumes and a YAML reference loader."""

from depconverge.core.dependency.loader import ConvergeOptions, DependencyLoader
from depconverge.core.loader.manifest import (
    MANIFEST_NAME,
    ManifestLoader,
    parse_declaration,
    read_manifest,
)

__all__ = [
    "ConvergeOptions",
    "DependencyLoader",
    "MANIFEST_NAME",
    "ManifestLoader",
    "parse_declaration",
    "read_manifest",
]
