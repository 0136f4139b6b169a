"""Managed resources and the tree that holds them."""

from filectl.resources.base import Resource
from filectl.resources.builder import build_tree, register_filebuckets
from filectl.resources.file import FileResource, ResourceParams, resolve_depth
from filectl.resources.symlink import SymlinkResource
from filectl.resources.tree import ResourceTree

__all__ = [
    "FileResource",
    "Resource",
    "ResourceParams",
    "ResourceTree",
    "SymlinkResource",
    "build_tree",
    "register_filebuckets",
    "resolve_depth",
]
