"""Build a resource tree from a manifest."""

import logging
from pathlib import Path

from filectl.core.context import ReconcileContext
from filectl.core.filebucket import LocalFilebucket
from filectl.core.paths import get_filebucket_dir
from filectl.models.manifest import Manifest
from filectl.resources.tree import ResourceTree

logger = logging.getLogger(__name__)


def register_filebuckets(manifest: Manifest, context: ReconcileContext) -> None:
    """Register every declared filebucket on the context.

    Buckets without an explicit path live under the state directory.
    """
    for name, entry in manifest.filebuckets.items():
        root = Path(entry.path).expanduser() if entry.path else get_filebucket_dir() / name
        context.register_filebucket(name, LocalFilebucket(root))
        logger.debug("Registered filebucket %s at %s", name, root)


def build_tree(manifest: Manifest, context: ReconcileContext) -> ResourceTree:
    """Declare every manifest file on a new tree.

    Filebuckets are registered first so backups can reference them.
    Attribute errors end up on the resources' ``failures``.
    """
    register_filebuckets(manifest, context)
    tree = ResourceTree(context)
    for path, entry in manifest.files.items():
        tree.declare(path, entry.arguments())
    logger.debug("Declared %d resources", len(tree))
    return tree
