import logging
from typing import List, NamedTuple

from .archive_codec import import_archive
from .error_handling import DecodeError
from .models import Node
from .paths import FolderMemo, decompose_path

logger = logging.getLogger(__name__)


class PickedFile(NamedTuple):
    """A file handed over by a browser picker: its relative path and raw bytes"""
    relative_path: str
    data: bytes


def import_picked_files(picked: List[PickedFile]) -> List[Node]:
    """
    Turn picked files into nodes.

    `.zip` files are expanded through the archive codec; every other file is
    placed under folders rebuilt from its relative path. Folders are shared
    across all files of one pick.
    """
    new_nodes: List[Node] = []
    memo = FolderMemo()

    for item in picked:
        name, ancestors = decompose_path(item.relative_path)
        if not name:
            continue

        if name.lower().endswith(".zip"):
            logger.info(f"Extracting archive: {name}")
            new_nodes.extend(import_archive(item.data, memo))
            continue

        before = len(memo.created)
        parent_id = memo.ensure_folders(ancestors)
        new_nodes.extend(memo.created[before:])
        try:
            content = item.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"Failed to decode {item.relative_path} as text",
                {"path": item.relative_path}
            ) from e
        new_nodes.append(Node(name, parent_id=parent_id, content=content))

    return new_nodes
