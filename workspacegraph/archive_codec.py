import io
import logging
import time
import zipfile
import zlib
from typing import List, Optional

from .error_handling import DecodeError
from .models import Node
from .paths import FolderMemo, build_path, decompose_path, split_path

logger = logging.getLogger(__name__)


def export_archive(graph) -> bytes:
    """
    Bundle every File node into a single zip, keyed by its resolved path.

    Folders are not written as entries, so an empty folder does not survive
    an export.
    """
    buf = io.BytesIO()
    count = 0
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for node in graph.files():
            zf.writestr(build_path(node, graph), node.content.encode("utf-8"))
            count += 1
    logger.info(f"Exported {count} file(s) to archive")
    return buf.getvalue()


def archive_filename() -> str:
    return f"workspace_bundle_{int(time.time() * 1000)}.zip"


def import_archive(data: bytes, memo: Optional[FolderMemo] = None) -> List[Node]:
    """
    Decode a zip blob into new nodes.

    Args:
        data: Raw archive bytes
        memo: Folder table shared with the surrounding import, if any; only
            folders created by this call are returned

    Returns:
        List[Node]: Folders and files in creation order, parents before children

    Raises:
        DecodeError: If the container or any payload cannot be decoded. No
            nodes from this archive are returned in that case.
    """
    try:
        zf = zipfile.ZipFile(io.BytesIO(data))
    except (zipfile.BadZipFile, ValueError) as e:
        raise DecodeError(f"Not a valid archive: {e}") from e

    new_nodes: List[Node] = []
    memo = memo if memo is not None else FolderMemo()
    first_folder = len(memo.created)

    with zf:
        # Shallow entries first so every parent exists before its children
        entries = sorted(zf.infolist(), key=lambda info: len(split_path(info.filename)))
        for info in entries:
            name, ancestors = decompose_path(info.filename)
            if not name:
                continue

            if info.is_dir():
                memo.ensure_folders(ancestors + [name])
                continue

            parent_id = memo.ensure_folders(ancestors)
            try:
                content = zf.read(info).decode("utf-8")
            except (UnicodeDecodeError, zipfile.BadZipFile, zlib.error, RuntimeError) as e:
                raise DecodeError(
                    f"Failed to decode archive entry {info.filename}: {e}",
                    {"path": info.filename}
                ) from e
            new_nodes.append(Node(name, parent_id=parent_id, content=content))

    new_folders = memo.created[first_folder:]
    logger.info(f"Imported {len(new_folders)} folder(s) and {len(new_nodes)} file(s) from archive")
    return new_folders + new_nodes
