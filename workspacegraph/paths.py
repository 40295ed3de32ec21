from typing import Dict, List, Optional, Tuple

from .models import Node

DELIMITER = "/"


def build_path(node: Node, graph) -> str:
    """
    Returns the slash-delimited path of a node, root first.

    A parent_id that points to a missing node, or back into a chain already
    walked, ends the walk as if the root had been reached.
    """
    parts = [node.name]
    seen = {node.id}
    current = node
    while current.parent_id:
        parent = graph.get(current.parent_id)
        if parent is None or parent.id in seen:
            break
        parts.append(parent.name)
        seen.add(parent.id)
        current = parent
    return DELIMITER.join(reversed(parts))


def split_path(path: str) -> List[str]:
    return [part for part in path.split(DELIMITER) if part]


def decompose_path(path: str) -> Tuple[str, List[str]]:
    """
    Split a path into (leaf_name, ancestor_names).

    Examples:
        - 'src/lib/a.ts' -> ('a.ts', ['src', 'lib'])
        - 'src/' -> ('src', [])
    """
    parts = split_path(path)
    if not parts:
        return "", []
    return parts[-1], parts[:-1]


class FolderMemo:
    """
    Path -> folder id table scoped to a single import.

    Folders are appended to `created` the first time their path is seen and
    reused afterwards, so an ancestor path is only ever materialized once.
    """

    def __init__(self):
        self.ids: Dict[str, str] = {}
        self.created: List[Node] = []

    def get(self, names: List[str]) -> Optional[str]:
        if not names:
            return None
        return self.ids.get(DELIMITER.join(names))

    def ensure_folders(self, ancestor_names: List[str]) -> Optional[str]:
        """Materialize or reuse every ancestor folder; returns the leaf's parent id"""
        parent_id = None
        for depth, folder_name in enumerate(ancestor_names):
            key = DELIMITER.join(ancestor_names[:depth + 1])
            if key not in self.ids:
                folder = Node(folder_name, is_folder=True, parent_id=parent_id)
                self.created.append(folder)
                self.ids[key] = folder.id
            parent_id = self.ids[key]
        return parent_id
