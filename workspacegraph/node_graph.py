import logging
from typing import Dict, Iterable, List, Optional, Set

from .error_handling import GraphOperationError
from .models import Node

logger = logging.getLogger(__name__)


class NodeGraph:
    """
    Flat, id-indexed collection of File/Folder nodes linked by parent_id.

    There is no child-list index: "children of X" is answered by scanning
    every node's parent_id.
    """

    def __init__(self, nodes: Optional[Iterable[Node]] = None):
        self.nodes: Dict[str, Node] = {}  # id -> Node, in insertion order
        if nodes:
            self.extend(nodes)

    def __len__(self):
        return len(self.nodes)

    def __iter__(self):
        return iter(list(self.nodes.values()))

    def __contains__(self, node_id):
        return node_id in self.nodes

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def require(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            raise GraphOperationError(f"Node not found: {node_id}", {"node_id": node_id})
        return node

    def add(self, node: Node) -> Node:
        if node.id in self.nodes:
            raise GraphOperationError(f"Duplicate node id: {node.id}", {"node_id": node.id})
        self.nodes[node.id] = node
        return node

    def extend(self, nodes: Iterable[Node]):
        for node in nodes:
            self.add(node)

    def replace(self, nodes: Iterable[Node]):
        """Swap the whole node set (template load, snapshot restore)"""
        self.nodes = {}
        self.extend(nodes)

    def create_file(self, name: str, language: Optional[str] = None,
                    parent_id: Optional[str] = None) -> Node:
        return self.add(Node(name, parent_id=parent_id, language=language))

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> Node:
        return self.add(Node(name, is_folder=True, parent_id=parent_id, expanded=True))

    def descendants(self, node_id: str) -> Set[str]:
        """Transitive descendant ids, found by repeated filtering on parent_id"""
        found: Set[str] = set()
        frontier = {node_id}
        while frontier:
            children = {n.id for n in self.nodes.values()
                        if n.parent_id in frontier and n.id not in found}
            found.update(children)
            frontier = children
        found.discard(node_id)
        return found

    def delete_subtree(self, node_id: str) -> Set[str]:
        """Remove a node and every transitive descendant, returning the removed ids"""
        self.require(node_id)
        removed = self.descendants(node_id)
        removed.add(node_id)
        for rid in removed:
            del self.nodes[rid]
        logger.debug("Deleted %d node(s) under %s", len(removed), node_id)
        return removed

    def toggle_folder(self, node_id: str) -> bool:
        node = self.require(node_id)
        node.expanded = not node.expanded
        return node.expanded

    def edit_content(self, node_id: str, content: str) -> Node:
        node = self.require(node_id)
        if node.is_folder:
            raise GraphOperationError(f"Cannot edit folder content: {node.name}", {"node_id": node_id})
        node.content = content
        return node

    def children(self, parent_id: Optional[str]) -> List[Node]:
        """Direct children, folders first then by name"""
        found = [n for n in self.nodes.values() if n.parent_id == parent_id]
        return sorted(found, key=lambda n: (not n.is_folder, n.name))

    def files(self) -> List[Node]:
        return [n for n in self.nodes.values() if not n.is_folder]

    def folders(self) -> List[Node]:
        return [n for n in self.nodes.values() if n.is_folder]

    def find_file(self, name: str) -> Optional[Node]:
        """First File with this leaf name, at any depth"""
        return next(
            (n for n in self.nodes.values() if not n.is_folder and n.name == name),
            None
        )

    def languages(self) -> Set[str]:
        return {n.language for n in self.files()}

    def to_list(self) -> List[dict]:
        """Convert graph to the flat node list used by the durable slot"""
        return [n.to_dict() for n in self.nodes.values()]

    @classmethod
    def from_list(cls, data: Iterable[dict]) -> "NodeGraph":
        return cls(Node.from_dict(item) for item in data)
