import time
from typing import Any, Dict, Optional

from .utils import language_for_name, new_node_id

FOLDER_LANGUAGE = "folder"


class Node:
    __slots__ = ['id', 'name', 'is_folder', 'parent_id', 'content', 'expanded', 'language']

    def __init__(self, name, is_folder=False, parent_id=None, content="",
                 language=None, node_id=None, expanded=True):
        self.id = node_id or new_node_id("folder" if is_folder else "")
        self.name = name
        self.is_folder = is_folder
        self.parent_id = parent_id
        self.content = "" if is_folder else content
        self.expanded = expanded
        if is_folder:
            self.language = FOLDER_LANGUAGE
        else:
            self.language = language or language_for_name(name)

    def __repr__(self):
        kind = "Folder" if self.is_folder else "File"
        return f"{kind}(id={self.id!r}, name={self.name!r}, parent_id={self.parent_id!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the browser client's key layout"""
        return {
            "id": self.id,
            "name": self.name,
            "language": self.language,
            "content": self.content,
            "isFolder": self.is_folder,
            "isOpen": self.expanded,
            "parentId": self.parent_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            data["name"],
            is_folder=bool(data.get("isFolder", False)),
            parent_id=data.get("parentId"),
            content=data.get("content") or "",
            language=data.get("language"),
            node_id=data["id"],
            expanded=bool(data.get("isOpen", True)),
        )


class Snapshot:
    __slots__ = ['id', 'message', 'timestamp', 'branch']

    def __init__(self, message: str, timestamp: Optional[int] = None,
                 snapshot_id: Optional[str] = None, branch: str = "main"):
        self.id = snapshot_id or new_node_id()
        self.message = message
        self.timestamp = timestamp if timestamp is not None else int(time.time() * 1000)
        self.branch = branch

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "timestamp": self.timestamp,
            "branch": self.branch,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        return cls(
            data.get("message", ""),
            timestamp=data.get("timestamp"),
            snapshot_id=data.get("id"),
            branch=data.get("branch", "main"),
        )


class LogLine:
    __slots__ = ['type', 'text']

    def __init__(self, type: str, text: str):
        self.type = type  # info | success | error | input | output
        self.text = text

    def __eq__(self, other):
        return isinstance(other, LogLine) and (self.type, self.text) == (other.type, other.text)

    def __repr__(self):
        return f"LogLine({self.type!r}, {self.text!r})"

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "text": self.text}
