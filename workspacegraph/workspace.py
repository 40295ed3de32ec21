import asyncio
import logging
from typing import Any, Dict, List, Optional

from . import config
from .archive_codec import export_archive, import_archive
from .error_handling import CredentialError, GraphOperationError
from .file_picker import PickedFile, import_picked_files
from .github_client import GitHubClient
from .interfaces import CodeRunner
from .models import LogLine, Node, Snapshot
from .node_graph import NodeGraph
from .persistence import PersistenceStore
from .repository_sync import (
    DeployResult,
    check_credentials,
    deploy_workspace,
    gitignore_template,
    import_repository,
)
from .templates import DEFAULT_TEMPLATE, template_nodes

logger = logging.getLogger(__name__)


class Workspace:
    """
    The single owner of workspace state: graph, selection, open tabs,
    history and the operation log.

    Synchronous operations mutate in place. Imports and deploys are
    coroutines that run one at a time under a single-writer lock and only
    touch the graph once their external work has succeeded.
    """

    def __init__(self, store: Optional[PersistenceStore] = None):
        self.store = store or PersistenceStore()
        self.graph = NodeGraph()
        self.active_id: Optional[str] = None
        self.open_ids: List[str] = []
        self.snapshots: List[Snapshot] = []
        self.log: List[LogLine] = []
        self.is_syncing = False
        self._lock = asyncio.Lock()

    @classmethod
    def open(cls, store: Optional[PersistenceStore] = None) -> "Workspace":
        """Restore from the durable slot, or start from the html template"""
        workspace = cls(store)
        data = workspace.store.load()
        if data is None:
            workspace.load_template(DEFAULT_TEMPLATE)
            return workspace
        try:
            workspace.graph = NodeGraph.from_list(data.get("files") or [])
            workspace.snapshots = [Snapshot.from_dict(s) for s in data.get("snapshots") or []]
        except (KeyError, TypeError, AttributeError, GraphOperationError) as e:
            logger.warning(f"Stored workspace is unusable, loading template: {e}")
            workspace.snapshots = []
            workspace.load_template(DEFAULT_TEMPLATE)
            return workspace
        workspace.active_id = data.get("activeId")
        workspace.open_ids = list(data.get("openIds") or [])
        return workspace

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def state(self) -> Dict[str, Any]:
        return {
            "files": self.graph.to_list(),
            "activeId": self.active_id,
            "openIds": list(self.open_ids),
            "snapshots": [s.to_dict() for s in self.snapshots],
        }

    def commit(self):
        self.store.notify(self.state)

    @property
    def active_file(self) -> Optional[Node]:
        return self.graph.get(self.active_id)

    def append_log(self, type: str, text: str):
        self.log.append(LogLine(type, text))

    def _open(self, node_id: str):
        if node_id not in self.open_ids:
            self.open_ids.append(node_id)

    # ------------------------------------------------------------------
    # Graph operations
    # ------------------------------------------------------------------

    def create_file(self, name: str, language: Optional[str] = None,
                    parent_id: Optional[str] = None) -> Node:
        node = self.graph.create_file(name, language, parent_id)
        self.active_id = node.id
        self._open(node.id)
        self.commit()
        return node

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> Node:
        node = self.graph.create_folder(name, parent_id)
        self.commit()
        return node

    def delete_node(self, node_id: str) -> List[str]:
        removed = self.graph.delete_subtree(node_id)
        self.open_ids = [i for i in self.open_ids if i not in removed]
        if self.active_id in removed:
            self.active_id = None
        self.commit()
        return sorted(removed)

    def toggle_folder(self, node_id: str) -> bool:
        expanded = self.graph.toggle_folder(node_id)
        self.commit()
        return expanded

    def edit_content(self, node_id: str, content: str) -> Node:
        node = self.graph.edit_content(node_id, content)
        self.commit()
        return node

    def edit_active(self, content: str):
        """Editor surface change callback"""
        if self.active_id is None:
            return
        self.edit_content(self.active_id, content)

    def select_file(self, node_id: str) -> bool:
        node = self.graph.require(node_id)
        if node.is_folder:
            return False
        self.active_id = node.id
        self._open(node.id)
        self.commit()
        return True

    def close_tab(self, node_id: str):
        self.open_ids = [i for i in self.open_ids if i != node_id]
        self.commit()

    def load_template(self, template: str):
        nodes = template_nodes(template)
        self.graph.replace(nodes)
        self.open_ids = [n.id for n in nodes]
        self.active_id = nodes[0].id
        self.commit()

    def insert_code(self, code: str):
        """Assistant surface: append code to the active file"""
        node = self.active_file
        if node is None or node.is_folder:
            raise GraphOperationError("No active file to insert code into")
        self.edit_content(node.id, node.content + "\n" + code)

    def generate_gitignore(self) -> Node:
        self.append_log("info", "[Shield] Scanning workspace for languages...")
        content = gitignore_template(self.graph.languages())
        existing = self.graph.find_file(".gitignore")
        if existing is not None:
            existing.content = content
            self.active_id = existing.id
            self._open(existing.id)
            self.append_log("success", "[Shield] Existing .gitignore updated.")
            self.commit()
            return existing
        node = self.graph.add(Node(".gitignore", content=content, language="plaintext"))
        self.active_id = node.id
        self._open(node.id)
        self.append_log("success", "[Shield] New .gitignore generated.")
        self.commit()
        return node

    def run_active(self, runner: CodeRunner) -> bool:
        node = self.active_file
        if node is None or node.is_folder:
            return False
        try:
            for line in runner.run(node.content, node.language, node.name):
                self.log.append(line)
        except Exception as e:
            self.append_log("error", f"Execution failed: {e}")
            return False
        return True

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_archive(self) -> bytes:
        self.append_log("info", "[System] Compressing workspace into bundle...")
        try:
            data = export_archive(self.graph)
        except Exception as e:
            self.append_log("error", f"Export Failed: {e}")
            raise
        self.append_log("success", "[System] Workspace bundle exported successfully.")
        return data

    def _commit_imported(self, nodes: List[Node], open_all: bool = False):
        self.graph.extend(nodes)
        files = [n for n in nodes if not n.is_folder]
        if files:
            self.active_id = files[0].id
            for node in files if open_all else files[:1]:
                self._open(node.id)
        self.commit()

    async def import_archive(self, data: bytes, name: str = "archive.zip") -> List[Node]:
        async with self._lock:
            self.is_syncing = True
            self.append_log("info", f"[System] Extracting ZIP: {name}...")
            try:
                nodes = import_archive(data)
            except Exception as e:
                self.append_log("error", f"Import Failed: {e}")
                raise
            finally:
                self.is_syncing = False
            self._commit_imported(nodes)
            self.append_log("success", f"[System] Imported {len(nodes)} nodes successfully.")
            return nodes

    async def import_files(self, picked: List[PickedFile]) -> List[Node]:
        async with self._lock:
            self.is_syncing = True
            try:
                nodes = import_picked_files(picked)
            except Exception as e:
                self.append_log("error", f"Import Failed: {e}")
                raise
            finally:
                self.is_syncing = False
            if nodes:
                self._commit_imported(nodes)
                self.append_log("success", f"[System] Imported {len(nodes)} nodes successfully.")
            return nodes

    async def import_repository(self, client: GitHubClient, repo_id: str) -> List[Node]:
        async with self._lock:
            self.is_syncing = True
            self.append_log("info", f"[Git] PULL: Initiating recursive fetch for {repo_id}...")
            try:
                nodes = await import_repository(client, repo_id)
            except Exception as e:
                self.append_log("error", f"Import Failed: {e}")
                raise
            finally:
                self.is_syncing = False
            self._commit_imported(nodes, open_all=True)
            self.append_log("success", f"[System] Successfully imported {len(nodes)} modules from GitHub.")
            return nodes

    async def deploy(self, client: GitHubClient, token: Optional[str],
                     project_name: str = config.DEFAULT_PROJECT_NAME) -> DeployResult:
        try:
            check_credentials(token)
        except CredentialError as e:
            self.append_log("error", f"[Git] {e}")
            raise

        async with self._lock:
            self.is_syncing = True
            self.append_log("info", "[Git] Handshaking with GitHub...")
            try:
                result = await deploy_workspace(client, token, self.graph.files(), project_name)
            except Exception as e:
                self.append_log("error", f"Deployment Failed: {e}")
                self.store.mark_error()
                raise
            finally:
                self.is_syncing = False
            self.append_log("success", f"[System] Repository pushed to {result.url}")
            self.snapshots.insert(0, Snapshot(f"Pushed to GitHub: {result.name}"))
            self.commit()
            return result
