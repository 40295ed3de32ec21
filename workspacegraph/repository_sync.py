import base64
import logging
import random
import re
from typing import Iterable, List, NamedTuple, Optional

from . import config
from .error_handling import CredentialError, EmptyResultError
from .github_client import GitHubClient
from .models import Node
from .utils import language_for_name

logger = logging.getLogger(__name__)


class DeployResult(NamedTuple):
    url: str
    name: str


def check_credentials(token: Optional[str]):
    """Reject missing or placeholder tokens before anything touches the network"""
    if not token or token == config.PLACEHOLDER_TOKEN:
        raise CredentialError(
            'A valid personal access token with "repo" scope is required.'
        )


def normalize_repo_name(project_name: Optional[str]) -> str:
    """
    Examples:
        - 'My Project' -> 'my-project'
        - 'a_b.c' -> 'abc'
    """
    name = re.sub(r"\s+", "-", project_name or config.DEFAULT_PROJECT_NAME).lower()
    return re.sub(r"[^a-z0-9-]", "", name)


def final_repo_name(project_name: Optional[str]) -> str:
    return f"{normalize_repo_name(project_name)}-{random.randint(0, 9999)}"


async def import_repository(client: GitHubClient, repo_id: str) -> List[Node]:
    """
    Walk a remote repository and return one root-level File node per file.

    Directories are only traversed, never materialized: each file's display
    name is its full remote path. Listings and downloads run one at a time.

    Raises:
        ValueError: If repo_id is not 'owner/repo'
        RemoteRequestError: If any listing or download fails
        EmptyResultError: If no files were found
    """
    if "/" not in repo_id.strip("/"):
        raise ValueError("Repository must be given as 'owner/repo'")
    repo_id = repo_id.strip("/")

    file_nodes: List[Node] = []

    async def fetch_path(path: str = ""):
        for item in await client.list_contents(repo_id, path):
            if item.get("type") == "file":
                content = await client.fetch_raw(item["download_url"], item["path"])
                file_nodes.append(Node(
                    item["path"],
                    content=content,
                    language=language_for_name(item["name"]),
                ))
            elif item.get("type") == "dir":
                await fetch_path(item["path"])

    await fetch_path()

    if not file_nodes:
        raise EmptyResultError(
            "Repository appears empty or inaccessible.", {"repository": repo_id}
        )
    logger.info(f"Fetched {len(file_nodes)} file(s) from {repo_id}")
    return file_nodes


async def deploy_workspace(
    client: GitHubClient,
    token: Optional[str],
    nodes: Iterable[Node],
    project_name: Optional[str] = None,
) -> DeployResult:
    """
    Create a new repository and upload every non-empty file into it.

    Files are addressed by their bare name, not their folder path, so two
    nested files with the same name overwrite each other remotely. A failed
    upload leaves the created repository in place.
    """
    check_credentials(token)

    repo_name = final_repo_name(project_name)
    repo_data = await client.create_repository(repo_name, config.REPO_DESCRIPTION)
    owner = repo_data["owner"]["login"]

    uploaded = 0
    for node in nodes:
        if node.is_folder or not node.content:
            continue
        content = base64.b64encode(node.content.encode("utf-8")).decode("ascii")
        await client.put_file(owner, repo_name, node.name, content, f"Sync: {node.name}")
        uploaded += 1

    logger.info(f"Uploaded {uploaded} file(s) to {owner}/{repo_name}")
    return DeployResult(repo_data.get("html_url", ""), repo_name)


def gitignore_template(languages: Iterable[str]) -> str:
    languages = set(languages)
    template = "# Auto-generated .gitignore\n\n"
    template += ".DS_Store\nThumbs.db\n.env\n.env.local\n.env.development.local\n.env.test.local\n.env.production.local\n\n"

    if "javascript" in languages or "typescript" in languages:
        template += "# Node.js\nnode_modules/\nnpm-debug.log*\nyarn-debug.log*\nyarn-error.log*\n.pnpm-debug.log*\n.npm/\nbuild/\ndist/\n.next/\n\n"

    if "python" in languages:
        template += "# Python\n__pycache__/\n*.py[cod]\n*$py.class\n.venv/\nvenv/\nENV/\n.pytest_cache/\n.coverage\nhtmlcov/\n\n"

    if "java" in languages:
        template += "# Java\n*.class\n*.log\n*.jar\n*.war\n*.ear\n.gradle/\nbuild/\nbin/\n\n"

    return template
