import os

# Durable snapshot slot
STATE_DIR = os.environ.get(
    "WORKSPACEGRAPH_STATE_DIR",
    os.path.join(os.path.expanduser("~"), ".workspacegraph"),
)
STORAGE_KEY = os.environ.get("WORKSPACEGRAPH_STORAGE_KEY", "hub_vault_v8")
SAVE_DELAY = float(os.environ.get("WORKSPACEGRAPH_SAVE_DELAY", "0.8"))

# Remote repository API
GITHUB_API = os.environ.get("WORKSPACEGRAPH_GITHUB_API", "https://api.github.com")
GITHUB_TOKEN = os.environ.get("WORKSPACEGRAPH_GITHUB_TOKEN", "")
HTTP_TIMEOUT = float(os.environ.get("WORKSPACEGRAPH_HTTP_TIMEOUT", "30"))
# Token handed out by the demo login; never valid against the remote
PLACEHOLDER_TOKEN = "li_neural_access_v8"
DEFAULT_PROJECT_NAME = "workspace-project"
REPO_DESCRIPTION = "Exported from a workspacegraph workspace"

# Service
HOST = os.environ.get("WORKSPACEGRAPH_HOST", "127.0.0.1")
PORT = int(os.environ.get("WORKSPACEGRAPH_PORT", "8000"))
LOG_FILE = os.environ.get("WORKSPACEGRAPH_LOG_FILE", "workspacegraph.log")
