from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
import uvicorn
import base64
import logging
from typing import Any, Dict, Optional

from . import config
from .archive_codec import archive_filename
from .error_handling import (
    setup_logging,
    handle_error,
    log_operation,
    WorkspaceError,
)
from .file_picker import PickedFile
from .github_client import GitHubClient
from .persistence import PersistenceStore
from .workspace import Workspace

logger = logging.getLogger(__name__)

app = FastAPI()
_workspace: Optional[Workspace] = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_workspace() -> Workspace:
    global _workspace
    if _workspace is None:
        _workspace = Workspace.open(PersistenceStore())
    return _workspace


def set_workspace(workspace: Optional[Workspace]):
    global _workspace
    _workspace = workspace


def snapshot(workspace: Workspace) -> Dict[str, Any]:
    data = workspace.state()
    data["saveStatus"] = workspace.store.status
    data["isSyncing"] = workspace.is_syncing
    data["log"] = [line.to_dict() for line in workspace.log]
    return data


@app.get("/health")
async def health_check():
    """Simple health check endpoint"""
    return {"status": "ok", "service": "workspacegraph"}


@app.get("/export")
async def export_bundle():
    data = get_workspace().export_archive()
    return Response(
        content=data,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{archive_filename()}"'},
    )


async def dispatch(workspace: Workspace, command: str, params: Dict[str, Any]) -> Any:
    if command == "get_state":
        return snapshot(workspace)

    elif command == "create_file":
        node = workspace.create_file(params["name"], params.get("language"), params.get("parentId"))
        return node.to_dict()

    elif command == "create_folder":
        return workspace.create_folder(params["name"], params.get("parentId")).to_dict()

    elif command == "delete_node":
        return {"removed": workspace.delete_node(params["id"])}

    elif command == "toggle_folder":
        return {"expanded": workspace.toggle_folder(params["id"])}

    elif command == "edit_content":
        return workspace.edit_content(params["id"], params["content"]).to_dict()

    elif command == "select_file":
        return {"selected": workspace.select_file(params["id"])}

    elif command == "close_tab":
        workspace.close_tab(params["id"])
        return {"openIds": workspace.open_ids}

    elif command == "load_template":
        workspace.load_template(params.get("template", "html"))
        return snapshot(workspace)

    elif command == "insert_code":
        workspace.insert_code(params["code"])
        return workspace.active_file.to_dict()

    elif command == "generate_gitignore":
        return workspace.generate_gitignore().to_dict()

    elif command == "export_archive":
        data = workspace.export_archive()
        return {"filename": archive_filename(), "data": base64.b64encode(data).decode("ascii")}

    elif command == "import_archive":
        nodes = await workspace.import_archive(
            base64.b64decode(params["data"]), params.get("name", "archive.zip")
        )
        return {"imported": [n.to_dict() for n in nodes]}

    elif command == "import_files":
        picked = [
            PickedFile(f["path"], base64.b64decode(f["data"]))
            for f in params["files"]
        ]
        nodes = await workspace.import_files(picked)
        return {"imported": [n.to_dict() for n in nodes]}

    elif command == "import_repository":
        async with GitHubClient(params.get("token") or config.GITHUB_TOKEN or None) as client:
            nodes = await workspace.import_repository(client, params["repository"])
        return {"imported": [n.to_dict() for n in nodes]}

    elif command == "deploy":
        token = params.get("token") or config.GITHUB_TOKEN
        async with GitHubClient(token) as client:
            result = await workspace.deploy(
                client, token, params.get("name", config.DEFAULT_PROJECT_NAME)
            )
        return {"url": result.url, "name": result.name}

    raise WorkspaceError(f"Unknown command: {command}")


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    logger.debug("New WebSocket connection attempt...")
    await websocket.accept()
    workspace = get_workspace()
    try:
        while True:
            try:
                data = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except Exception as e:
                await websocket.send_json(handle_error(logger, e, "websocket_communication"))
                continue

            command = None
            try:
                command = data.get("command")
                params = data.get("params") or {}
                log_operation(logger, command, **{k: v for k, v in params.items() if k not in ("data", "files", "token")})
                result = await dispatch(workspace, command, params)
                await websocket.send_json({"type": "success", "data": result})
            except WebSocketDisconnect:
                raise
            except Exception as e:
                await websocket.send_json(handle_error(logger, e, command or "unknown"))
    except WebSocketDisconnect:
        logger.info("WebSocket connection closed")


def main():
    setup_logging()
    logger.info(f"Starting server on http://{config.HOST}:{config.PORT}")
    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    main()
