import base64
import io
import zipfile
import pytest
from fastapi.testclient import TestClient
from workspacegraph import server
from workspacegraph.persistence import PersistenceStore
from workspacegraph.workspace import Workspace

@pytest.fixture
def workspace(tmp_path):
    ws = Workspace.open(PersistenceStore(str(tmp_path), key="slot", save_delay=0.01))
    server.set_workspace(ws)
    yield ws
    server.set_workspace(None)

@pytest.fixture
def client(workspace):
    """Create test client"""
    with TestClient(server.app) as c:
        yield c

@pytest.fixture
def websocket(client):
    with client.websocket_connect("/ws") as ws:
        def call(command, **params):
            ws.send_json({"command": command, "params": params})
            return ws.receive_json()
        ws.call = call
        yield ws

class TestServer:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok", "service": "workspacegraph"}

    def test_export_download(self, client):
        response = client.get("/export")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        with zipfile.ZipFile(io.BytesIO(response.content)) as zf:
            assert zf.namelist() == ["index.html"]

    def test_get_state(self, websocket):
        response = websocket.call("get_state")
        assert response["type"] == "success"
        data = response["data"]
        assert data["activeId"] == "web-index"
        assert [f["name"] for f in data["files"]] == ["index.html"]
        assert data["saveStatus"] in ("saved", "saving")

    def test_create_and_delete(self, websocket, workspace):
        folder = websocket.call("create_folder", name="src")["data"]
        file = websocket.call("create_file", name="a.py", parentId=folder["id"])["data"]
        assert file["parentId"] == folder["id"]
        assert file["language"] == "python"

        removed = websocket.call("delete_node", id=folder["id"])["data"]["removed"]
        assert sorted(removed) == sorted([folder["id"], file["id"]])
        assert workspace.active_id is None

    def test_toggle_and_edit(self, websocket):
        folder = websocket.call("create_folder", name="src")["data"]
        assert websocket.call("toggle_folder", id=folder["id"])["data"] == {"expanded": False}
        edited = websocket.call("edit_content", id="web-index", content="<p>")["data"]
        assert edited["content"] == "<p>"

    def test_archive_roundtrip(self, websocket):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("src/", b"")
            zf.writestr("src/a.ts", "x")
        payload = base64.b64encode(buf.getvalue()).decode()

        imported = websocket.call("import_archive", data=payload, name="demo.zip")["data"]["imported"]
        assert [n["name"] for n in imported] == ["src", "a.ts"]

        exported = websocket.call("export_archive")["data"]
        with zipfile.ZipFile(io.BytesIO(base64.b64decode(exported["data"]))) as zf:
            assert sorted(zf.namelist()) == ["index.html", "src/a.ts"]

    def test_import_files(self, websocket):
        files = [{"path": "app/x.md", "data": base64.b64encode(b"# x").decode()}]
        imported = websocket.call("import_files", files=files)["data"]["imported"]
        assert [n["name"] for n in imported] == ["app", "x.md"]

    def test_deploy_placeholder_token(self, websocket, workspace):
        response = websocket.call("deploy", token="li_neural_access_v8")
        assert response["type"] == "error"
        assert response["details"]["type"] == "CredentialError"
        assert workspace.snapshots == []

    def test_error_handling(self, websocket):
        """Test error handling in WebSocket communication"""
        response = websocket.call("invalid_command")
        assert response["type"] == "error"
        assert "message" in response

        response = websocket.call("delete_node", id="missing")
        assert response["type"] == "error"
        assert response["details"]["node_id"] == "missing"

        response = websocket.call("import_repository", repository="not-a-repo")
        assert response["type"] == "error"

    def test_load_template(self, websocket):
        data = websocket.call("load_template", template="python")["data"]
        assert data["activeId"] == "py-main"

    @pytest.mark.parametrize("message", [
        {"command": "import_files", "params": {"files": ["not-a-dict"]}},
        {"command": "get_state", "params": [1]},
        {"command": "import_archive", "params": {"data": None}},
        ["not", "an", "object"],
    ])
    def test_malformed_message_keeps_connection(self, websocket, message):
        websocket.send_json(message)
        response = websocket.receive_json()
        assert response["type"] == "error"

        assert websocket.call("get_state")["type"] == "success"
