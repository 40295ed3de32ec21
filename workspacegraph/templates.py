from typing import List

from .models import Node

HTML_INDEX = """<!DOCTYPE html>
<html>
<head>
  <title>Workspace Preview</title>
<style>
  body { background: #020408; color: #6366f1; display: flex; flex-direction: column; justify-content: center; align-items: center; height: 100vh; font-family: sans-serif; margin: 0; }
  h1 { font-weight: 900; letter-spacing: -2px; font-size: 4rem; text-transform: uppercase; margin: 0; }
  p { font-size: 0.8rem; text-transform: uppercase; letter-spacing: 4px; opacity: 0.5; }
</style>
</head>
<body>
  <h1>Workspace</h1>
  <p>Ready</p>
</body>
</html>"""

PYTHON_MAIN = """print("Workspace active")


def handshake():
    print("Handshaking with runtime...")


if __name__ == "__main__":
    handshake()"""

REACT_APP = """import React from "react";

export const App = () => {
  return (
    <div className="workspace-ui">
      <h1>Workspace</h1>
      <p>Environment initialized.</p>
    </div>
  );
};"""

# name -> (id, file name, language, content)
TEMPLATES = {
    "html": ("web-index", "index.html", "html", HTML_INDEX),
    "python": ("py-main", "main.py", "python", PYTHON_MAIN),
    "react": ("tsx-main", "App.tsx", "typescript", REACT_APP),
}

DEFAULT_TEMPLATE = "html"


def template_nodes(template: str) -> List[Node]:
    """Single-file starter workspace; unknown names fall back to html"""
    node_id, name, language, content = TEMPLATES.get(template, TEMPLATES[DEFAULT_TEMPLATE])
    return [Node(name, content=content, language=language, node_id=node_id)]
