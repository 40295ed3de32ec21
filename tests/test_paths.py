import pytest
from workspacegraph.models import Node
from workspacegraph.node_graph import NodeGraph
from workspacegraph.paths import FolderMemo, build_path, decompose_path

@pytest.fixture
def graph():
    g = NodeGraph()
    a = g.create_folder("a")
    b = g.create_folder("b", a.id)
    g.create_file("c.py", parent_id=b.id)
    g.create_file("top.md")
    return g

def ancestor_names(graph, node):
    names = []
    current = graph.get(node.parent_id)
    while current is not None:
        names.insert(0, current.name)
        current = graph.get(current.parent_id)
    return names

class TestPathResolver:
    def test_build_path(self, graph):
        paths = sorted(build_path(n, graph) for n in graph)
        assert paths == ["a", "a/b", "a/b/c.py", "top.md"]

    def test_decompose_reassembles(self, graph):
        for node in graph:
            leaf, ancestors = decompose_path(build_path(node, graph))
            assert leaf == node.name
            assert ancestors == ancestor_names(graph, node)

    def test_missing_parent_is_root(self):
        g = NodeGraph([Node("orphan.txt", parent_id="gone")])
        assert build_path(g.get(next(iter(g.nodes))), g) == "orphan.txt"

    def test_cycle_terminates(self):
        g = NodeGraph([
            Node("x", is_folder=True, node_id="x", parent_id="y"),
            Node("y", is_folder=True, node_id="y", parent_id="x"),
        ])
        assert build_path(g.get("x"), g) == "y/x"

    @pytest.mark.parametrize("path,expected", [
        ("src/lib/a.ts", ("a.ts", ["src", "lib"])),
        ("src/", ("src", [])),
        ("/a//b", ("b", ["a"])),
        ("file.txt", ("file.txt", [])),
        ("", ("", [])),
    ])
    def test_decompose_path(self, path, expected):
        assert decompose_path(path) == expected

class TestFolderMemo:
    def test_ancestor_created_once(self):
        memo = FolderMemo()
        first = memo.ensure_folders(["app", "src"])
        second = memo.ensure_folders(["app", "src"])
        other = memo.ensure_folders(["app"])

        assert first == second
        assert [f.name for f in memo.created] == ["app", "src"]
        assert memo.created[1].parent_id == other == memo.created[0].id

    def test_root_has_no_parent(self):
        memo = FolderMemo()
        assert memo.ensure_folders([]) is None
        assert memo.created == []
