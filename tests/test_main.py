import os
import sys

from fastapi.testclient import TestClient # type: ignore
from git import Actor, Repo  # type: ignore

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from docgen.main import app

client = TestClient(app)

DEV = Actor("Dev One", "dev@example.com")


def make_repo(root):
    (root / "Hello.java").write_text("package demo;\n\n/** Says hello. */\npublic class Hello {\n    void hi() {}\n}\n")
    repo = Repo.init(root)
    repo.index.add(["Hello.java"])
    repo.index.commit("Add Hello", author=DEV, committer=DEV)
    repo.close()


def test_parse_endpoint():
    res = client.post("/parse", json={"code": "package p;\nimport java.util.List;\nclass A { List<String> names() { return null; } }"})
    assert res.status_code == 200
    data = res.json()
    assert data["parsed"] is True
    assert data["package"] == "p"
    assert data["imports"] == ["java.util.List"]
    assert data["types"][0]["qualified_name"] == "p.A"
    assert data["types"][0]["methods"][0]["return_type"] == "List<String>"


def test_parse_endpoint_reports_parse_error():
    res = client.post("/parse", json={"code": "class {", "filename": "Bad.java"})
    assert res.status_code == 200
    data = res.json()
    assert data["parsed"] is False
    assert data["parse_error"].startswith("Parse failed")
    assert data["types"] == []


def test_analyze_endpoint(tmp_path):
    make_repo(tmp_path)
    res = client.post("/analyze", json={"project_path": str(tmp_path)})
    assert res.status_code == 200
    data = res.json()
    assert data["connected"] is True
    assert data["summary"]["classes"] == 1
    assert data["files"][0]["path"] == "Hello.java"
    assert data["files"][0]["types"][0]["javadoc"] == "Says hello."
    assert data["commits"][0]["subject"] == "Add Hello"
    assert data["commits"][0]["file_changes"][0]["change_kind"] == "add"
    assert data["git"]["commits"] == 1


def test_analyze_bad_path(tmp_path):
    res = client.post("/analyze", json={"project_path": str(tmp_path / "nope")})
    assert res.status_code == 400


def test_history_endpoint(tmp_path):
    make_repo(tmp_path)
    res = client.post("/history", json={"repo_path": str(tmp_path), "author": "dev@"})
    assert res.status_code == 200
    data = res.json()
    assert data["connected"] is True
    assert [c["subject"] for c in data["commits"]] == ["Add Hello"]
    assert data["commits"][0]["is_merge"] is False

    res = client.post("/history", json={"repo_path": str(tmp_path), "path": "Other.java"})
    assert res.json()["commits"] == []


def test_history_not_a_repository(tmp_path):
    res = client.post("/history", json={"repo_path": str(tmp_path)})
    assert res.status_code == 200
    data = res.json()
    assert data["connected"] is False
    assert data["error"].startswith("Could not open repository")
