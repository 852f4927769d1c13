import json
import subprocess
from pathlib import Path
from unittest.mock import patch

from rustlings.project import Crate, RustAnalyzerProject


def test_crate_defaults():
    crate = Crate("exercises/a.rs")
    assert crate.to_dict() == {
        "root_module": "exercises/a.rs",
        "edition": "2021",
        "deps": [],
        "cfg": ["test"],
    }


def test_add_path_only_rust_files():
    project = RustAnalyzerProject()
    project.add_path("exercises/a.rs")
    project.add_path("exercises/README.md")
    project.add_path("exercises/dir")
    assert [c.root_module for c in project.crates] == [str(Path("exercises/a.rs"))]


def test_exercises_to_json_recurses(tmp_path):
    root = tmp_path / "exercises"
    (root / "intro").mkdir(parents=True)
    (root / "intro" / "intro1.rs").write_text("")
    (root / "top.rs").write_text("")
    (root / "notes.md").write_text("")
    project = RustAnalyzerProject()
    project.exercises_to_json(root)
    modules = {c.root_module for c in project.crates}
    assert modules == {str(root / "intro" / "intro1.rs"), str(root / "top.rs")}


def test_write_to_disk_round_trip(tmp_path):
    project = RustAnalyzerProject(sysroot_src="/sys")
    project.add_path("a.rs")
    target = tmp_path / "rust-project.json"
    project.write_to_disk(target)
    assert json.loads(target.read_text()) == project.to_dict()
    assert " " not in target.read_text()


def test_sysroot_from_environment(monkeypatch):
    monkeypatch.setenv("RUST_SRC_PATH", "/custom/src")
    project = RustAnalyzerProject()
    with patch("rustlings.project.subprocess.run") as run:
        project.get_sysroot_src()
    assert project.sysroot_src == "/custom/src"
    assert run.call_count == 0


def test_sysroot_from_rustc(monkeypatch, capsys):
    monkeypatch.delenv("RUST_SRC_PATH", raising=False)
    done = subprocess.CompletedProcess(args=[], returncode=0, stdout=b"/opt/toolchain\n", stderr=b"")
    project = RustAnalyzerProject()
    with patch("rustlings.project.subprocess.run", return_value=done):
        project.get_sysroot_src()
    path = Path(project.sysroot_src)
    assert path.parts[-5:] == ("lib", "rustlib", "src", "rust", "library")
    assert path.parents[4] == Path("/opt/toolchain")
    assert "Determined toolchain: /opt/toolchain" in capsys.readouterr().out