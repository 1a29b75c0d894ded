"""Shared test fixtures for steer tests."""

from __future__ import annotations

import pathlib

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch) -> pathlib.Path:
    """Point HOME and CODEX_HOME into the temp dir so real config is never read."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("CODEX_HOME", str(home / ".codex"))
    return home


@pytest.fixture
def agent_home(isolated_home: pathlib.Path) -> pathlib.Path:
    """The CODEX_HOME directory (created)."""
    path = isolated_home / ".codex"
    path.mkdir()
    return path


@pytest.fixture
def repo(tmp_path: pathlib.Path) -> pathlib.Path:
    """A temporary repository root marked by a ``.git`` file."""
    root = tmp_path / "repo"
    root.mkdir()
    (root / ".git").write_text("gitdir: /tmp/fake\n")
    return root


@pytest.fixture
def global_dir(agent_home: pathlib.Path) -> pathlib.Path:
    path = agent_home / "steering"
    path.mkdir()
    return path


@pytest.fixture
def project_dir(repo: pathlib.Path) -> pathlib.Path:
    path = repo / ".codex" / "steering"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_file():
    """Factory writing text or bytes to ``directory/name``."""

    def _write(directory: pathlib.Path, name: str, content: str | bytes) -> pathlib.Path:
        path = directory / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
        return path

    return _write
