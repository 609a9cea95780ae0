"""
Pytest configuration and shared fixtures for rsworktree tests.
"""

import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Generator, Optional, Sequence

import pytest

from rsworktree.models.hooks import HookContext
from rsworktree.models.placement import PaneInfo, WindowInfo
from rsworktree.models.worktree import ResolvedWorktree


@pytest.fixture
def temp_directory() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir).resolve()


@pytest.fixture
def temp_dir(temp_directory: Path) -> Path:
    """Alias for temp_directory."""
    return temp_directory


@pytest.fixture
def git_repo(temp_directory: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository with one commit."""
    repo_path = temp_directory / "test-repo"
    repo_path.mkdir()

    subprocess.run(["git", "init", "-b", "main"], cwd=repo_path, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@example.com"],
        cwd=repo_path,
        capture_output=True
    )
    subprocess.run(
        ["git", "config", "user.name", "Test User"],
        cwd=repo_path,
        capture_output=True
    )

    readme = repo_path / "README.md"
    readme.write_text("# Test Repository\n")

    subprocess.run(["git", "add", "."], cwd=repo_path, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=repo_path,
        capture_output=True
    )

    yield repo_path


# Worktree tree fixtures


def make_fake_worktree(root: Path, relative: str) -> Path:
    """Create a directory that looks like a linked worktree (has a .git file)."""
    path = root / relative
    path.mkdir(parents=True, exist_ok=True)
    (path / ".git").write_text(f"gitdir: /nonexistent/.git/worktrees/{path.name}\n")
    return path


@pytest.fixture
def worktrees_root(temp_directory: Path) -> Path:
    """An empty worktrees root directory."""
    root = temp_directory / "project" / ".rsworktree"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def make_worktree(worktrees_root: Path) -> Callable[[str], Path]:
    """Factory creating fake worktrees under worktrees_root."""
    return lambda relative: make_fake_worktree(worktrees_root, relative)


@pytest.fixture
def resolved_worktree(make_worktree) -> ResolvedWorktree:
    """A resolved worktree `feature/login` under the worktrees root."""
    path = make_worktree("feature/login")
    return ResolvedWorktree(name="feature/login", path=path)


@pytest.fixture
def hook_context(temp_directory: Path) -> HookContext:
    """Hook context pointing at a temporary worktree directory."""
    worktree_path = temp_directory / "wt"
    worktree_path.mkdir()
    return HookContext(
        worktree_name="my-worktree",
        worktree_path=worktree_path,
        branch="feature/test",
        base_branch="main",
        base_path=temp_directory,
    )


# Scripted tmux topology


class FakeTopology:
    """
    In-memory TopologySource.

    `windows` maps window names to their panes in listing order. Windows
    get ids `@0`, `@1`, ... in that order, and are targeted by id the way
    tmux is. Every query and action is appended to `calls`.
    """

    ACTIONS = ("select_window", "select_pane", "split_window", "new_window")

    def __init__(self, current_window: str, windows: dict[str, list[PaneInfo]]):
        self.current_window = current_window
        self.windows = windows
        self.calls: list[tuple] = []
        self._next_pane = 100
        self.window_ids = {name: f"@{i}" for i, name in enumerate(windows)}

    def current_window_name(self) -> str:
        self.calls.append(("current_window_name",))
        return self.current_window

    def list_windows(self) -> list[WindowInfo]:
        self.calls.append(("list_windows",))
        return [WindowInfo(window_id=self.window_ids[name], name=name) for name in self.windows]

    def list_panes(self, window: Optional[str] = None) -> list[PaneInfo]:
        self.calls.append(("list_panes", window))
        name = self.current_window if window is None else self._name_of(window)
        return list(self.windows.get(name, []))

    def select_window(self, window_id: str) -> None:
        self.calls.append(("select_window", window_id))
        self.current_window = self._name_of(window_id)

    def select_pane(self, pane_id: str) -> None:
        self.calls.append(("select_pane", pane_id))

    def split_window(self, working_directory: Path, command: str, flag: str = "-h") -> None:
        self.calls.append(("split_window", working_directory, command, flag))
        self._add_pane(self.current_window, command)

    def new_window(self, name: str, working_directory: Path, command: Sequence[str]) -> None:
        self.calls.append(("new_window", name, working_directory, list(command)))
        self.windows[name] = []
        self.window_ids[name] = f"@{len(self.window_ids)}"
        self.current_window = name
        self._add_pane(name, command[0])

    def _name_of(self, window_id: str) -> str:
        """Window name for an `@N` id. A name given instead is an error."""
        for name, known_id in self.window_ids.items():
            if known_id == window_id:
                return name
        raise KeyError(f"no window with id {window_id}")

    def _add_pane(self, window: str, command: str) -> None:
        self._next_pane += 1
        self.windows.setdefault(window, []).append(
            PaneInfo(pane_id=f"%{self._next_pane}", current_command=command.split()[0])
        )

    @property
    def actions(self) -> list[str]:
        """Names of the state-changing calls, in order."""
        return [call[0] for call in self.calls if call[0] in self.ACTIONS]


@pytest.fixture
def make_topology() -> Callable[..., FakeTopology]:
    """Factory for FakeTopology instances."""
    return FakeTopology
