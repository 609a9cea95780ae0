"""Tests for the tmux topology module."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import libtmux.exc
import pytest

from rsworktree.core.tmux_manager import (
    PANE_FORMAT,
    WINDOW_FORMAT,
    TmuxActionError,
    TmuxError,
    TmuxInspectionError,
    TmuxTopology,
    is_inside_tmux,
)
from rsworktree.models.placement import PaneInfo, WindowInfo


def cmd_result(stdout=None, stderr=None, returncode=0) -> MagicMock:
    """Fake libtmux `Server.cmd` result."""
    return MagicMock(stdout=stdout or [], stderr=stderr or [], returncode=returncode)


@pytest.fixture
def mock_server() -> MagicMock:
    server = MagicMock()
    server.cmd.return_value = cmd_result()
    return server


@pytest.fixture
def topology(mock_server: MagicMock) -> TmuxTopology:
    return TmuxTopology(server=mock_server)


class TestIsInsideTmux:
    """Tests for is_inside_tmux."""

    def test_inside(self):
        """Test detection when $TMUX is set."""
        with patch.dict(os.environ, {"TMUX": "/tmp/tmux-1000/default,123,0"}):
            assert is_inside_tmux() is True

    def test_outside(self):
        """Test detection when $TMUX is unset."""
        env = {k: v for k, v in os.environ.items() if k != "TMUX"}
        with patch.dict(os.environ, env, clear=True):
            assert is_inside_tmux() is False


class TestPaneInfo:
    """Tests for parsing list-panes output."""

    def test_parse(self):
        """Test parsing a pane line."""
        assert PaneInfo.parse("%3:nvim") == PaneInfo(pane_id="%3", current_command="nvim")

    def test_parse_without_command(self):
        """Test that an empty command is kept."""
        assert PaneInfo.parse("%3:") == PaneInfo(pane_id="%3", current_command="")

    def test_parse_rejects_line_without_separator(self):
        """Test that malformed lines are skipped."""
        assert PaneInfo.parse("garbage") is None


class TestTmuxTopologyQueries:
    """Tests for TmuxTopology queries."""

    def test_server_is_created_lazily(self):
        """Test that the libtmux server is only created on first use."""
        with patch("rsworktree.core.tmux_manager.libtmux.Server") as mock_server_cls:
            topology = TmuxTopology()
            mock_server_cls.assert_not_called()

            _ = topology.server
            _ = topology.server

            mock_server_cls.assert_called_once()

    def test_current_window_name(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test reading the active window name."""
        mock_server.cmd.return_value = cmd_result(stdout=["proj/feature\n"])

        assert topology.current_window_name() == "proj/feature"
        mock_server.cmd.assert_called_once_with("display-message", "-p", "#{window_name}")

    def test_current_window_name_empty_output(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test that no output yields an empty name."""
        mock_server.cmd.return_value = cmd_result(stdout=[])

        assert topology.current_window_name() == ""

    def test_list_windows(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test listing windows with their ids, dropping unparseable lines."""
        mock_server.cmd.return_value = cmd_result(stdout=["@0:zsh", "@3:proj/a", "", "@7:proj/b"])

        assert topology.list_windows() == [
            WindowInfo(window_id="@0", name="zsh"),
            WindowInfo(window_id="@3", name="proj/a"),
            WindowInfo(window_id="@7", name="proj/b"),
        ]
        mock_server.cmd.assert_called_once_with("list-windows", "-F", WINDOW_FORMAT)
        assert WINDOW_FORMAT == "#{window_id}:#{window_name}"

    def test_list_windows_dotted_name(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test that names tmux would misread as targets come back intact with their id."""
        mock_server.cmd.return_value = cmd_result(stdout=["@1:my.app/feature/login"])

        assert topology.list_windows() == [
            WindowInfo(window_id="@1", name="my.app/feature/login"),
        ]

    def test_list_panes_current_window(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test listing panes of the current window."""
        mock_server.cmd.return_value = cmd_result(stdout=["%1:zsh", "%2:nvim", "bogus"])

        panes = topology.list_panes()

        assert panes == [
            PaneInfo(pane_id="%1", current_command="zsh"),
            PaneInfo(pane_id="%2", current_command="nvim"),
        ]
        mock_server.cmd.assert_called_once_with("list-panes", "-F", PANE_FORMAT)

    def test_list_panes_of_window(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test listing panes of a specific window by id."""
        mock_server.cmd.return_value = cmd_result(stdout=["%5:vim"])

        topology.list_panes("@2")

        mock_server.cmd.assert_called_once_with(
            "list-panes", "-t", "@2", "-F", PANE_FORMAT
        )

    def test_query_non_zero_exit(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test that a failing query raises TmuxInspectionError with stderr."""
        mock_server.cmd.return_value = cmd_result(stderr=["no server running"], returncode=1)

        with pytest.raises(TmuxInspectionError, match="no server running"):
            topology.list_windows()

    def test_query_libtmux_exception(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test that libtmux errors become TmuxInspectionError."""
        mock_server.cmd.side_effect = libtmux.exc.LibTmuxException("tmux not found")

        with pytest.raises(TmuxInspectionError):
            topology.current_window_name()

    def test_query_os_error(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test that OS errors become TmuxInspectionError."""
        mock_server.cmd.side_effect = OSError("No such file or directory")

        with pytest.raises(TmuxError):
            topology.list_panes()


class TestTmuxTopologyActions:
    """Tests for TmuxTopology actions."""

    def test_select_window(self, topology: TmuxTopology, mock_server: MagicMock):
        topology.select_window("@1")
        mock_server.cmd.assert_called_once_with("select-window", "-t", "@1")

    def test_select_pane(self, topology: TmuxTopology, mock_server: MagicMock):
        topology.select_pane("%4")
        mock_server.cmd.assert_called_once_with("select-pane", "-t", "%4")

    def test_split_window(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test that the editor command is passed as one shell string."""
        topology.split_window(Path("/work/wt"), "nvim /work/wt", "-v")

        mock_server.cmd.assert_called_once_with(
            "split-window", "-v", "-c", "/work/wt", "nvim /work/wt"
        )

    def test_split_window_default_flag(self, topology: TmuxTopology, mock_server: MagicMock):
        topology.split_window(Path("/work/wt"), "vim /work/wt")

        assert mock_server.cmd.call_args.args[1] == "-h"

    def test_new_window(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test that the editor argv is passed as separate arguments."""
        topology.new_window("proj/wt", Path("/work/wt"), ["code", "--wait", "/work/wt"])

        mock_server.cmd.assert_called_once_with(
            "new-window", "-n", "proj/wt", "-c", "/work/wt", "code", "--wait", "/work/wt"
        )

    def test_action_failure_names_action(self, topology: TmuxTopology, mock_server: MagicMock):
        """Test that a failing action raises TmuxActionError naming it."""
        mock_server.cmd.return_value = cmd_result(stderr=["can't find window"], returncode=1)

        with pytest.raises(TmuxActionError) as exc_info:
            topology.select_window("@9")

        assert exc_info.value.action == "select-window"
        assert "@9" in str(exc_info.value)
        assert "can't find window" in str(exc_info.value)

    def test_action_failure_without_stderr(self, topology: TmuxTopology, mock_server: MagicMock):
        mock_server.cmd.return_value = cmd_result(returncode=1)

        with pytest.raises(TmuxActionError, match="failed to create editor pane$"):
            topology.split_window(Path("/w"), "vim /w")

    def test_action_libtmux_exception(self, topology: TmuxTopology, mock_server: MagicMock):
        mock_server.cmd.side_effect = libtmux.exc.LibTmuxException("boom")

        with pytest.raises(TmuxActionError) as exc_info:
            topology.new_window("proj/wt", Path("/w"), ["vim", "/w"])

        assert exc_info.value.action == "new-window"
