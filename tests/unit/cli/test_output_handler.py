"""Unit tests for cli.output module."""

from unittest.mock import patch

import pytest

from src.cli.output import OutputHandler


def printed(mock_console_class):
    """All strings passed to console.print."""
    return [
        str(c.args[0]) if c.args else ""
        for c in mock_console_class.return_value.print.call_args_list
    ]


class TestOutputHandlerInit:
    """Test cases for OutputHandler initialization."""

    @patch('src.cli.output.Console')
    def test_no_color_disables_terminal_forcing(self, mock_console_class):
        OutputHandler(no_color=True)
        mock_console_class.assert_called_once_with(force_terminal=False, no_color=True, highlight=False)

    def test_default_verbosity(self):
        assert OutputHandler().verbosity == 0


class TestOutputHandlerMessages:
    """Test cases for message helpers."""

    @patch('src.cli.output.Console')
    def test_success(self, mock_console_class):
        OutputHandler().success("done")
        assert printed(mock_console_class) == ["[green]✓[/green] done"]

    @patch('src.cli.output.Console')
    def test_error(self, mock_console_class):
        OutputHandler().error("broken")
        mock_console_class.return_value.print.assert_called_once_with("[red]✗[/red] broken", style="red")

    @pytest.mark.parametrize("verbosity,shown", [(0, False), (1, True), (2, True)])
    @patch('src.cli.output.Console')
    def test_info_respects_verbosity(self, mock_console_class, verbosity, shown):
        OutputHandler(verbosity=verbosity).info("details")
        assert bool(printed(mock_console_class)) is shown

    @pytest.mark.parametrize("verbosity,shown", [(1, False), (2, True)])
    @patch('src.cli.output.Console')
    def test_debug_respects_verbosity(self, mock_console_class, verbosity, shown):
        OutputHandler(verbosity=verbosity).debug("trace")
        assert bool(printed(mock_console_class)) is shown


class TestOutputHandlerSpinner:
    """Test cases for spinner."""

    @patch('src.cli.output.Live')
    @patch('src.cli.output.Spinner')
    def test_spinner_wraps_block_in_live(self, mock_spinner_class, mock_live_class):
        handler = OutputHandler()
        with handler.spinner("Migrating..."):
            pass

        mock_spinner_class.assert_called_once_with("dots", text="Migrating...")
        mock_live_class.return_value.__enter__.assert_called_once()
        mock_live_class.return_value.__exit__.assert_called_once()


class TestOutputHandlerSummaries:
    """Test cases for migration and space summaries."""

    @patch('src.cli.output.Console')
    def test_publish_summary(self, mock_console_class):
        response = {
            "ok": True,
            "action": "updated",
            "page": {
                "id": "123",
                "title": "Home",
                "_links": {"base": "https://x.atlassian.net/wiki", "webui": "/pages/123"},
            },
        }

        OutputHandler().print_publish_summary(response, ["5", "123", "6"])

        lines = printed(mock_console_class)
        assert any("updated" in line and "Home (123)" in line for line in lines)
        assert "  Link: https://x.atlassian.net/wiki/pages/123" in lines
        assert any("related pages written" in line and "2" in line for line in lines)

    @patch('src.cli.output.Console')
    def test_print_committed_empty_prints_nothing(self, mock_console_class):
        OutputHandler().print_committed([])
        mock_console_class.return_value.print.assert_not_called()

    @patch('src.cli.output.Console')
    def test_print_committed_lists_ids(self, mock_console_class):
        OutputHandler().print_committed(["1", "2"])
        lines = printed(mock_console_class)
        assert "  - 1" in lines
        assert "  - 2" in lines

    def test_print_spaces_counts_rows(self):
        handler = OutputHandler(no_color=True)
        with patch.object(handler.console, "print") as mock_print:
            count = handler.print_spaces(iter([{"id": "10", "key": "TEAM", "name": "Team"}]))

        assert count == 1
        table = mock_print.call_args[0][0]
        assert table.row_count == 1
