"""Unit tests for CLI commands."""

from unittest.mock import patch

import httpx
import pytest
from typer.testing import CliRunner

from cli import app

runner = CliRunner()

DRAFT_PATH = "/api/v2/orgs/1/sec_policy/draft/label_groups"

LABEL_GROUPS = [
    {
        "href": "/orgs/1/sec_policy/draft/label_groups/1",
        "name": "web-tier",
        "key": "role",
        "labels": [{"href": "/orgs/1/labels/10"}],
        "sub_groups": [{"href": "/orgs/1/sec_policy/draft/label_groups/2"}],
    },
    {
        "href": "/orgs/1/sec_policy/draft/label_groups/2",
        "name": "edge",
        "key": "role",
        "labels": [{"href": "/orgs/1/labels/11"}, {"href": "/orgs/1/labels/12"}],
    },
]


@pytest.fixture
def cli_client(make_client):
    """Patch client construction in the CLI to use the fake PCE."""
    with patch("pceclient.cli.commands.label_groups.PCEClient.from_config") as mock_from_config:
        mock_from_config.side_effect = lambda **kwargs: make_client(**kwargs)
        yield mock_from_config


@pytest.fixture(autouse=True)
def _isolate_logging(restore_root_logging):
    """Every invocation configures logging; undo it after each test."""
    yield


@pytest.fixture
def quiet_setup_logging():
    """Record the logging setup requested by the CLI callback without applying it."""
    with patch("cli.setup_logging") as mock_setup:
        yield mock_setup


class TestMainApp:
    """Tests for main app options."""

    def test_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "PCE Client CLI" in result.stdout
        assert "label-groups" in result.stdout

    def test_verbose_flag_sets_debug_logging(self, quiet_setup_logging) -> None:
        result = runner.invoke(app, ["-v", "system", "version"])
        assert result.exit_code == 0
        quiet_setup_logging.assert_called_once_with(level="DEBUG", format_type="console")

    def test_default_logging_hides_info(self, quiet_setup_logging) -> None:
        result = runner.invoke(app, ["system", "version"])
        assert result.exit_code == 0
        quiet_setup_logging.assert_called_once_with(level="WARNING", format_type="console")

    def test_exits_outside_project(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["system", "version"])
        assert result.exit_code != 0

    def test_debug_flag(self, quiet_setup_logging) -> None:
        result = runner.invoke(app, ["--debug", "system", "version"])
        assert result.exit_code == 0
        assert "Debug mode enabled" in result.stdout


class TestSystemCommands:
    """Tests for system commands."""

    def test_system_version(self) -> None:
        from pceclient import __version__

        result = runner.invoke(app, ["system", "version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_system_config(self) -> None:
        from pceclient.core.config import get_app_config, get_runtime_toggles

        get_app_config.cache_clear()
        get_runtime_toggles.cache_clear()

        result = runner.invoke(app, ["system", "config"])

        assert result.exit_code == 0
        assert "fqdn" in result.stdout
        assert "max_retries" in result.stdout
        assert "force_async" in result.stdout
        assert "api_key" not in result.stdout


class TestLabelGroupCommands:
    """Tests for label-groups list and expand."""

    def test_list_help(self) -> None:
        result = runner.invoke(app, ["label-groups", "list", "--help"])
        assert result.exit_code == 0
        assert "List label groups" in result.stdout

    def test_list_prints_groups(self, cli_client, fake_pce) -> None:
        fake_pce.add("GET", DRAFT_PATH, httpx.Response(200, json=LABEL_GROUPS))

        result = runner.invoke(app, ["label-groups", "list"])

        assert result.exit_code == 0
        assert "web-tier" in result.stdout
        assert "edge" in result.stdout

    def test_list_passes_filters(self, cli_client, fake_pce) -> None:
        fake_pce.add("GET", "/api/v2/orgs/1/sec_policy/active/label_groups", httpx.Response(200, json=[]))

        result = runner.invoke(app, ["label-groups", "list", "-s", "active", "-f", "name=web"])

        assert result.exit_code == 0
        assert fake_pce.requests[0].url.params["name"] == "web"

    def test_list_rejects_bad_filter(self, cli_client, fake_pce) -> None:
        result = runner.invoke(app, ["label-groups", "list", "-f", "no-equals-sign"])

        assert result.exit_code != 0
        assert fake_pce.requests == []

    def test_list_invalid_status(self, cli_client, fake_pce) -> None:
        result = runner.invoke(app, ["label-groups", "list", "--status", "staging"])

        assert result.exit_code == 1
        assert "invalid status" in result.stdout
        assert fake_pce.requests == []

    def test_list_server_error(self, cli_client, fake_pce) -> None:
        fake_pce.add("GET", DRAFT_PATH, httpx.Response(500, text="boom"))

        result = runner.invoke(app, ["label-groups", "list"])

        assert result.exit_code == 1
        assert "500" in result.stdout

    def test_verbose_flag_reaches_client(self, cli_client, fake_pce, quiet_setup_logging) -> None:
        fake_pce.add("GET", DRAFT_PATH, httpx.Response(200, json=[]))

        result = runner.invoke(app, ["--verbose", "label-groups", "list"])

        assert result.exit_code == 0
        cli_client.assert_called_once_with(verbose=True)

    def test_async_flag_fetches_async_once(self, cli_client, fake_pce) -> None:
        fake_pce.add(
            "GET", DRAFT_PATH,
            httpx.Response(202, headers={"Location": "/orgs/1/jobs/1", "Retry-After": "0"}),
        )
        fake_pce.add(
            "GET", "/api/v2/orgs/1/jobs/1",
            httpx.Response(200, json={"status": "done", "result": {"href": "/orgs/1/datafiles/1"}}),
        )
        fake_pce.add("GET", "/api/v2/orgs/1/datafiles/1", httpx.Response(200, json=LABEL_GROUPS))

        result = runner.invoke(app, ["label-groups", "list", "--async"])

        assert result.exit_code == 0
        assert "web-tier" in result.stdout
        cli_client.assert_called_once_with()
        collection_requests = fake_pce.requests_to(DRAFT_PATH)
        assert len(collection_requests) == 1
        assert collection_requests[0].headers["Prefer"] == "respond-async"

    def test_expand_prints_labels(self, cli_client, fake_pce) -> None:
        """Service logs stay below the default WARNING level and out of the output."""
        fake_pce.add("GET", DRAFT_PATH, httpx.Response(200, json=LABEL_GROUPS))

        result = runner.invoke(app, ["label-groups", "expand", "/orgs/1/sec_policy/draft/label_groups/1"])

        assert result.exit_code == 0
        assert result.stdout.split() == ["/orgs/1/labels/10", "/orgs/1/labels/11", "/orgs/1/labels/12"]

    def test_expand_unknown_group(self, cli_client, fake_pce) -> None:
        fake_pce.add("GET", DRAFT_PATH, httpx.Response(200, json=LABEL_GROUPS))

        result = runner.invoke(app, ["label-groups", "expand", "/orgs/1/sec_policy/draft/label_groups/404"])

        assert result.exit_code == 0
        assert "Label group not found" in result.stdout
