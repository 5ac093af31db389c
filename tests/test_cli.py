"""Tests for the command line interface."""

import json

import httpx
import pytest
from click.testing import CliRunner

from accountapi_client.cli import cli


ACCOUNT_ID = "f773707e-8fb4-4ab7-a4f8-3f0e8d0d4b7c"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def account_file(tmp_path, account_data):
    path = tmp_path / "account.json"
    path.write_text(json.dumps(account_data))
    return path


class TestCli:
    """Tests for the accountapi command group."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        monkeypatch.delenv("FORM3_ACCOUNTS_API_URL", raising=False)
        monkeypatch.delenv("ACCOUNTAPI_TIMEOUT", raising=False)

    def test_create(self, runner, respx_mock, base_url, account_file, account_data):
        """Test creating an account from a JSON file."""
        route = respx_mock.post(base_url).mock(return_value=httpx.Response(201, json=account_data))

        result = runner.invoke(cli, ["--base-url", base_url, "create", str(account_file)])

        assert result.exit_code == 0, result.output
        assert "[201]" in result.output
        assert ACCOUNT_ID in result.output
        sent = json.loads(route.calls.last.request.content)
        assert sent["data"]["id"] == ACCOUNT_ID

    def test_timeout_option(self, runner, respx_mock, base_url):
        """Test that --timeout is attached to the request."""
        route = respx_mock.get(f"{base_url}/{ACCOUNT_ID}").mock(return_value=httpx.Response(200, json={}))

        result = runner.invoke(cli, ["--base-url", base_url, "--timeout", "1.5", "fetch", ACCOUNT_ID])

        assert result.exit_code == 0, result.output
        assert route.calls.last.request.extensions["timeout"]["read"] == 1.5

    def test_create_from_yaml_without_envelope(self, runner, respx_mock, base_url, tmp_path):
        """Test that a bare YAML data document is wrapped."""
        path = tmp_path / "account.yaml"
        path.write_text(
            f"id: {ACCOUNT_ID}\n"
            "organisation_id: 4fd712d9-38cd-4ee0-bc2c-3f0e46b1c0a0\n"
            "attributes:\n"
            "  country: GB\n"
            "  name: [Samantha Holder]\n"
        )
        route = respx_mock.post(base_url).mock(return_value=httpx.Response(201, json={}))

        result = runner.invoke(cli, ["--base-url", base_url, "create", str(path)])

        assert result.exit_code == 0, result.output
        sent = json.loads(route.calls.last.request.content)
        assert sent["data"]["type"] == "accounts"

    def test_create_invalid_file(self, runner, base_url, tmp_path):
        """Test that an invalid account document is a usage error."""
        path = tmp_path / "account.yaml"
        path.write_text("- not\n- an account\n")

        result = runner.invoke(cli, ["--base-url", base_url, "create", str(path)])

        assert result.exit_code == 2

    def test_fetch(self, runner, respx_mock, base_url, account_data):
        """Test fetching an account."""
        respx_mock.get(f"{base_url}/{ACCOUNT_ID}").mock(
            return_value=httpx.Response(200, json=account_data)
        )

        result = runner.invoke(cli, ["--base-url", base_url, "fetch", ACCOUNT_ID])

        assert result.exit_code == 0, result.output
        assert "[200]" in result.output
        assert "Samantha Holder" in result.output

    def test_fetch_not_found_is_not_an_error(self, runner, respx_mock, base_url):
        """Test that error statuses are printed, not raised."""
        respx_mock.get(f"{base_url}/superfake.com").mock(
            return_value=httpx.Response(400, text="id is not a valid uuid")
        )

        result = runner.invoke(cli, ["--base-url", base_url, "fetch", "superfake.com"])

        assert result.exit_code == 0
        assert "[400]" in result.output
        assert "id is not a valid uuid" in result.output

    def test_delete(self, runner, respx_mock, base_url):
        """Test deleting an account version."""
        route = respx_mock.delete(url__startswith=f"{base_url}/{ACCOUNT_ID}").mock(
            return_value=httpx.Response(204)
        )

        result = runner.invoke(cli, ["--base-url", base_url, "delete", ACCOUNT_ID, "--version", "2"])

        assert result.exit_code == 0, result.output
        assert "[204]" in result.output
        assert route.calls.last.request.url.params["version"] == "2"

    def test_connection_error(self, runner, respx_mock, base_url):
        """Test that transport failures exit non-zero."""
        respx_mock.get(f"{base_url}/{ACCOUNT_ID}").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        result = runner.invoke(cli, ["--base-url", base_url, "fetch", ACCOUNT_ID])

        assert result.exit_code == 1
        assert "ConnectionError" in result.output

    def test_config_profile(self, runner, respx_mock, tmp_path):
        """Test reading the base URL and headers from a YAML profile."""
        profile = tmp_path / "profile.yaml"
        profile.write_text(
            "base_url: http://profile.test/accounts\n"
            "headers:\n"
            "  Authorization: Bearer secret\n"
        )
        route = respx_mock.get(f"http://profile.test/accounts/{ACCOUNT_ID}").mock(
            return_value=httpx.Response(200, json={})
        )

        result = runner.invoke(cli, ["--config", str(profile), "fetch", ACCOUNT_ID])

        assert result.exit_code == 0, result.output
        assert route.calls.last.request.headers["Authorization"] == "Bearer secret"
