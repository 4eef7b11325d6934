"""Tests for the catalog CLI."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.context import with_context
from src.cli import app

runner = CliRunner()


@pytest.fixture
def cli_database(tmp_path):
    """Point the CLI at a throwaway SQLite file."""
    override = ConfigData()
    override.database.url = f"sqlite:///{tmp_path / 'cli.db'}"
    with with_context(override):
        yield


@pytest.mark.usefixtures("cli_database")
class TestCatalogCommands:
    def test_init_db_then_empty_categories(self):
        assert runner.invoke(app, ["init-db"]).exit_code == 0

        result = runner.invoke(app, ["categories"])

        assert result.exit_code == 0
        assert "No categories found" in result.output

    def test_backfill_active(self):
        runner.invoke(app, ["init-db"])

        result = runner.invoke(app, ["backfill-active"])

        assert result.exit_code == 0
        assert "0 products updated" in result.output

    def test_sync_then_categories(self, catalog_client_factory, external_records):
        client = catalog_client_factory(external_records)

        with patch("src.cli.catalog_commands.ExternalCatalogClient", return_value=client):
            result = runner.invoke(app, ["sync", "--limit", "3"])

        assert result.exit_code == 0, result.output
        assert "3 products imported" in result.output

        categories = runner.invoke(app, ["categories"])
        assert "beauty" in categories.output
        assert "smartphones" in categories.output

    def test_legacy_sync(self, catalog_client_factory, external_records):
        client = catalog_client_factory(external_records)

        with patch("src.cli.catalog_commands.ExternalCatalogClient", return_value=client):
            result = runner.invoke(app, ["sync", "--legacy"])

        assert result.exit_code == 0, result.output
        assert "3 inserted" in result.output

    def test_sync_failure_exits_non_zero(self, catalog_client_factory):
        client = catalog_client_factory(status_code=503, payload={})

        with patch("src.cli.catalog_commands.ExternalCatalogClient", return_value=client):
            result = runner.invoke(app, ["sync"])

        assert result.exit_code == 1
        assert "Sync failed" in result.output

    def test_upload(self, tmp_path, external_records):
        path = tmp_path / "products.json"
        path.write_text(json.dumps({"products": external_records}))

        result = runner.invoke(app, ["upload", str(path)])

        assert result.exit_code == 0, result.output
        assert "3 inserted" in result.output
