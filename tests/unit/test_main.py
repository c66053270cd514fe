"""Tests for the command-line interface."""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from requesty_ai import main as main_module
from requesty_ai.chat.client import RequestFailedError
from requesty_ai.models.catalog import ModelCatalog, UpstreamUnavailableError


class TestListModels:
    """Tests for listing models."""

    @pytest.mark.asyncio
    async def test_prints_models_with_prices(self, seeded_catalog, capsys):
        """Test each purchasable model is printed with its price label."""
        await main_module.list_models(seeded_catalog)

        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            "anthropic/claude-3-5-sonnet-latest\t$3/M in • $15/M out",
            "openai/gpt-4o\t$2.5/M in • $10/M out",
            "together/Llama-3-70b-chat-hf\t$0.9/M in • $0.9/M out",
        ]


class TestChat:
    """Tests for a single chat exchange."""

    @pytest.mark.asyncio
    async def test_prints_reply_and_cost(self, seeded_catalog, capsys):
        """Test the reply goes to stdout and the cost to stderr."""
        client = AsyncMock()
        client.complete = AsyncMock(return_value="Hi!")

        await main_module.chat(seeded_catalog, client, "openai/gpt-4o", "Hello", "Be brief.")

        client.complete.assert_awaited_once_with(
            "openai/gpt-4o",
            [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "Hello"},
            ],
        )
        captured = capsys.readouterr()
        assert captured.out == "Hi!\n"
        assert "estimated cost" in captured.err

    @pytest.mark.asyncio
    async def test_catalog_outage_does_not_block_chat(self, credentials, capsys):
        """Test a failed catalog fetch still sends the prompt and prices it at zero."""
        catalog = ModelCatalog(credentials)
        client = AsyncMock()
        client.complete = AsyncMock(return_value="Still here")

        with patch.object(
            catalog,
            "list_models",
            AsyncMock(side_effect=UpstreamUnavailableError("Catalog request failed", 503)),
        ):
            await main_module.chat(catalog, client, "openai/gpt-4o", "Hello", None)

        client.complete.assert_awaited_once()
        captured = capsys.readouterr()
        assert captured.out == "Still here\n"
        assert "$0.000000" in captured.err


class TestCli:
    """Tests for the click command group."""

    def test_models_command(self, seeded_catalog):
        """Test the models command prints the catalog and exits cleanly."""
        runner = CliRunner()
        with (
            patch.object(main_module, "setup_logging"),
            patch.object(main_module, "ModelCatalog", return_value=seeded_catalog),
        ):
            result = runner.invoke(main_module.main, ["models"])

        assert result.exit_code == 0
        assert "openai/gpt-4o\t$2.5/M in • $10/M out" in result.output

    def test_chat_command_passes_arguments(self, seeded_catalog):
        """Test the chat command forwards model, prompt and system prompt."""
        runner = CliRunner()
        mock_chat = AsyncMock()
        with (
            patch.object(main_module, "setup_logging"),
            patch.object(main_module, "ModelCatalog", return_value=seeded_catalog),
            patch.object(main_module, "chat", new=mock_chat),
        ):
            result = runner.invoke(
                main_module.main, ["chat", "openai/gpt-4o", "hi", "--system", "Be brief."]
            )

        assert result.exit_code == 0
        args = mock_chat.await_args.args
        assert args[0] is seeded_catalog
        assert args[2:] == ("openai/gpt-4o", "hi", "Be brief.")

    def test_library_error_exit_code(self, seeded_catalog):
        """Test library errors are reported and exit with status 1."""
        runner = CliRunner()
        failing = AsyncMock(side_effect=RequestFailedError("openai/gpt-4o", "boom"))
        with (
            patch.object(main_module, "setup_logging"),
            patch.object(main_module, "ModelCatalog", return_value=seeded_catalog),
            patch.object(main_module, "chat", new=failing),
        ):
            result = runner.invoke(main_module.main, ["chat", "openai/gpt-4o", "hi"])

        assert result.exit_code == 1
        assert "Failed to get response from openai/gpt-4o" in result.output

    def test_command_required(self):
        """Test invoking the group without a command shows usage."""
        result = CliRunner().invoke(main_module.main, [])
        assert "Usage" in result.output
