"""Unit tests for CLI module"""

import pytest
from rich.console import Console
from typer.testing import CliRunner

from spotter.cli.chat_runner import ChatConfig, ChatRunner, ConsoleTransport
from spotter.cli.main import app


def test_cli_help():
    """Test CLI help command lists the subcommands"""
    # Arrange
    runner = CliRunner()

    # Act
    result = runner.invoke(app, ["--help"])

    # Assert
    assert result.exit_code == 0
    assert "chat" in result.stdout
    assert "server" in result.stdout


def test_cli_version():
    """Test CLI version command"""
    result = CliRunner().invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "Spotter version" in result.stdout


def test_server_rejects_invalid_config(tmp_path):
    """Test server command fails fast on a bad config file"""
    # Arrange
    config_file = tmp_path / "spotter.yaml"
    config_file.write_text("settings:\n  fanout:\n    concurrency: -1\n")

    # Act
    result = CliRunner().invoke(app, ["server", "--config", str(config_file)])

    # Assert
    assert result.exit_code == 1


class TestChatRunner:
    @pytest.fixture
    async def runner(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        chat = ChatRunner(ChatConfig(user_id=9, first_name="Cli"))
        chat.console = Console(record=True, width=120)
        await chat.setup()
        yield chat
        await chat.cleanup()

    @pytest.mark.asyncio
    async def test_plain_text_is_a_turn(self, runner):
        result = await runner._dispatch("/start")

        assert result.replies[0].startswith("Welcome Cli!")

    @pytest.mark.asyncio
    async def test_user_meta_command_switches_identity(self, runner):
        assert await runner._dispatch(":user 12") is None
        assert runner.user_id == 12

        assert await runner._dispatch(":user nobody") is None
        assert runner.user_id == 12

    @pytest.mark.asyncio
    async def test_callback_meta_command(self, runner):
        await runner._dispatch("/start")

        result = await runner._dispatch(":cb skip:w1")

        assert result.replies == ["Skipped. Streak reset."]

    def test_exit_commands(self):
        runner = ChatRunner(ChatConfig())

        assert runner._is_exit_command(" Quit ")
        assert not runner._is_exit_command("Profile")


@pytest.mark.asyncio
async def test_console_transport_prints_pushes():
    console = Console(record=True, width=120)

    await ConsoleTransport(console).send_text(4, "Time to drink water.")

    assert "Time to drink water." in console.export_text()
