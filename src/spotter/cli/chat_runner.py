"""Interactive chat runner for Spotter CLI."""

from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt

from spotter.config.loader import ConfigLoader
from spotter.core.errors import ConfigError
from spotter.core.types import TurnResult, UserHandle
from spotter.observability.logging import setup_logging
from spotter.runtime.assistant import Assistant
from spotter.transport.sinks import Transport

BANNER_ART = r"""
  ___ _ __   ___ | |_| |_ ___ _ __
 / __| '_ \ / _ \| __| __/ _ \ '__|
 \__ \ |_) | (_) | |_| ||  __/ |
 |___/ .__/ \___/ \__|\__\___|_|
     |_|
"""

USER_META = ":user"
CALLBACK_META = ":cb"


class ConsoleTransport(Transport):
    """Transport that prints pushed messages to the rich console."""

    def __init__(self, console: Console):
        self.console = console

    async def send_text(self, user_id: UserHandle, text: str) -> None:
        self.console.print(f"[bold magenta]-> {user_id} > [/]{text}\n")


@dataclass
class ChatConfig:
    """Configuration for chat runner."""

    config_path: Path | None = None
    user_id: UserHandle = 1
    first_name: str = ""
    verbose: bool = False
    debug: bool = False


class ChatRunner:
    """Interactive chat session runner.

    Besides plain messages, `:user <id>` switches the sending identity and
    `:cb <payload>` simulates a button press.
    """

    def __init__(self, config: ChatConfig):
        self.config = config
        self.console = Console()
        self.assistant: Assistant | None = None
        self.user_id = config.user_id
        self._running = False

    async def setup(self) -> None:
        """Initialize the assistant.

        Raises:
            ConfigError: If config is invalid
        """
        try:
            spotter_config = ConfigLoader.load(self.config.config_path)
        except ConfigError as e:
            self.console.print(f"[red]Invalid config: {e}[/]")
            raise

        level = "DEBUG" if self.config.debug else spotter_config.settings.logging.level
        setup_logging(level, spotter_config.settings.logging.file)

        self.assistant = Assistant(spotter_config, transport=ConsoleTransport(self.console))
        await self.assistant.__aenter__()
        if self.config.verbose:
            self.console.print("[dim]Assistant initialized[/]")

    async def start(self) -> None:
        """Start the interactive session."""
        if not self.assistant:
            await self.setup()

        self.console.print(BANNER_ART, style="bold blue")
        self.console.print(f"Chatting as user [green]{self.user_id}[/]")
        self.console.print(
            f"'{USER_META} <id>' switches user, '{CALLBACK_META} <payload>' presses a button."
        )
        self.console.print("Type 'exit' or 'quit' to end session.\n")

        self._running = True
        while self._running:
            try:
                user_input = Prompt.ask(f"[bold green]You ({self.user_id})[/]")

                if self._is_exit_command(user_input):
                    self.console.print("\n[yellow]Goodbye![/]")
                    break

                if not user_input.strip():
                    continue

                result = await self._dispatch(user_input)
                if result is not None:
                    self._print_result(result)

            except KeyboardInterrupt:
                self.console.print("\n[yellow]Goodbye![/]")
                break
            except Exception as e:
                if self.config.debug:
                    self.console.print_exception()
                else:
                    self.console.print(f"[red]Error: {e}[/]")

    async def _dispatch(self, user_input: str) -> TurnResult | None:
        if self.assistant is None:
            return None
        command, _, argument = user_input.strip().partition(" ")
        if command == USER_META:
            try:
                self.user_id = int(argument)
            except ValueError:
                self.console.print(f"[red]Usage: {USER_META} <numeric id>[/]")
            else:
                self.console.print(f"[dim]Now chatting as user {self.user_id}[/]")
            return None
        if command == CALLBACK_META:
            return await self.assistant.process_callback(self.user_id, argument.strip())
        return await self.assistant.process_text(
            self.user_id, user_input, first_name=self.config.first_name
        )

    def _print_result(self, result: TurnResult) -> None:
        for reply in result.replies:
            self.console.print(f"[bold blue]Spotter > [/]{reply}\n")
        if self.config.verbose and result.step:
            self.console.print(f"[dim]step: {result.step}[/]")

    def _is_exit_command(self, user_input: str) -> bool:
        """Check if input is an exit command."""
        return user_input.strip().lower() in ("quit", "exit", "q", "/quit", "/exit")

    async def cleanup(self) -> None:
        """Clean up resources."""
        self._running = False
        if self.assistant is not None:
            await self.assistant.__aexit__(None, None, None)
            self.assistant = None

    async def __aenter__(self) -> "ChatRunner":
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.cleanup()


async def run_chat_session(config: ChatConfig) -> None:
    """Run an interactive chat session.

    Args:
        config: Chat configuration
    """
    async with ChatRunner(config) as runner:
        await runner.start()
