"""Terminal spinner shown while waiting on the agent."""

import sys
import threading
from typing import List, Optional, Sequence, Union

import click

FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_LINE = "\x1b[2K\r"


class Spinner:
    """Braille spinner with optionally rotating messages.

    Animates only on a TTY. Elsewhere the first message is printed once so
    piped output stays readable.
    """

    def __init__(
        self,
        messages: Union[str, Sequence[str]],
        color: Optional[str] = "yellow",
        dim: bool = False,
        frame_interval: float = 0.08,
        message_interval: float = 3.0,
    ):
        self.messages: List[str] = [messages] if isinstance(messages, str) else list(messages)
        self.color = color
        self.dim = dim
        self.frame_interval = frame_interval
        self.message_interval = message_interval
        self._frame_index = 0
        self._message_index = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None

    def _interactive(self) -> bool:
        return sys.stdout.isatty()

    def _render(self) -> None:
        text = f"{FRAMES[self._frame_index]} {self.messages[self._message_index]}"
        click.echo(CLEAR_LINE + click.style(text, fg=self.color, dim=self.dim), nl=False)

    def _animate(self) -> None:
        ticks_per_message = max(1, round(self.message_interval / self.frame_interval))
        tick = 0
        while not self._stop.wait(self.frame_interval):
            tick += 1
            with self._lock:
                self._frame_index = (self._frame_index + 1) % len(FRAMES)
                if len(self.messages) > 1 and tick % ticks_per_message == 0:
                    self._message_index = (self._message_index + 1) % len(self.messages)
                self._render()

    def start(self) -> "Spinner":
        if self.running:
            return self
        if not self._interactive():
            click.secho(self.messages[0], fg=self.color, dim=self.dim)
            return self
        click.echo(HIDE_CURSOR, nl=False)
        self._render()
        self._stop.clear()
        self._thread = threading.Thread(target=self._animate, daemon=True)
        self._thread.start()
        return self

    def update(self, message: str) -> None:
        with self._lock:
            self.messages = [message]
            self._message_index = 0

    def stop(self, final_message: str = "", final_color: str = "green") -> None:
        if self._thread is not None:
            self._stop.set()
            self._thread.join()
            self._thread = None
            click.echo(CLEAR_LINE + SHOW_CURSOR, nl=False)
        if final_message:
            click.secho(f"✓ {final_message}", fg=final_color)
