"""Non-blocking single-key input for the watch screen."""

import select
import sys
import termios
import tty


class KeyboardHandler:
    """Reads single keypresses from a POSIX terminal without blocking.

    When stdin is not a terminal every read returns None.
    """

    def __init__(self):
        self.fd: int | None = None
        self.old_settings = None
        self.start()

    def start(self):
        """Put the terminal in cbreak mode when stdin is a tty."""
        if self.old_settings is not None or not sys.stdin.isatty():
            return
        try:
            self.fd = sys.stdin.fileno()
            self.old_settings = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd)
        except termios.error:
            self.fd = None
            self.old_settings = None

    def get_key(self) -> str | None:
        """Return the pressed key lower-cased, or None if nothing is waiting."""
        if self.old_settings is None:
            return None
        if select.select([sys.stdin], [], [], 0)[0]:
            return sys.stdin.read(1).lower()
        return None

    def stop(self):
        """Restore terminal settings."""
        if self.old_settings is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            self.old_settings = None
