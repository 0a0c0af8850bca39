"""focuscycle - work/break focus session timer for the terminal."""

__version__ = "0.3.0"
