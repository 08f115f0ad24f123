"""mpris-tui: a terminal dashboard for whatever MPRIS player is active."""

__version__ = "0.1.0"
