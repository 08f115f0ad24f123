class DashboardError(Exception):
    """Recoverable failure inside one iteration of the dashboard."""


class PlayerSourceError(DashboardError):
    """A session-bus call to a player failed."""


class CoverArtError(DashboardError):
    """The terminal capability probe could not decide."""
