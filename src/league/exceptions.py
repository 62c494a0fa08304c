"""Exceptions raised by the league engine."""


class LeagueError(Exception):
    """Base exception for all league errors."""

    pass


class RosterError(LeagueError):
    """Raised when a matchday roster is unusable."""

    pass


class RosterSizeError(RosterError):
    """Raised when the roster length does not match the declared size."""

    def __init__(self, size, count):
        super().__init__(f'This event size requires exactly {size} players in the roster (got {count})')
        self.size = size
        self.count = count


class InvalidPlacementError(LeagueError):
    """Raised when a placement names a rank the event size does not award."""

    pass


class MatchdayStateError(LeagueError):
    """Raised when an operation is not valid in the current matchday phase."""

    pass


class InvalidScoreError(LeagueError):
    """Raised when a submitted score cannot produce a result."""

    pass


class ScoreConfirmationRequired(LeagueError):
    """Raised when a score looks unusual and must be confirmed to proceed."""

    def __init__(self, warnings):
        super().__init__('; '.join(warnings))
        self.warnings = list(warnings)


class ImportFormatError(LeagueError):
    """Raised when an imported ledger or CSV payload is malformed."""

    pass


class UnsupportedImportSizeError(ImportFormatError):
    """Raised when a CSV import targets a size that needs the guided matchday."""

    pass
