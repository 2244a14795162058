"""
Error kinds raised by the simulation core.

- ConfigError: bad arena / coin / policy parameters, raised before any step
- PlacementError: the disks cannot be laid out with the clearance margin
- InvariantViolation: a coin exchange broke conservation or capacity

"No collision this step" is never an error: it is an empty list or None.
"""


class ConfigError(ValueError):
    """Invalid simulation configuration."""


class PlacementError(ConfigError):
    """Could not place every disk without overlap within the attempt budget."""

    def __init__(self, message: str, placed: int = 0, requested: int = 0):
        super().__init__(message)
        self.placed = placed
        self.requested = requested


class InvariantViolation(RuntimeError):
    """
    A coin count left its allowed range or coins were created/destroyed.

    Carries the counts before and after the offending exchange so callers
    can report how many coins went missing.
    """

    def __init__(
        self,
        message: str,
        before: tuple[int, int] | None = None,
        after: tuple[int, int] | None = None,
    ):
        super().__init__(message)
        self.before = before
        self.after = after

    @property
    def coins_lost(self) -> int:
        """Coins destroyed by the exchange (negative if coins were created)."""
        if self.before is None or self.after is None:
            return 0
        return sum(self.before) - sum(self.after)
