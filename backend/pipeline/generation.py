"""
VaultMerkle Run Generations.

Cooperative cancellation for hashing runs: a newer run makes every
older run stale, and stale runs stop at their next suspension point.
Requires Python 3.11+.
"""

from dataclasses import dataclass

from utils.errors import RunSuperseded


class Generation:
    """Monotonically increasing run counter owned by one panel."""

    def __init__(self) -> None:
        self._value = 0

    @property
    def current(self) -> int:
        return self._value

    def advance(self) -> "GenerationToken":
        """Start a new run, superseding any run still in flight."""
        self._value += 1
        return GenerationToken(generation=self, run_id=self._value)


@dataclass(frozen=True, slots=True)
class GenerationToken:
    """Handle a run carries to check whether it is still the latest."""

    generation: Generation
    run_id: int

    @property
    def is_current(self) -> bool:
        return self.generation.current == self.run_id

    def ensure_current(self) -> None:
        """
        Abort the run if a newer one has started.

        Raises:
            RunSuperseded: If the generation moved on
        """
        if not self.is_current:
            raise RunSuperseded(self.run_id, self.generation.current)
