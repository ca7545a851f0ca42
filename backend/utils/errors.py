"""
VaultMerkle Pipeline Errors.

Exceptions surfaced to callers of the hashing pipeline.
Requires Python 3.11+.
"""


class PipelineError(Exception):
    """Base class for failures that terminate a pipeline run."""


class DigestError(PipelineError):
    """The digest primitive failed or is unavailable."""


class CsvTooLargeError(PipelineError):
    """A CSV export exceeds the configured size limit."""

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(
            f"CSV export is {size_bytes} bytes, limit is {limit_bytes} bytes"
        )
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class RunSuperseded(Exception):
    """
    Raised inside a run whose generation is no longer current.

    Not a failure: the panel that owns the run catches it and drops the
    run's results.
    """

    def __init__(self, run_id: int, current: int) -> None:
        super().__init__(f"run {run_id} superseded by generation {current}")
        self.run_id = run_id
        self.current = current
