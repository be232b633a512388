"""
Sequential issue id generator.

One instance is owned by each audit run and handed to every rule module, so ids
are unique within a report and deterministic across runs.
"""


class IssueIdGenerator:
    """Produces `<prefix>-<n>` ids from a per-run counter."""

    def __init__(self, start: int = 0):
        self._counter = start

    def next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def reset(self) -> None:
        """Restart numbering. Intended for test setup only."""
        self._counter = 0
