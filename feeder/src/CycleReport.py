"""CycleReport: Outcomes of one fetch-and-submit cycle.

Reports only live for the duration of a cycle and are used for logging.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class SubmissionOutcome:
    """Result of pushing one token's price to its feed.

    :ivar symbol: Token symbol.
    :ivar success: True once the transaction was mined successfully.
    :ivar answer: Fixed-point answer that was (or would have been) submitted.
    :ivar tx_hash: Transaction hash, if a transaction was sent.
    :ivar error: Error message on failure.
    """

    symbol: str
    success: bool
    answer: int | None = None
    tx_hash: str | None = None
    error: str | None = None

    @classmethod
    def succeeded(cls, symbol: str, answer: int, tx_hash: str) -> SubmissionOutcome:
        return cls(symbol=symbol, success=True, answer=answer, tx_hash=tx_hash)

    @classmethod
    def failed(
        cls, symbol: str, error: str, answer: int | None = None
    ) -> SubmissionOutcome:
        return cls(symbol=symbol, success=False, answer=answer, error=error)


@dataclass
class CycleReport:
    """Aggregate of all submission outcomes for one cycle.

    :ivar outcomes: Per-token outcomes in submission order.
    :ivar fetch_error: Set when the cycle ended before any submission.
    :ivar started_at: Unix timestamp when the cycle started.
    :ivar finished_at: Unix timestamp when the cycle finished.
    """

    outcomes: list[SubmissionOutcome] = field(default_factory=list)
    fetch_error: str | None = None
    started_at: float = field(default_factory=time.time)
    finished_at: float | None = None

    @property
    def attempted(self) -> int:
        """Number of tokens a submission was attempted for."""
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        """Number of feeds updated successfully."""
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> list[str]:
        """Symbols whose submission failed."""
        return [outcome.symbol for outcome in self.outcomes if not outcome.success]

    @property
    def success(self) -> bool:
        """Check if the fetch succeeded and every feed was updated."""
        return self.fetch_error is None and self.succeeded == self.attempted

    def outcome_for(self, symbol: str) -> SubmissionOutcome | None:
        for outcome in self.outcomes:
            if outcome.symbol == symbol:
                return outcome
        return None

    def finish(self) -> CycleReport:
        self.finished_at = time.time()
        return self

    def summary(self) -> str:
        """Return a one-line human-readable summary."""
        if self.fetch_error is not None:
            return f"Update cycle failed: {self.fetch_error}"
        line = f"Successfully updated {self.succeeded}/{self.attempted} price feed(s)"
        if self.failed:
            line += f" (failed: {', '.join(self.failed)})"
        return line
