"""
Lockout policy untuk PIN Gate API.
Memetakan jumlah percobaan gagal ke keputusan penalty (none / warn / lock).
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from app.core.constants import PenaltyKind
from app.core.exceptions import PolicyMisconfigurationError


class Threshold(BaseModel):
    """Satu baris tabel lockout: attempt ke-N mengunci selama penalty_seconds."""

    model_config = ConfigDict(frozen=True)

    attempt_count: int = Field(..., gt=0)
    penalty_seconds: int = Field(..., gt=0)


class ThresholdRule(BaseModel):
    """
    Konfigurasi lockout yang immutable.

    Attributes:
        increment: Panjang satu siklus percobaan (dipakai untuk warning "last try")
        thresholds: Tabel lockout, attempt_count naik dan durasi tidak turun
    """

    model_config = ConfigDict(frozen=True)

    increment: int = Field(..., gt=0)
    thresholds: Tuple[Threshold, ...] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_escalation(self) -> "ThresholdRule":
        """Attempt counts strictly increasing, durations non-decreasing."""
        for previous, current in zip(self.thresholds, self.thresholds[1:]):
            if current.attempt_count <= previous.attempt_count:
                raise ValueError(
                    f"attempt counts must be strictly increasing "
                    f"({previous.attempt_count} then {current.attempt_count})"
                )
            if current.penalty_seconds < previous.penalty_seconds:
                raise ValueError(
                    f"lockout at attempt {current.attempt_count} ({current.penalty_seconds}s) "
                    f"is shorter than at attempt {previous.attempt_count} ({previous.penalty_seconds}s)"
                )
        return self

    @classmethod
    def build(
        cls,
        increment: int,
        thresholds: Iterable[Sequence[int]]
    ) -> "ThresholdRule":
        """
        Build rule dari pasangan (attempt_count, penalty_seconds).

        Args:
            increment: Panjang siklus
            thresholds: Pasangan (attempt_count, penalty_seconds)

        Returns:
            Validated ThresholdRule

        Raises:
            PolicyMisconfigurationError: Jika tabel tidak valid
        """
        try:
            rows = [
                {"attempt_count": row[0], "penalty_seconds": row[1]}
                for row in thresholds
            ]
            return cls(increment=increment, thresholds=rows)
        except (ValidationError, IndexError, TypeError) as exc:
            errors = exc.errors() if isinstance(exc, ValidationError) else [str(exc)]
            raise PolicyMisconfigurationError(errors=[
                error["msg"] if isinstance(error, dict) else error
                for error in errors
            ]) from exc


class PenaltyDecision(BaseModel):
    """Hasil evaluasi lockout policy."""

    model_config = ConfigDict(frozen=True)

    kind: PenaltyKind
    attempts_remaining: int
    duration_seconds: Optional[int] = None


class LockoutPolicy:
    """
    Pure lockout policy di atas ThresholdRule.

    Percobaan yang tidak ada di tabel tetapi jatuh di akhir siklus
    memakai rule terbesar yang sudah terlewati, jadi lockout setelah
    tabel habis mengulang penalty terpanjang.
    """

    def __init__(self, rule: ThresholdRule):
        self.rule = rule
        self._by_count: Dict[int, int] = {
            t.attempt_count: t.penalty_seconds for t in rule.thresholds
        }
        self._ordered: List[Threshold] = list(rule.thresholds)

    @property
    def increment(self) -> int:
        return self.rule.increment

    @property
    def first_threshold(self) -> int:
        return self._ordered[0].attempt_count

    def attempts_remaining(self, attempt_count: int) -> int:
        """
        Sisa percobaan dalam siklus saat ini.
        Tidak pernah 0: batas siklus dihitung sebagai siklus penuh.
        """
        increment = self.rule.increment
        cycle_position = attempt_count % increment or increment
        remaining = (increment - cycle_position) % increment
        return remaining or increment

    def penalty_for(self, attempt_count: int) -> Optional[int]:
        """
        Durasi lockout (detik) untuk attempt_count, atau None.

        Args:
            attempt_count: Jumlah percobaan gagal berturut-turut

        Returns:
            Durasi lockout dalam detik, None jika tidak ada lockout
        """
        if attempt_count <= 0:
            return None

        exact = self._by_count.get(attempt_count)
        if exact is not None:
            return exact

        if attempt_count % self.rule.increment:
            return None

        passed = [t for t in self._ordered if t.attempt_count <= attempt_count]
        if not passed:
            return None
        return passed[-1].penalty_seconds

    def next_attempt_locks(self, attempt_count: int) -> bool:
        """True jika satu percobaan gagal lagi akan memicu lockout."""
        return self.penalty_for(attempt_count + 1) is not None

    def evaluate(self, attempt_count: int) -> PenaltyDecision:
        """
        Evaluate penalty untuk attempt_count.

        Lock selalu menang atas warning pada attempt yang sama.

        Args:
            attempt_count: Jumlah percobaan gagal setelah increment

        Returns:
            PenaltyDecision
        """
        remaining = self.attempts_remaining(attempt_count)

        duration = self.penalty_for(attempt_count)
        if duration is not None:
            return PenaltyDecision(
                kind=PenaltyKind.LOCK,
                attempts_remaining=remaining,
                duration_seconds=duration
            )

        if remaining == 1:
            return PenaltyDecision(
                kind=PenaltyKind.WARN_ONE_MORE_ATTEMPT,
                attempts_remaining=remaining
            )

        return PenaltyDecision(kind=PenaltyKind.NONE, attempts_remaining=remaining)
