# rank_engine/utils/progress_summary.py
"""
Read model for dashboards: how far a participant is from the next rank.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from rank_engine.config.ranks import RankDefinition, RankTable, DEFAULT_RANK_TABLE
from rank_engine.participant import Participant

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ProgressSummary:
    currentRank: Optional[RankDefinition]
    nextRank: Optional[RankDefinition]
    currentCycleCC: Decimal
    targetCC: Decimal
    progressPercent: Decimal
    remainingCC: Decimal

    @property
    def isTerminal(self) -> bool:
        return self.currentRank is not None and self.nextRank is None


def summarizeProgress(
        participant: Participant,
        rankTable: RankTable = DEFAULT_RANK_TABLE
) -> ProgressSummary:
    """
    Percent of the current cycle target reached, capped at 100.

    The terminal rank reports 100% and nothing remaining. An unknown rank
    reports 0% so the dashboard can still render.
    """
    progress = participant.rankProgress
    currentRank = rankTable.get(progress.currentRankId)
    nextRank = rankTable.next(progress.currentRankId) if currentRank else None
    cycle = progress.currentCycleCC
    target = progress.targetCC

    if currentRank is not None and nextRank is None:
        percent = HUNDRED
        remaining = Decimal("0")
    elif currentRank is None or target <= 0:
        percent = Decimal("0")
        remaining = max(Decimal("0"), target)
    else:
        percent = min(HUNDRED, cycle / target * HUNDRED)
        remaining = max(Decimal("0"), target - cycle)

    return ProgressSummary(
        currentRank=currentRank,
        nextRank=nextRank,
        currentCycleCC=cycle,
        targetCC=target,
        progressPercent=percent.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        remainingCC=remaining
    )
