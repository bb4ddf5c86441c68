# rank_engine/participant.py
"""
Participant value objects: lifetime credits, role and rank progress.
All objects are frozen; every engine step returns a new instance.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from rank_engine.config.ranks import RankTable, DEFAULT_RANK_TABLE
from rank_engine.config.roles import Role
from rank_engine.utils.time_machine import timeMachine


@dataclass(frozen=True)
class PromotionHistoryEntry:
    rankId: str  # rank just cleared
    dateAchieved: datetime
    totalCCAtTime: Decimal

    def toDict(self) -> Dict[str, Any]:
        return {
            "rankId": self.rankId,
            "dateAchieved": self.dateAchieved.isoformat(),
            "totalCCAtTime": str(self.totalCCAtTime)
        }


@dataclass(frozen=True)
class RankProgress:
    currentRankId: str
    currentCycleCC: Decimal
    targetCC: Decimal
    cycleStartDate: datetime
    history: Tuple[PromotionHistoryEntry, ...] = ()

    def toDict(self) -> Dict[str, Any]:
        return {
            "currentRankId": self.currentRankId,
            "currentCycleCC": str(self.currentCycleCC),
            "targetCC": str(self.targetCC),
            "cycleStartDate": self.cycleStartDate.isoformat(),
            "history": [entry.toDict() for entry in self.history]
        }


def createDefaultRankProgress(
        rankTable: RankTable = DEFAULT_RANK_TABLE,
        startDate: Optional[datetime] = None
) -> RankProgress:
    """
    Fresh progress at the lowest tier.

    Used for new participants and for records created before the engine
    existed. Call it once where a record is loaded, not at use sites.
    """
    lowest = rankTable.lowest
    return RankProgress(
        currentRankId=lowest.id,
        currentCycleCC=Decimal("0"),
        targetCC=lowest.targetCC,
        cycleStartDate=startDate or timeMachine.now,
        history=()
    )


@dataclass(frozen=True)
class Participant:
    participantId: Any
    role: Role = Role.STUDENT
    caseCredits: Decimal = Decimal("0")  # lifetime CC, never decreases
    rankProgress: RankProgress = field(default_factory=createDefaultRankProgress)

    def withProgress(self, **changes) -> "Participant":
        return replace(self, rankProgress=replace(self.rankProgress, **changes))

    def toFragment(self) -> Dict[str, Any]:
        """Fields the caller persists and shows: caseCredits, role, rankProgress."""
        return {
            "caseCredits": str(self.caseCredits),
            "role": self.role.value,
            "rankProgress": self.rankProgress.toDict()
        }
