# rank_engine/services/promotion_service.py
"""
Promotion state machine.

One state per rank definition. After every ledger update the machine
compares currentCycleCC with targetCC and moves the participant at most one
rank up the ladder:

    NOVUS (2 CC) -> AS_SUP (25) -> SUP (75) -> AS_MGR (120) -> MGR (terminal)

On promotion the cycle is hard-reset to 0 (overshoot is discarded), a
history entry is appended and the role mapper is consulted.
"""
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional
import logging

from rank_engine.config.ranks import RankTable, RankDefinition, DEFAULT_RANK_TABLE
from rank_engine.config.roles import RoleMapper, DEFAULT_ROLE_MAPPER
from rank_engine.participant import Participant, PromotionHistoryEntry
from rank_engine.utils.time_machine import timeMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromotionOutcome:
    participant: Participant
    promotion: Optional[PromotionHistoryEntry] = None
    recoveredFromRankId: Optional[str] = None  # set when an unknown rank was replaced

    @property
    def promoted(self) -> bool:
        return self.promotion is not None


class PromotionStateMachine:
    """Evaluates one participant's cycle total against the active rank."""

    def __init__(
            self,
            rankTable: RankTable = DEFAULT_RANK_TABLE,
            roleMapper: RoleMapper = DEFAULT_ROLE_MAPPER
    ):
        self.rankTable = rankTable
        self.roleMapper = roleMapper

    def evaluate(self, participant: Participant) -> PromotionOutcome:
        """
        Apply the transition rule once.

        1. Terminal rank: nothing to do (cycle CC keeps accumulating).
        2. currentCycleCC < targetCC: nothing to do.
        3. Otherwise promote one rank.

        Returns:
            PromotionOutcome with the new participant and the appended
            history entry, if any.
        """
        participant, recoveredFrom = self._resolveRank(participant)
        progress = participant.rankProgress
        currentRank = self.rankTable.get(progress.currentRankId)

        participant = self._syncTarget(participant, currentRank)
        progress = participant.rankProgress

        nextRank = self.rankTable.next(currentRank.id)
        if nextRank is None:
            return PromotionOutcome(participant, recoveredFromRankId=recoveredFrom)

        if progress.currentCycleCC < progress.targetCC:
            return PromotionOutcome(participant, recoveredFromRankId=recoveredFrom)

        now = timeMachine.now
        entry = PromotionHistoryEntry(
            rankId=currentRank.id,
            dateAchieved=now,
            totalCCAtTime=participant.caseCredits
        )

        promoted = participant.withProgress(
            currentRankId=nextRank.id,
            currentCycleCC=Decimal("0"),
            targetCC=nextRank.targetCC,
            cycleStartDate=now,
            history=progress.history + (entry,)
        )
        newRole = self.roleMapper.resolveRole(nextRank.id, participant.role)
        if newRole != participant.role:
            promoted = replace(promoted, role=newRole)

        logger.info(
            f"Participant {participant.participantId} promoted: "
            f"{currentRank.id} → {nextRank.id} "
            f"(cycle={progress.currentCycleCC}, target={progress.targetCC}, "
            f"lifetime={participant.caseCredits}, role={promoted.role.value})"
        )

        return PromotionOutcome(promoted, promotion=entry, recoveredFromRankId=recoveredFrom)

    def _resolveRank(self, participant: Participant):
        """Replace an unknown currentRankId with the lowest tier."""
        progress = participant.rankProgress
        if progress.currentRankId in self.rankTable:
            return participant, None

        lowest = self.rankTable.lowest
        logger.warning(
            f"Participant {participant.participantId} has unknown rank "
            f"'{progress.currentRankId}', falling back to '{lowest.id}'"
        )
        healed = participant.withProgress(
            currentRankId=lowest.id,
            targetCC=lowest.targetCC
        )
        return healed, progress.currentRankId

    def _syncTarget(self, participant: Participant, rank: RankDefinition) -> Participant:
        """Legacy records may carry targetCC=0 on a promotable rank."""
        progress = participant.rankProgress
        if progress.targetCC <= 0 and not rank.isTerminal:
            logger.warning(
                f"Participant {participant.participantId} had targetCC={progress.targetCC} "
                f"on rank {rank.id}, resynced to {rank.targetCC}"
            )
            return participant.withProgress(targetCC=rank.targetCC)
        return participant
