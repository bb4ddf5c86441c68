# rank_engine/services/progression_service.py
"""
Progression service: valuation → ledger → promotion as one step.

Works on value objects only. Storage lives in SaleService.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional
import logging

from rank_engine.config.ranks import RankTable, DEFAULT_RANK_TABLE
from rank_engine.config.roles import Role, RoleMapper, DEFAULT_ROLE_MAPPER
from rank_engine.events.event_bus import EventBus, eventBus, EngineEvents
from rank_engine.participant import Participant, PromotionHistoryEntry
from rank_engine.sale import SaleRecord
from rank_engine.services.ledger_service import applyCredit, parseDelta
from rank_engine.services.promotion_service import PromotionStateMachine
from rank_engine.services.valuation_service import calculateCC

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressionResult:
    participant: Participant
    ccEarned: Decimal
    previousRole: Role
    promotion: Optional[PromotionHistoryEntry] = None
    recoveredFromRankId: Optional[str] = None

    @property
    def promoted(self) -> bool:
        return self.promotion is not None

    @property
    def roleChanged(self) -> bool:
        return self.participant.role != self.previousRole


class ProgressionService:
    """Applies credits to a participant and publishes the resulting events."""

    def __init__(
            self,
            rankTable: RankTable = DEFAULT_RANK_TABLE,
            roleMapper: RoleMapper = DEFAULT_ROLE_MAPPER,
            bus: EventBus = eventBus
    ):
        self.rankTable = rankTable
        self.stateMachine = PromotionStateMachine(rankTable, roleMapper)
        self.bus = bus

    def applyCredit(self, participant: Participant, ccDelta: Any, publish: bool = True) -> ProgressionResult:
        """
        Ledger update followed by exactly one promotion evaluation.

        Args:
            publish: emit events now. Storage callers pass False and call
                publish() after their commit.

        Raises:
            EngineError(INVALID_DELTA) before anything is changed.
        """
        delta = parseDelta(ccDelta)
        credited = applyCredit(participant, delta)
        outcome = self.stateMachine.evaluate(credited)

        result = ProgressionResult(
            participant=outcome.participant,
            ccEarned=delta,
            previousRole=participant.role,
            promotion=outcome.promotion,
            recoveredFromRankId=outcome.recoveredFromRankId
        )
        if publish:
            self.publish(result)
        return result

    def recordSale(self, participant: Participant, sale: SaleRecord, publish: bool = True) -> ProgressionResult:
        """
        Value the sale and credit it.

        ccEarned is recomputed from amount and type so a tampered record
        cannot credit a different amount.
        """
        ccEarned = calculateCC(sale.amount, sale.saleType)
        if ccEarned != sale.ccEarned:
            logger.warning(
                f"Sale {sale.transactionId} carried ccEarned={sale.ccEarned}, "
                f"recomputed {ccEarned}"
            )

        logger.info(
            f"Recording sale {sale.transactionId} for participant "
            f"{participant.participantId}: {sale.amount} {sale.saleType.value} → {ccEarned} CC"
        )
        return self.applyCredit(participant, ccEarned, publish=publish)

    def publish(self, result: ProgressionResult):
        participant = result.participant
        progress = participant.rankProgress

        if result.recoveredFromRankId is not None:
            self.bus.emit(EngineEvents.RANK_DEFINITION_MISSING, {
                "participantId": participant.participantId,
                "unknownRankId": result.recoveredFromRankId,
                "fallbackRankId": self.rankTable.lowest.id
            })

        self.bus.emit(EngineEvents.CREDIT_APPLIED, {
            "participantId": participant.participantId,
            "ccDelta": result.ccEarned,
            "caseCredits": participant.caseCredits,
            "currentCycleCC": progress.currentCycleCC
        })

        if result.promoted:
            self.bus.emit(EngineEvents.RANK_ACHIEVED, {
                "participantId": participant.participantId,
                "clearedRankId": result.promotion.rankId,
                "newRankId": progress.currentRankId,
                "totalCCAtTime": result.promotion.totalCCAtTime,
                "dateAchieved": result.promotion.dateAchieved
            })

        if result.roleChanged:
            self.bus.emit(EngineEvents.ROLE_CHANGED, {
                "participantId": participant.participantId,
                "previousRole": result.previousRole,
                "newRole": participant.role
            })
