# rank_engine/services/sale_service.py
"""
Sale service: the storage boundary of the rank engine.

Loads participant records, runs the progression service under the
participant's lock and commits sale, participant and rank history changes
as one transaction.
"""
from dataclasses import dataclass
from typing import Any, List, Optional, Union
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import ParticipantRecord, SaleEntry, RankHistory
from rank_engine.config.ranks import RankTable, DEFAULT_RANK_TABLE
from rank_engine.config.roles import Role
from rank_engine.errors import EngineError, EngineErrorKind
from rank_engine.events.event_bus import EventBus, eventBus, EngineEvents
from rank_engine.participant import Participant, createDefaultRankProgress
from rank_engine.sale import SaleRecord, SaleStatus, SaleType
from rank_engine.services.progression_service import ProgressionService, ProgressionResult
from rank_engine.services.valuation_service import createSaleRecord
from rank_engine.utils.participant_locks import ParticipantLocks, participantLocks
from rank_engine.utils.time_machine import timeMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleOutcome:
    sale: SaleRecord
    result: Optional[ProgressionResult] = None  # None when the sale was not credited

    @property
    def participant(self) -> Optional[Participant]:
        return self.result.participant if self.result else None


class SaleService:
    """Service for recording sales and crediting participants."""

    def __init__(
            self,
            session: Session,
            rankTable: RankTable = DEFAULT_RANK_TABLE,
            progression: Optional[ProgressionService] = None,
            locks: ParticipantLocks = participantLocks,
            bus: EventBus = eventBus
    ):
        self.session = session
        self.rankTable = rankTable
        self.bus = bus
        self.progression = progression or ProgressionService(rankTable, bus=bus)
        self.locks = locks

    def createParticipant(
            self,
            handle: str,
            name: Optional[str] = None,
            role: Role = Role.STUDENT
    ) -> Participant:
        """Register a participant with default rank progress."""
        record = ParticipantRecord(handle=handle, name=name, role=role.value, caseCredits=0)
        record.applyParticipant(Participant(
            participantId=None,
            role=role,
            rankProgress=createDefaultRankProgress(self.rankTable)
        ))
        self.session.add(record)
        self.session.commit()

        logger.info(f"Participant {record.participantID} ({handle}) created")
        return record.toParticipant(self.rankTable)

    def getParticipant(self, participantId: int) -> Participant:
        return self._getRecord(participantId).toParticipant(self.rankTable)

    def getSalesHistory(self, participantId: int) -> List[SaleRecord]:
        """Participant's sales, newest first."""
        entries = self.session.query(SaleEntry).filter_by(
            participantID=participantId
        ).order_by(SaleEntry.saleID.desc()).all()
        return [entry.toSaleRecord() for entry in entries]

    def submitSale(
            self,
            participantId: int,
            amount: Any,
            saleType: Union[SaleType, str],
            transactionId: str,
            status: Union[SaleStatus, str] = SaleStatus.APPROVED,
            receiptUrl: Optional[str] = None
    ) -> SaleOutcome:
        """
        Record a reported sale.

        APPROVED sales are credited immediately, PENDING sales wait for
        approveSale(), REJECTED sales are only stored.

        Raises:
            EngineError: UNKNOWN_PARTICIPANT, DUPLICATE_TRANSACTION,
                INVALID_AMOUNT, INVALID_SALE_TYPE. Nothing is stored.
        """
        # Locks are only registered for participants that exist
        self._getRecord(participantId)

        with self.locks.hold(participantId):
            try:
                record = self._getRecord(participantId)
                self._ensureNewTransaction(transactionId)
                sale = createSaleRecord(
                    amount, saleType, transactionId,
                    status=status, receiptUrl=receiptUrl
                )

                entry = SaleEntry.fromSaleRecord(record.participantID, sale)
                self.session.add(entry)

                result = None
                if sale.status is SaleStatus.APPROVED:
                    result = self.progression.recordSale(
                        record.toParticipant(self.rankTable), sale, publish=False
                    )
                    self._persistResult(record, entry, result)

                self.session.commit()
            except EngineError as e:
                self.session.rollback()
                logger.warning(f"Sale {transactionId} for participant {participantId} rejected: {e}")
                raise
            except IntegrityError as e:
                # transactionId is the only unique column of sales
                self.session.rollback()
                logger.warning(f"Sale {transactionId} for participant {participantId} lost insert race: {e}")
                raise EngineError(
                    EngineErrorKind.DUPLICATE_TRANSACTION, f"transactionId={transactionId}"
                ) from e
            except Exception as e:
                self.session.rollback()
                logger.error(f"Error recording sale {transactionId} for participant {participantId}: {e}")
                raise

        logger.info(
            f"Sale {transactionId} recorded for participant {participantId}: "
            f"{sale.ccEarned} CC, status={sale.status.value}"
        )
        self._announce(sale, participantId, result)
        return SaleOutcome(sale=sale, result=result)

    def approveSale(self, transactionId: str) -> SaleOutcome:
        """
        Credit a PENDING sale.

        Raises:
            EngineError: UNKNOWN_SALE, INVALID_SALE_STATUS.
        """
        participantId = self._getSaleEntry(transactionId).participantID

        with self.locks.hold(participantId):
            try:
                entry = self._getSaleEntry(transactionId)
                self.session.refresh(entry)
                self._ensurePending(entry)

                record = self._getRecord(participantId)
                entry.status = SaleStatus.APPROVED.value
                sale = entry.toSaleRecord()

                result = self.progression.applyCredit(
                    record.toParticipant(self.rankTable), sale.ccEarned, publish=False
                )
                self._persistResult(record, entry, result)

                self.session.commit()
            except Exception as e:
                self.session.rollback()
                logger.error(f"Error approving sale {transactionId}: {e}")
                raise

        logger.info(f"Sale {transactionId} approved: +{sale.ccEarned} CC for participant {participantId}")
        self._announce(sale, participantId, result)
        return SaleOutcome(sale=sale, result=result)

    def rejectSale(self, transactionId: str) -> SaleRecord:
        """
        Mark a PENDING sale as REJECTED. No credits move.

        Raises:
            EngineError: UNKNOWN_SALE, INVALID_SALE_STATUS.
        """
        participantId = self._getSaleEntry(transactionId).participantID

        with self.locks.hold(participantId):
            try:
                entry = self._getSaleEntry(transactionId)
                self.session.refresh(entry)
                self._ensurePending(entry)

                entry.status = SaleStatus.REJECTED.value
                sale = entry.toSaleRecord()
                self.session.commit()
            except Exception as e:
                self.session.rollback()
                logger.error(f"Error rejecting sale {transactionId}: {e}")
                raise

        logger.info(f"Sale {transactionId} rejected for participant {participantId}")
        self.bus.emit(EngineEvents.SALE_REJECTED, {
            "participantId": participantId,
            "transactionId": transactionId
        })
        return sale

    def _persistResult(self, record: ParticipantRecord, entry: SaleEntry, result: ProgressionResult):
        record.applyParticipant(result.participant)
        entry.creditedAt = timeMachine.now

        if result.promotion is not None:
            record.rankHistory.append(RankHistory.fromEntry(
                result.promotion,
                newRankId=result.participant.rankProgress.currentRankId,
                transactionId=entry.transactionId
            ))

    def _announce(self, sale: SaleRecord, participantId: int, result: Optional[ProgressionResult]):
        self.bus.emit(EngineEvents.SALE_RECORDED, {
            "participantId": participantId,
            "transactionId": sale.transactionId,
            "ccEarned": sale.ccEarned,
            "status": sale.status
        })
        if result is not None:
            self.progression.publish(result)

    def _getRecord(self, participantId: int) -> ParticipantRecord:
        record = self.session.query(ParticipantRecord).filter_by(participantID=participantId).first()
        if not record:
            raise EngineError(EngineErrorKind.UNKNOWN_PARTICIPANT, f"participantId={participantId}")
        return record

    def _getSaleEntry(self, transactionId: str) -> SaleEntry:
        entry = self.session.query(SaleEntry).filter_by(transactionId=transactionId).first()
        if not entry:
            raise EngineError(EngineErrorKind.UNKNOWN_SALE, f"transactionId={transactionId}")
        return entry

    def _ensureNewTransaction(self, transactionId: str):
        exists = self.session.query(SaleEntry.saleID).filter_by(transactionId=transactionId).first()
        if exists:
            raise EngineError(EngineErrorKind.DUPLICATE_TRANSACTION, f"transactionId={transactionId}")

    @staticmethod
    def _ensurePending(entry: SaleEntry):
        if entry.status != SaleStatus.PENDING.value:
            raise EngineError(
                EngineErrorKind.INVALID_SALE_STATUS,
                f"sale {entry.transactionId} is {entry.status}"
            )
