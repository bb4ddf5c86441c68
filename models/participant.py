# models/participant.py
"""
Participant model - stored participant record with role, credits and rank progress.
"""
import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DECIMAL, JSON
from sqlalchemy.orm import relationship

from models.base import Base, AuditMixin, as_utc
from rank_engine.config.ranks import RankTable, DEFAULT_RANK_TABLE, RANK_ALIASES
from rank_engine.config.roles import Role
from rank_engine.participant import Participant, createDefaultRankProgress

logger = logging.getLogger(__name__)


class ParticipantRecord(Base, AuditMixin):
    __tablename__ = 'participants'

    # Primary identification
    participantID = Column(Integer, primary_key=True, autoincrement=True)
    handle = Column(String, unique=True, nullable=False)  # "@alice_success"
    name = Column(String, nullable=True)

    # Access
    role = Column(String, default=Role.STUDENT.value, index=True)  # STUDENT, SPONSOR, ADMIN, SUPER_ADMIN

    # Lifetime Case Credits
    caseCredits = Column(DECIMAL(14, 3), default=0)

    # Rank progress in JSON, history lives in rank_history
    rankProgress = Column(JSON, nullable=True)
    # {
    #   "currentRankId": "NOVUS",
    #   "currentCycleCC": "0.5",
    #   "targetCC": "2",
    #   "cycleStartDate": "2024-01-15T10:30:00+00:00"
    # }

    # Relationships
    sales = relationship('SaleEntry', back_populates='participant', order_by='SaleEntry.saleID')
    rankHistory = relationship(
        'RankHistory',
        back_populates='participant',
        order_by='RankHistory.historyID',
        cascade='all, delete-orphan'
    )

    def toParticipant(self, rankTable: RankTable = DEFAULT_RANK_TABLE) -> Participant:
        """
        Load the value object. Records without rank progress (created before
        the engine existed) get the default progress here.
        """
        progress = createDefaultRankProgress(rankTable)
        data = self.rankProgress or {}

        if data:
            cycleStart = data.get("cycleStartDate")
            rankId = data.get("currentRankId", progress.currentRankId)
            targetCC = Decimal(str(data.get("targetCC", progress.targetCC)))

            alias = RANK_ALIASES.get(rankId)
            if rankId not in rankTable and alias in rankTable:
                logger.info(f"Participant {self.participantID} rank {rankId} loaded as {alias}")
                rankId = alias
                targetCC = rankTable.get(alias).targetCC

            progress = replace(
                progress,
                currentRankId=rankId,
                currentCycleCC=Decimal(str(data.get("currentCycleCC", progress.currentCycleCC))),
                targetCC=targetCC,
                cycleStartDate=(
                    as_utc(datetime.fromisoformat(cycleStart)) if cycleStart else progress.cycleStartDate
                )
            )

        progress = replace(progress, history=tuple(entry.toEntry() for entry in self.rankHistory))

        return Participant(
            participantId=self.participantID,
            role=Role(self.role or Role.STUDENT.value),
            caseCredits=Decimal(str(self.caseCredits or 0)),
            rankProgress=progress
        )

    def applyParticipant(self, participant: Participant):
        """Copy engine output back onto the record (history rows are added separately)."""
        progress = participant.rankProgress
        self.role = participant.role.value
        self.caseCredits = participant.caseCredits
        self.rankProgress = {
            "currentRankId": progress.currentRankId,
            "currentCycleCC": str(progress.currentCycleCC),
            "targetCC": str(progress.targetCC),
            "cycleStartDate": progress.cycleStartDate.isoformat()
        }

    def __repr__(self):
        currentRank = (self.rankProgress or {}).get("currentRankId")
        return f"<ParticipantRecord(participantID={self.participantID}, handle={self.handle}, rank={currentRank})>"
