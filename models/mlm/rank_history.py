# models/mlm/rank_history.py
"""
RankHistory model - append-only log of promotions.
"""
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DECIMAL, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base, _get_current_time, as_utc
from rank_engine.participant import PromotionHistoryEntry


class RankHistory(Base):
    __tablename__ = 'rank_history'

    historyID = Column(Integer, primary_key=True, autoincrement=True)
    createdAt = Column(DateTime, default=_get_current_time)

    # Relations
    participantID = Column(Integer, ForeignKey('participants.participantID'), nullable=False, index=True)

    # Rank details
    rankId = Column(String, nullable=False)  # rank cleared
    newRankId = Column(String, nullable=True)  # rank entered
    dateAchieved = Column(DateTime, nullable=False)

    # Qualification metrics at time of achievement
    totalCCAtTime = Column(DECIMAL(14, 3), nullable=False)

    # Sale that triggered the promotion
    transactionId = Column(String, nullable=True)

    # Relationships
    participant = relationship('ParticipantRecord', back_populates='rankHistory')

    @classmethod
    def fromEntry(cls, entry: PromotionHistoryEntry, newRankId: str, transactionId: str = None) -> "RankHistory":
        return cls(
            rankId=entry.rankId,
            newRankId=newRankId,
            dateAchieved=entry.dateAchieved,
            totalCCAtTime=entry.totalCCAtTime,
            transactionId=transactionId
        )

    def toEntry(self) -> PromotionHistoryEntry:
        return PromotionHistoryEntry(
            rankId=self.rankId,
            dateAchieved=as_utc(self.dateAchieved),
            totalCCAtTime=Decimal(str(self.totalCCAtTime))
        )

    def __repr__(self):
        return f"<RankHistory(participant={self.participantID}, rank={self.rankId}, date={self.dateAchieved})>"
