# models/sale.py
"""
SaleEntry model - reported sales and the CC they earned.
"""
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DECIMAL, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.base import Base, AuditMixin, as_utc
from rank_engine.sale import SaleRecord, SaleStatus, SaleType


class SaleEntry(Base, AuditMixin):
    __tablename__ = 'sales'

    # Primary key
    saleID = Column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    participantID = Column(Integer, ForeignKey('participants.participantID'), nullable=False, index=True)

    # Sale details
    transactionId = Column(String, unique=True, nullable=False)
    amount = Column(DECIMAL(14, 2), nullable=False)
    saleType = Column(String, nullable=False)  # RETAIL, WHOLESALE
    ccEarned = Column(DECIMAL(14, 3), nullable=False)
    soldAt = Column(DateTime, nullable=False)
    receiptUrl = Column(String, nullable=True)

    # Status
    status = Column(String, default=SaleStatus.PENDING.value, index=True)  # PENDING, APPROVED, REJECTED
    creditedAt = Column(DateTime, nullable=True)

    # Relationships
    participant = relationship('ParticipantRecord', back_populates='sales')

    @classmethod
    def fromSaleRecord(cls, participantID: int, sale: SaleRecord) -> "SaleEntry":
        return cls(
            participantID=participantID,
            transactionId=sale.transactionId,
            amount=sale.amount,
            saleType=sale.saleType.value,
            ccEarned=sale.ccEarned,
            soldAt=sale.timestamp,
            receiptUrl=sale.receiptUrl,
            status=sale.status.value
        )

    def toSaleRecord(self) -> SaleRecord:
        return SaleRecord(
            amount=Decimal(str(self.amount)),
            saleType=SaleType(self.saleType),
            ccEarned=Decimal(str(self.ccEarned)),
            transactionId=self.transactionId,
            timestamp=as_utc(self.soldAt),
            status=SaleStatus(self.status),
            receiptUrl=self.receiptUrl
        )

    def __repr__(self):
        return f"<SaleEntry(saleID={self.saleID}, tx={self.transactionId}, cc={self.ccEarned}, status={self.status})>"
