# models/__init__.py
"""
Database models for the rank engine.
Import all models here so relationships resolve and for easy access.
"""

# Base and mixins
from models.base import Base, AuditMixin

# Core models
from models.participant import ParticipantRecord
from models.sale import SaleEntry

# Rank progression models
from models.mlm.rank_history import RankHistory

__all__ = [
    # Base
    'Base',
    'AuditMixin',

    # Core
    'ParticipantRecord',
    'SaleEntry',

    # Rank progression
    'RankHistory',
]
