# rank_engine/__init__.py
"""
Credit & Rank Progression Engine - Case Credits, rank ladder and roles
for Forever Business Owner participants.

SaleService (database boundary) is imported from
rank_engine.services.sale_service directly.
"""

# Services
from rank_engine.services.valuation_service import calculateCC, createSaleRecord
from rank_engine.services.ledger_service import applyCredit
from rank_engine.services.promotion_service import PromotionStateMachine, PromotionOutcome
from rank_engine.services.progression_service import ProgressionService, ProgressionResult

# Models and configuration
from rank_engine.config.ranks import Rank, RANK_CONFIG, RankDefinition, RankTable, DEFAULT_RANK_TABLE
from rank_engine.config.roles import Role, RoleMapper, DEFAULT_ROLE_MAPPER
from rank_engine.participant import (
    Participant, RankProgress, PromotionHistoryEntry, createDefaultRankProgress
)
from rank_engine.sale import SaleRecord, SaleType, SaleStatus
from rank_engine.errors import EngineError, EngineErrorKind, ConfigurationError

# Utilities
from rank_engine.utils.time_machine import timeMachine
from rank_engine.utils.participant_locks import participantLocks
from rank_engine.utils.progress_summary import summarizeProgress, ProgressSummary

# Events
from rank_engine.events.event_bus import eventBus, EngineEvents

__all__ = [
    # Services
    'calculateCC',
    'createSaleRecord',
    'applyCredit',
    'PromotionStateMachine',
    'PromotionOutcome',
    'ProgressionService',
    'ProgressionResult',

    # Config
    'Rank',
    'RANK_CONFIG',
    'RankDefinition',
    'RankTable',
    'DEFAULT_RANK_TABLE',
    'Role',
    'RoleMapper',
    'DEFAULT_ROLE_MAPPER',

    # Value objects
    'Participant',
    'RankProgress',
    'PromotionHistoryEntry',
    'createDefaultRankProgress',
    'SaleRecord',
    'SaleType',
    'SaleStatus',

    # Errors
    'EngineError',
    'EngineErrorKind',
    'ConfigurationError',

    # Utils
    'timeMachine',
    'participantLocks',
    'summarizeProgress',
    'ProgressSummary',

    # Events
    'eventBus',
    'EngineEvents',
]
