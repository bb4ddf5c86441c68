# rank_engine/services/ledger_service.py
"""
Credit ledger: adds a CC delta to lifetime and current-cycle totals.
Promotion is decided afterwards by the promotion state machine.
"""
from dataclasses import replace
from decimal import Decimal
from typing import Any
import logging

from rank_engine.errors import EngineError, EngineErrorKind
from rank_engine.participant import Participant
from rank_engine.utils.decimals import toDecimal

logger = logging.getLogger(__name__)


def parseDelta(ccDelta: Any) -> Decimal:
    """Only forward-accruing credits are accepted."""
    value = toDecimal(ccDelta)
    if value is None or value < 0:
        raise EngineError(EngineErrorKind.INVALID_DELTA, f"ccDelta={ccDelta!r}")
    return value


def applyCredit(participant: Participant, ccDelta: Any) -> Participant:
    """
    Return participant with ccDelta added to caseCredits and currentCycleCC.

    Raises:
        EngineError(INVALID_DELTA): negative or non-finite delta.
            The input participant is never modified.
    """
    delta = parseDelta(ccDelta)

    updated = replace(
        participant.withProgress(
            currentCycleCC=participant.rankProgress.currentCycleCC + delta
        ),
        caseCredits=participant.caseCredits + delta
    )

    logger.debug(
        f"Credited participant {participant.participantId}: +{delta} CC, "
        f"lifetime={updated.caseCredits}, cycle={updated.rankProgress.currentCycleCC}"
    )
    return updated
