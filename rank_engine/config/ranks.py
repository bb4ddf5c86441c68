# rank_engine/config/ranks.py
"""
Rank ladder configuration and the validated rank table.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional
import logging

from rank_engine.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Rank(Enum):
    NOVUS = "NOVUS"
    AS_SUP = "AS_SUP"
    SUP = "SUP"
    AS_MGR = "AS_MGR"
    MGR = "MGR"


RANK_CONFIG = {
    Rank.NOVUS: {
        "displayName": "Distributor",
        "targetCC": Decimal("2"),
        "monthsAllowed": 2,
        "nextRank": Rank.AS_SUP
    },
    Rank.AS_SUP: {
        "displayName": "Asst. Supervisor",
        "targetCC": Decimal("25"),
        "monthsAllowed": 2,
        "nextRank": Rank.SUP
    },
    Rank.SUP: {
        "displayName": "Supervisor",
        "targetCC": Decimal("75"),
        "monthsAllowed": 2,
        "nextRank": Rank.AS_MGR
    },
    Rank.AS_MGR: {
        "displayName": "Asst. Manager",
        "targetCC": Decimal("120"),
        "monthsAllowed": 2,
        "nextRank": Rank.MGR
    },
    Rank.MGR: {
        "displayName": "Manager",
        "targetCC": Decimal("0"),  # top of the CC ladder
        "monthsAllowed": 0,
        "nextRank": None
    }
}

# Structure-based ranks above MGR are not tracked; stored records
# carrying them are loaded at the top of the CC ladder
RANK_ALIASES = {
    "SOARING": Rank.MGR.value,
    "SAPPHIRE": Rank.MGR.value,
    "DIAMOND_SAPPHIRE": Rank.MGR.value,
    "DIAMOND": Rank.MGR.value,
}


@dataclass(frozen=True)
class RankDefinition:
    id: str
    displayName: str
    targetCC: Decimal
    nextRankId: Optional[str] = None
    monthsAllowed: int = 0

    @property
    def isTerminal(self) -> bool:
        return self.nextRankId is None


class RankTable:
    """
    Ordered, validated rank ladder. The first definition is the lowest tier.

    Validation runs once, in the constructor:
    - ids are unique
    - every nextRankId is None or a known id
    - following nextRankId from any rank reaches a terminal rank (no cycles)
    - non-terminal ranks have targetCC > 0
    """

    def __init__(self, definitions: Iterable[RankDefinition]):
        self._order: List[RankDefinition] = list(definitions)
        if not self._order:
            raise ConfigurationError("Rank table must contain at least one rank")

        self._byId: Dict[str, RankDefinition] = {}
        for definition in self._order:
            if definition.id in self._byId:
                raise ConfigurationError(f"Duplicate rank id '{definition.id}'")
            self._byId[definition.id] = definition

        for definition in self._order:
            self._validateDefinition(definition)

        for definition in self._order:
            self._checkTerminates(definition)

        logger.debug(f"Rank table built: {[d.id for d in self._order]}")

    def _validateDefinition(self, definition: RankDefinition):
        if definition.nextRankId is not None and definition.nextRankId not in self._byId:
            raise ConfigurationError(
                f"Rank '{definition.id}' points to unknown next rank '{definition.nextRankId}'"
            )

        if definition.targetCC < 0:
            raise ConfigurationError(f"Rank '{definition.id}' has negative targetCC")

        if not definition.isTerminal and definition.targetCC <= 0:
            raise ConfigurationError(
                f"Rank '{definition.id}' must have targetCC > 0 to be promotable"
            )

    def _checkTerminates(self, start: RankDefinition):
        seen = set()
        current = start
        while current.nextRankId is not None:
            if current.id in seen:
                raise ConfigurationError(f"Rank ladder cycle detected from '{start.id}'")
            seen.add(current.id)
            current = self._byId[current.nextRankId]

    @property
    def lowest(self) -> RankDefinition:
        return self._order[0]

    def get(self, rankId: Optional[str]) -> Optional[RankDefinition]:
        if rankId is None:
            return None
        return self._byId.get(rankId)

    def next(self, rankId: str) -> Optional[RankDefinition]:
        """Definition of the rank after rankId, None at the terminal rank."""
        definition = self._byId.get(rankId)
        if definition is None or definition.isTerminal:
            return None
        return self._byId[definition.nextRankId]

    def __contains__(self, rankId) -> bool:
        return rankId in self._byId

    def __iter__(self):
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    @classmethod
    def fromConfig(cls, rankConfig: Dict[Rank, Dict]) -> "RankTable":
        """Build table from a RANK_CONFIG-style mapping, keeping its order."""
        definitions = []
        for rankEnum, data in rankConfig.items():
            nextRank = data.get("nextRank")
            definitions.append(RankDefinition(
                id=rankEnum.value,
                displayName=data["displayName"],
                targetCC=Decimal(str(data["targetCC"])),
                nextRankId=nextRank.value if nextRank else None,
                monthsAllowed=int(data.get("monthsAllowed", 0))
            ))
        return cls(definitions)


DEFAULT_RANK_TABLE = RankTable.fromConfig(RANK_CONFIG)
