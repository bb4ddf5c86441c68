# rank_engine/config/roles.py
"""
Participant roles and the rank -> role upgrade table.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from rank_engine.config.ranks import Rank, RankTable, DEFAULT_RANK_TABLE
from rank_engine.errors import ConfigurationError


class Role(Enum):
    STUDENT = "STUDENT"
    SPONSOR = "SPONSOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


@dataclass(frozen=True)
class RoleUpgrade:
    toRole: Role
    fromRoles: FrozenSet[Role]


# Supervisor tiers open the sponsor screens
ROLE_UPGRADES = {
    Rank.AS_SUP.value: RoleUpgrade(Role.SPONSOR, frozenset({Role.STUDENT})),
    Rank.SUP.value: RoleUpgrade(Role.SPONSOR, frozenset({Role.STUDENT})),
}


class RoleMapper:
    """Declarative rank -> role lookup, checked against the rank table once."""

    def __init__(self, upgrades: Dict[str, RoleUpgrade], rankTable: RankTable):
        for rankId in upgrades:
            if rankId not in rankTable:
                raise ConfigurationError(f"Role upgrade defined for unknown rank '{rankId}'")
        self._upgrades = dict(upgrades)

    def roleForRank(self, rankId: str) -> Optional[Role]:
        """Role granted by reaching rankId, None if the tier grants nothing."""
        upgrade = self._upgrades.get(rankId)
        return upgrade.toRole if upgrade else None

    def resolveRole(self, rankId: str, currentRole: Role) -> Role:
        """Role after reaching rankId. Roles outside the upgrade's source set are kept."""
        upgrade = self._upgrades.get(rankId)
        if upgrade is None or currentRole not in upgrade.fromRoles:
            return currentRole
        return upgrade.toRole


DEFAULT_ROLE_MAPPER = RoleMapper(ROLE_UPGRADES, DEFAULT_RANK_TABLE)
