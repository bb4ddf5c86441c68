# models/mlm/__init__.py
"""
Rank progression models.
"""

from models.mlm.rank_history import RankHistory

__all__ = [
    'RankHistory',
]
