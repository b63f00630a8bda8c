"""
Match Scoring
Weighted-rule scoring of discovered postings
"""
from .match_scorer import MatchScorer, MatchWeights, DEFAULT_WEIGHTS

__all__ = ["MatchScorer", "MatchWeights", "DEFAULT_WEIGHTS"]
