"""
Recommendation engine: converts bank records into a ranked top-N list.

Modules
-------
ranker : rank_by_return() + rank_by_deposit_rate() — stable, pure sorts.
engine : RecommendationEngine — train-once, score, term override, top-N.
"""
