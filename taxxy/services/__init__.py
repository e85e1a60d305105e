"""Application services built on the classifier and the database."""

from taxxy.services.learning_stats import LearningStats, get_learning_stats
from taxxy.services.transaction_service import ImportSummary, TransactionService

__all__ = [
    "ImportSummary",
    "LearningStats",
    "TransactionService",
    "get_learning_stats",
]
