"""Transaction classification orchestrator.

Retrieves the user's relevant past corrections, asks the model to classify the
transaction with those corrections as examples, and normalizes whatever comes
back. `classify` never raises for operational failures: unparsable output
degrades to a keyword-based result and a failed call to a fixed 0.05
confidence result.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from taxxy.agents.classification.model import ClassificationRequest, ClassificationResult, RetrievalResult
from taxxy.agents.classification.parsing import (
    failure_result,
    keyword_fallback,
    parse_classification_response,
    validate_classification,
)
from taxxy.agents.classification.prompts import build_classification_prompt
from taxxy.agents.classification.retriever import CorrectionRetriever
from taxxy.database.correction_store import CorrectionStore
from taxxy.llms.completion import CompletionClient
from taxxy.utils.mlflow import setup_mlflow_tracing
from taxxy.utils.sanitize import sanitize_description

logger = logging.getLogger(__name__)

FAILURE_REASON = "AI classification unavailable - manual review needed"


class TransactionClassifier:
    """Classifies transactions as business or personal with write-off eligibility."""

    def __init__(
        self,
        store: CorrectionStore,
        client: Optional[CompletionClient] = None,
        retriever: Optional[CorrectionRetriever] = None,
        enable_tracing: bool = True,
    ):
        """
        Initialize classifier

        Args:
            store: Correction log used for few-shot examples
            client: Completion client (if None, uses config for this agent)
            retriever: Correction retriever (if None, built over store)
            enable_tracing: Whether to enable MLflow tracing (default: True)
        """
        if enable_tracing:
            setup_mlflow_tracing(experiment_name="transaction_classification")

        self.client = client or CompletionClient(agent_name="classification")
        self.retriever = retriever or CorrectionRetriever(store)

    def classify(
        self,
        request: ClassificationRequest,
        owner: Optional[str],
        now: Optional[datetime] = None,
    ) -> ClassificationResult:
        """
        Classify a single transaction description.

        Args:
            request: Description plus optional amount and tax profile
            owner: Authenticated user id; None or "" classifies without corrections
            now: Reference time for correction recency (defaults to now)

        Returns:
            ClassificationResult with every field populated
        """
        result, _ = self.classify_with_matches(request, owner, now)
        return result

    def classify_with_matches(
        self,
        request: ClassificationRequest,
        owner: Optional[str],
        now: Optional[datetime] = None,
    ) -> Tuple[ClassificationResult, RetrievalResult]:
        """Classify and also return the corrections that informed the result."""
        description = request.description or ""
        retrieval = RetrievalResult()

        try:
            retrieval = self.retriever.retrieve(description, owner, now)
            result = self._classify_with_retrieval(request, description, retrieval)
        except Exception as e:
            logger.error(
                f"Classification failed for '{sanitize_description(description)}': {e}",
                exc_info=True,
            )
            result = failure_result(description, FAILURE_REASON)

        result.learned_from = len(retrieval.matches)
        result.correction_influence = retrieval.confidence_adjustment
        return result, retrieval

    def _classify_with_retrieval(
        self,
        request: ClassificationRequest,
        description: str,
        retrieval: RetrievalResult,
    ) -> ClassificationResult:
        if not description.strip():
            # Nothing for the model to work with
            logger.info("Empty description; using keyword fallback without calling the model")
            return validate_classification(
                keyword_fallback(description), description, retrieval.confidence_adjustment
            )

        prompt = build_classification_prompt(
            description=description,
            matches=retrieval.matches,
            confidence_adjustment=retrieval.confidence_adjustment,
            amount=request.amount,
            tax_profile=request.tax_profile,
        )
        response = self.client.complete([{"role": "user", "content": prompt}])
        return parse_classification_response(response, description, retrieval.confidence_adjustment)
