"""Write-off suggestion agent."""

import logging
from typing import Optional

from taxxy.agents.classification.model import ParseFailed, WriteOff
from taxxy.agents.classification.parsing import UNCERTAIN_REASON, coerce_write_off, extract_json_object
from taxxy.agents.classification.prompts import build_write_off_prompt
from taxxy.agents.classification.retriever import CorrectionRetriever
from taxxy.database.correction_store import CorrectionStore
from taxxy.llms.completion import CompletionClient
from taxxy.utils.sanitize import sanitize_description, sanitize_for_logging

logger = logging.getLogger(__name__)

UNAVAILABLE_REASON = "Write-off suggestion unavailable - manual review needed"


class WriteOffAdvisor:
    """Suggests whether a transaction is a deductible business write-off."""

    def __init__(
        self,
        store: CorrectionStore,
        client: Optional[CompletionClient] = None,
        retriever: Optional[CorrectionRetriever] = None,
    ):
        self.client = client or CompletionClient(agent_name="write_off")
        self.retriever = retriever or CorrectionRetriever(store)

    def suggest(self, description: str, purpose: Optional[str], owner: Optional[str]) -> WriteOff:
        """
        Suggest write-off eligibility for a transaction.

        Never raises; parse and call failures return a non-write-off with a
        reason asking for manual review.

        Args:
            description: Transaction description
            purpose: Current purpose ("business", "personal") if known
            owner: Authenticated user id

        Returns:
            WriteOff suggestion
        """
        try:
            matches = self.retriever.find_relevant_corrections(description, owner)
            prompt = build_write_off_prompt(description, purpose, matches)
            response = self.client.complete_prompt(prompt)
        except Exception as e:
            logger.error(
                f"Write-off suggestion failed for '{sanitize_description(description)}': {e}",
                exc_info=True,
            )
            return WriteOff(is_write_off=False, reason=UNAVAILABLE_REASON)

        outcome = extract_json_object(response)
        if isinstance(outcome, ParseFailed):
            logger.warning(f"Unparsable write-off response: {sanitize_for_logging(outcome.raw_text)}")
            return WriteOff(is_write_off=False, reason=UNCERTAIN_REASON)

        # Accept both {"writeOff": {...}} and a bare {"isWriteOff": ...}
        raw = outcome.data.get("writeOff", outcome.data.get("write_off", outcome.data))
        return coerce_write_off(raw)
