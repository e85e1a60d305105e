"""
Batch runner to classify large CSV files in chunks without the API.

The input CSV needs a `description` column; `amount` is optional.

Usage:
  PYTHONPATH=. python run_batch_file.py \
    --input /path/to/transactions.csv \
    --owner user-123 \
    --batch-size 500 \
    --output-prefix results/transactions_classified
"""

import argparse
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

import pandas as pd

from taxxy.agents.classification.agent import TransactionClassifier
from taxxy.agents.classification.model import ClassificationRequest
from taxxy.config import get_config
from taxxy.database.correction_store import SQLCorrectionStore
from taxxy.database.db_manager import TaxxyDBManager

logger = logging.getLogger(__name__)

RESULT_COLUMNS = [
    "tag",
    "category",
    "confidence",
    "purpose",
    "is_write_off",
    "write_off_reason",
    "learned_from",
    "correction_influence",
    "needs_review",
]


def _amount(value) -> Optional[float]:
    if pd.isna(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def classify_frame(
    df: pd.DataFrame,
    classifier: TransactionClassifier,
    owner: str,
    max_workers: int = 4,
    review_threshold: float = 0.7,
    tax_profile: Optional[dict] = None,
) -> pd.DataFrame:
    """
    Classify every row of a DataFrame.

    Args:
        df: Rows with a description column and optional amount column
        classifier: Transaction classifier
        owner: User whose corrections inform the classification
        max_workers: Concurrent classification calls
        review_threshold: Confidence below which a row needs review
        tax_profile: Optional tax profile used as context

    Returns:
        Copy of df with the classification columns appended
    """
    if "description" not in df.columns:
        raise ValueError("Input CSV must have a 'description' column")

    has_amount = "amount" in df.columns
    requests = [
        ClassificationRequest(
            description="" if pd.isna(row["description"]) else str(row["description"]),
            amount=_amount(row["amount"]) if has_amount else None,
            tax_profile=tax_profile,
        )
        for _, row in df.iterrows()
    ]

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        results = list(executor.map(lambda r: classifier.classify(r, owner), requests))

    out = df.copy()
    out["tag"] = [r.tag for r in results]
    out["category"] = [r.category for r in results]
    out["confidence"] = [r.confidence for r in results]
    out["purpose"] = [r.purpose for r in results]
    out["is_write_off"] = [r.write_off.is_write_off for r in results]
    out["write_off_reason"] = [r.write_off.reason for r in results]
    out["learned_from"] = [r.learned_from for r in results]
    out["correction_influence"] = [r.correction_influence for r in results]
    out["needs_review"] = [r.needs_review(review_threshold) for r in results]
    return out


def process_batches(input_path: Path, owner: str, batch_size: int, output_prefix: str):
    config = get_config()
    db = TaxxyDBManager(config.database_path)
    classifier = TransactionClassifier(SQLCorrectionStore(db.Session), enable_tracing=True)
    tax_profile = db.tax_profile_context(owner)

    # Stream the CSV in chunks
    reader = pd.read_csv(input_path, chunksize=batch_size)
    output_prefix_path = Path(output_prefix)
    output_prefix_path.parent.mkdir(exist_ok=True, parents=True)

    total_rows = 0
    needs_review = 0
    files_written = []

    for idx, chunk in enumerate(reader):
        print(f"[Batch {idx}] Classifying {len(chunk)} rows...")
        result_df = classify_frame(
            chunk,
            classifier,
            owner,
            max_workers=config.classification.max_workers,
            review_threshold=config.classification.review_threshold,
            tax_profile=tax_profile,
        )
        part_file = output_prefix_path.parent / f"{output_prefix_path.name}_part{idx}.csv"
        result_df.to_csv(part_file, index=False)
        files_written.append(part_file)
        total_rows += len(result_df)
        needs_review += int(result_df["needs_review"].sum())
        print(f"  -> wrote {part_file}")

    print(f"Done. Total rows classified: {total_rows} ({needs_review} need review)")
    print("Output files:")
    for f in files_written:
        print(f" - {f}")


def main():
    parser = argparse.ArgumentParser(description="Batch runner for CSV transaction classification.")
    parser.add_argument("--input", required=True, help="Path to input CSV file")
    parser.add_argument("--owner", required=True, help="User id whose corrections to learn from")
    parser.add_argument("--batch-size", type=int, default=500, help="Rows per batch")
    parser.add_argument("--output-prefix", default="results/batch_output", help="Output prefix (no extension)")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, get_config().log_level.upper(), logging.INFO))

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    process_batches(input_path, args.owner, args.batch_size, args.output_prefix)


if __name__ == "__main__":
    main()
