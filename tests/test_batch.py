"""Tests for the CSV batch runner."""

import pandas as pd
import pytest

from conftest import OWNER, FakeLM, make_client
from run_batch_file import RESULT_COLUMNS, classify_frame
from taxxy.agents.classification.agent import TransactionClassifier


def test_classify_frame_appends_results(store, classifier):
    df = pd.DataFrame({
        "description": ["Adobe Creative Cloud", None],
        "amount": [-54.99, float("nan")],
    })

    out = classify_frame(df, classifier, OWNER, max_workers=2)

    assert list(out.columns) == ["description", "amount"] + RESULT_COLUMNS
    assert out.loc[0, "purpose"] == "business"
    assert bool(out.loc[0, "is_write_off"]) is True
    assert bool(out.loc[0, "needs_review"]) is False
    # Missing description goes through the keyword fallback
    assert out.loc[1, "tag"] == "transaction"
    assert out.loc[1, "purpose"] == "personal"
    assert "purpose" not in df.columns


def test_classify_frame_without_amount_column(store):
    classifier = TransactionClassifier(store, client=make_client(FakeLM("garbage")), enable_tracing=False)

    out = classify_frame(pd.DataFrame({"description": ["Client meeting lunch"]}), classifier, OWNER)

    assert out.loc[0, "purpose"] == "business"
    assert out.loc[0, "confidence"] == pytest.approx(0.15)
    assert bool(out.loc[0, "needs_review"]) is True


def test_classify_frame_requires_description(classifier):
    with pytest.raises(ValueError):
        classify_frame(pd.DataFrame({"memo": ["x"]}), classifier, OWNER)
