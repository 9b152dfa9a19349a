"""
Tests for lexicon-based sentiment scoring.

The NLTK opinion-lexicon test is skipped when the corpus is not
installed, so the suite still runs in a fresh clone.
"""

from __future__ import annotations

import nltk
import pandas as pd
import pytest

from press_text.analysis.dictionary import Dictionary
from press_text.analysis.sentiment import (
    lexicon_from_frame,
    load_lexicon_csv,
    load_opinion_lexicon,
    score_sentiment,
    sentiment_by_group,
)
from press_text.data.corpus import Document, corpus_frame
from press_text.features.tokenize import unnest_tokens


DOCS = [
    Document("doc1", "A good day, a great bill, a bad vote", {"party": "D"}),
    Document("doc2", "Terrible and bad", {"party": "R"}),
    Document("doc3", "Tax relief", {"party": "R"}),
    Document("doc4", "", {"party": "D"}),
]
IDS = [d.doc_id for d in DOCS]

LEXICON = Dictionary(
    {"good": 1.0, "great": 1.0, "bad": -1.0, "terrible": -1.0}, name="bing"
)


def _opinion_lexicon_available() -> bool:
    try:
        nltk.data.find("corpora/opinion_lexicon")
    except LookupError:
        return False
    return True


def test_score_sentiment_counts_and_normalizes_by_all_tokens():
    tokens = unnest_tokens(DOCS)
    scores = score_sentiment(tokens, LEXICON, doc_ids=IDS).set_index("doc_id")

    doc1 = scores.loc["doc1"]
    assert doc1["n_tokens"] == 9
    assert doc1["positive"] == 2
    assert doc1["negative"] == 1
    assert doc1["net"] == 1
    assert doc1["sentiment"] == pytest.approx(1 / 9)

    doc2 = scores.loc["doc2"]
    assert (doc2["positive"], doc2["negative"], doc2["net"]) == (0, 2, -2)
    assert doc2["sentiment"] == pytest.approx(-2 / 3)


def test_documents_without_matches_or_tokens_score_zero():
    tokens = unnest_tokens(DOCS)
    scores = score_sentiment(tokens, LEXICON, doc_ids=IDS).set_index("doc_id")

    assert scores.loc["doc3", "sentiment"] == 0.0
    assert scores.loc["doc3", "n_tokens"] == 2
    assert scores.loc["doc4"].tolist() == [0, 0, 0, 0, 0.0]
    assert not scores.isna().any().any()


def test_lexicon_from_labels():
    table = pd.DataFrame(
        {"word": ["good", "bad", "fine"], "sentiment": ["positive", "Negative", "positive"]}
    )
    lexicon = lexicon_from_frame(table)

    assert dict(lexicon) == {"good": 1.0, "bad": -1.0, "fine": 1.0}


def test_lexicon_from_numeric_scores():
    table = pd.DataFrame({"word": ["abandon", "love"], "value": [-2, 3]})
    lexicon = lexicon_from_frame(table, sentiment_column="value")

    assert lexicon.weight_of("abandon") == -2.0
    assert lexicon.weight_of("love") == 3.0


def test_lexicon_unknown_label_raises():
    table = pd.DataFrame({"word": ["meh"], "sentiment": ["neutral"]})
    with pytest.raises(ValueError, match="neutral"):
        lexicon_from_frame(table)


def test_load_lexicon_csv(tmp_path):
    path = tmp_path / "lexicon.csv"
    path.write_text("word,sentiment\ngood,positive\nbad,negative\n", encoding="utf-8")

    lexicon = load_lexicon_csv(str(path))
    assert len(lexicon) == 2

    with pytest.raises(FileNotFoundError):
        load_lexicon_csv(str(tmp_path / "missing.csv"))


def test_sentiment_by_group():
    tokens = unnest_tokens(DOCS)
    scores = score_sentiment(tokens, LEXICON, doc_ids=IDS)

    by_party = sentiment_by_group(scores, corpus_frame(DOCS), by="party").set_index("party")

    assert by_party.loc["D", "documents"] == 2
    assert by_party.loc["R", "negative"] == 2
    assert by_party.loc["D", "mean_sentiment"] == pytest.approx(1 / 18)


@pytest.mark.skipif(
    not _opinion_lexicon_available(),
    reason="NLTK opinion_lexicon corpus not installed; skipping.",
)
def test_opinion_lexicon():
    lexicon = load_opinion_lexicon()
    assert lexicon.weight_of("good") == 1.0
    assert lexicon.weight_of("bad") == -1.0
