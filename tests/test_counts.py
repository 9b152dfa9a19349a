"""
Tests for word frequency tables.
"""

from __future__ import annotations

import pandas as pd
import pytest

from press_text.data.corpus import Document
from press_text.features.counts import count_term, count_words, group_totals, word_totals
from press_text.features.tokenize import unnest_tokens


DOCS = [
    Document("doc1", "covid covid relief", {"party": "D"}),
    Document("doc2", "school covid funding", {"party": "R"}),
    Document("doc3", "tax relief bill", {"party": "D"}),
]


def _tokens() -> pd.DataFrame:
    return unnest_tokens(DOCS, metadata_columns=["party"])


def test_count_words_per_document():
    counts = count_words(_tokens())

    assert list(counts.columns) == ["doc_id", "word", "n"]
    lookup = {(d, w): n for d, w, n in counts.itertuples(index=False)}
    assert lookup[("doc1", "covid")] == 2
    assert lookup[("doc2", "covid")] == 1
    assert ("doc3", "covid") not in lookup
    assert counts["n"].sum() == 9


def test_count_words_by_group():
    counts = count_words(_tokens(), by="party", sort=True)

    assert counts.iloc[0].tolist() == ["D", "covid", 2]
    d_relief = counts[(counts["party"] == "D") & (counts["word"] == "relief")]["n"].item()
    assert d_relief == 2


def test_counts_do_not_depend_on_row_order():
    tokens = _tokens()
    shuffled = tokens.sample(frac=1.0, random_state=7).reset_index(drop=True)

    pd.testing.assert_frame_equal(count_words(tokens), count_words(shuffled))


def test_count_term_fills_missing_groups_with_zero():
    counts = count_words(_tokens())
    covid = count_term(counts, "covid", ["doc1", "doc2", "doc3"])

    assert covid.to_dict() == {"doc1": 2, "doc2": 1, "doc3": 0}


def test_word_and_group_totals():
    counts = count_words(_tokens())

    totals = word_totals(counts)
    assert totals.iloc[0].tolist() == ["covid", 3]
    assert totals.set_index("word")["n"]["relief"] == 2

    per_doc = group_totals(counts)
    assert per_doc.set_index("doc_id")["total"].to_dict() == {"doc1": 3, "doc2": 3, "doc3": 3}


def test_count_words_missing_column():
    with pytest.raises(KeyError):
        count_words(_tokens(), by="state")


def test_count_words_rejects_missing_group_values():
    tokens = _tokens()
    tokens.loc[tokens["doc_id"] == "doc2", "party"] = None

    with pytest.raises(ValueError, match="party"):
        count_words(tokens, by="party")
