"""
Tests for sparse document-term matrices.

These tests validate that:

- the vocabulary threshold keeps only frequent terms
- every document gets a row, even with no surviving terms
- presence mode stores 1/0
- out-of-vocabulary lookups raise instead of returning zeros
- matrices survive a save/load cycle
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from scipy import sparse

from press_text.data.corpus import Document, document_ids
from press_text.features.counts import count_words
from press_text.features.dtm import (
    DocumentTermMatrix,
    build_document_term_matrix,
    filter_vocabulary,
    load_document_term_matrix,
    save_document_term_matrix,
)
from press_text.features.tokenize import unnest_tokens


DOCS = [
    Document("doc1", "covid covid relief"),
    Document("doc2", "school covid funding"),
    Document("doc3", "tax relief bill"),
]
IDS = document_ids(DOCS)


def _counts() -> pd.DataFrame:
    return count_words(unnest_tokens(DOCS))


def test_filter_vocabulary_threshold():
    assert filter_vocabulary(_counts(), min_count=2) == ["covid", "relief"]
    assert len(filter_vocabulary(_counts(), min_count=1)) == 6


def test_scenario_matrix():
    dtm = build_document_term_matrix(_counts(), IDS, min_count=2)

    assert dtm.shape == (3, 2)
    assert dtm.terms == ["covid", "relief"]
    assert dtm.column("covid").tolist() == [2, 1, 0]
    assert dtm.row("doc3") == {"relief": 1}
    assert [dtm.value("doc3", t) for t in dtm.terms] == [0, 1]
    assert dtm.term_totals().to_dict() == {"covid": 3, "relief": 2}
    assert sparse.issparse(dtm.matrix)


def test_empty_rows_are_preserved():
    docs = DOCS + [Document("doc4", "")]
    counts = count_words(unnest_tokens(docs))

    dtm = build_document_term_matrix(counts, document_ids(docs), vocabulary=["covid"])

    assert dtm.shape[0] == 4
    assert dtm.row("doc3") == {}
    assert dtm.row("doc4") == {}


def test_presence_mode():
    dtm = build_document_term_matrix(_counts(), IDS, min_count=2, binary=True)
    assert dtm.column("covid").tolist() == [1, 1, 0]


def test_out_of_vocabulary_term_raises():
    dtm = build_document_term_matrix(_counts(), IDS, min_count=2)

    assert not dtm.has_term("tax")
    assert "covid" in dtm
    with pytest.raises(KeyError, match="tax"):
        dtm.column("tax")
    with pytest.raises(KeyError):
        dtm.value("doc1", "school")


def test_unknown_document_raises():
    dtm = build_document_term_matrix(_counts(), IDS, min_count=2)
    with pytest.raises(KeyError):
        dtm.row("doc99")


def test_counts_for_unknown_document_rejected():
    with pytest.raises(ValueError):
        build_document_term_matrix(_counts(), ["doc1", "doc2"], min_count=1)


def test_constructor_validates_shape_and_labels():
    with pytest.raises(ValueError):
        DocumentTermMatrix(sparse.csr_matrix((2, 2)), ["a"], ["x", "y"])
    with pytest.raises(ValueError):
        DocumentTermMatrix(sparse.csr_matrix((2, 1)), ["a", "a"], ["x"])


def test_sparse_frame_view():
    dtm = build_document_term_matrix(_counts(), IDS, min_count=2)
    frame = dtm.to_sparse_frame()

    assert list(frame.columns) == ["covid", "relief"]
    assert frame.index.tolist() == IDS
    assert np.array_equal(frame.sparse.to_dense().to_numpy(), np.array([[2, 1], [1, 0], [0, 1]]))


def test_save_and_load(tmp_path):
    dtm = build_document_term_matrix(_counts(), IDS, min_count=2)
    path = str(tmp_path / "dtm" / "matrix.joblib")

    save_document_term_matrix(dtm, path)
    loaded = load_document_term_matrix(path)

    assert loaded.doc_ids == dtm.doc_ids
    assert loaded.terms == dtm.terms
    assert (loaded.matrix != dtm.matrix).nnz == 0


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_document_term_matrix(str(tmp_path / "missing.joblib"))
