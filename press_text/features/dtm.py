"""
Sparse document-term matrices.

A `DocumentTermMatrix` pivots a long (doc_id, word, n) count table into a
scipy CSR matrix with one row per document and one column per vocabulary
term. The matrix is never densified here: rows with no surviving terms
simply have no stored cells.

Looking up a term that is not in the vocabulary raises `KeyError`, so a
term that was filtered out is never confused with one that occurs zero
times.
"""

from __future__ import annotations

import os
from typing import Dict, Hashable, Iterable, List, Optional, Sequence

import joblib
import numpy as np
import pandas as pd
from scipy import sparse

from press_text.data.corpus import DOC_ID_COLUMN
from press_text.features.counts import COUNT_COLUMN
from press_text.features.tokenize import WORD_COLUMN
from press_text.utils.run_utils import ensure_dir_exists


class DocumentTermMatrix:
    """
    Immutable sparse document-term matrix.

    Parameters
    ----------
    matrix : scipy.sparse.spmatrix
        Matrix of shape (len(doc_ids), len(terms)); converted to CSR.
    doc_ids : Sequence[Hashable]
        Row labels, unique.
    terms : Sequence[str]
        Column labels, unique.
    """

    def __init__(
        self,
        matrix: sparse.spmatrix,
        doc_ids: Sequence[Hashable],
        terms: Sequence[str],
    ) -> None:
        matrix = sparse.csr_matrix(matrix)
        if matrix.shape != (len(doc_ids), len(terms)):
            raise ValueError(
                f"Matrix shape {matrix.shape} does not match "
                f"{len(doc_ids)} documents x {len(terms)} terms."
            )

        self._doc_ids = tuple(doc_ids)
        self._terms = tuple(terms)
        self._row_index: Dict[Hashable, int] = {d: i for i, d in enumerate(self._doc_ids)}
        self._term_index: Dict[str, int] = {t: j for j, t in enumerate(self._terms)}
        if len(self._row_index) != len(self._doc_ids):
            raise ValueError("Document ids must be unique.")
        if len(self._term_index) != len(self._terms):
            raise ValueError("Terms must be unique.")

        self._matrix = matrix

    # ------------------------------------------------------------------
    # Shape and labels
    # ------------------------------------------------------------------

    @property
    def matrix(self) -> sparse.csr_matrix:
        """Underlying CSR matrix."""
        return self._matrix

    @property
    def shape(self):
        return self._matrix.shape

    @property
    def doc_ids(self) -> List[Hashable]:
        return list(self._doc_ids)

    @property
    def terms(self) -> List[str]:
        return list(self._terms)

    @property
    def nnz(self) -> int:
        return int(self._matrix.nnz)

    def has_term(self, term: str) -> bool:
        return term in self._term_index

    def __contains__(self, term: object) -> bool:
        return term in self._term_index

    def __repr__(self) -> str:
        return (
            f"DocumentTermMatrix(documents={self.shape[0]}, terms={self.shape[1]}, "
            f"nonzero={self.nnz})"
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def term_position(self, term: str) -> int:
        try:
            return self._term_index[term]
        except KeyError:
            raise KeyError(f"Term {term!r} is not in the document-term matrix vocabulary.") from None

    def doc_position(self, doc_id: Hashable) -> int:
        try:
            return self._row_index[doc_id]
        except KeyError:
            raise KeyError(f"Document {doc_id!r} is not in the document-term matrix.") from None

    def column(self, term: str) -> np.ndarray:
        """
        Values of one term for every document, in row order.

        Raises
        ------
        KeyError
            If the term is not in the vocabulary.
        """
        j = self.term_position(term)
        return self._matrix[:, j].toarray().ravel()

    def row(self, doc_id: Hashable) -> Dict[str, float]:
        """
        Nonzero cells of one document as a term -> value mapping.

        An empty dict means the document has no vocabulary terms.

        Raises
        ------
        KeyError
            If the document id is unknown.
        """
        i = self.doc_position(doc_id)
        start, end = self._matrix.indptr[i], self._matrix.indptr[i + 1]
        cols = self._matrix.indices[start:end]
        vals = self._matrix.data[start:end]
        return {self._terms[j]: v.item() for j, v in zip(cols, vals)}

    def value(self, doc_id: Hashable, term: str):
        """Single cell; 0 for a vocabulary term absent from the document."""
        return self._matrix[self.doc_position(doc_id), self.term_position(term)].item()

    def term_totals(self) -> pd.Series:
        """Column sums indexed by term."""
        totals = np.asarray(self._matrix.sum(axis=0)).ravel()
        return pd.Series(totals, index=list(self._terms), name=COUNT_COLUMN)

    def to_sparse_frame(self) -> pd.DataFrame:
        """Pandas DataFrame backed by sparse columns."""
        return pd.DataFrame.sparse.from_spmatrix(
            self._matrix,
            index=pd.Index(list(self._doc_ids), name=DOC_ID_COLUMN),
            columns=list(self._terms),
        )


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def filter_vocabulary(
    counts: pd.DataFrame,
    min_count: int,
    word_column: str = WORD_COLUMN,
    count_column: str = COUNT_COLUMN,
) -> List[str]:
    """
    Terms whose total count across the corpus is at least `min_count`.

    Returns
    -------
    List[str]
        Sorted vocabulary.
    """
    if min_count < 0:
        raise ValueError(f"min_count must be >= 0, got {min_count}")
    totals = counts.groupby(word_column, sort=True)[count_column].sum()
    return sorted(totals.index[totals >= min_count].tolist())


def build_document_term_matrix(
    counts: pd.DataFrame,
    doc_ids: Iterable[Hashable],
    vocabulary: Optional[Sequence[str]] = None,
    min_count: int = 1,
    binary: bool = False,
    doc_column: str = DOC_ID_COLUMN,
    word_column: str = WORD_COLUMN,
    count_column: str = COUNT_COLUMN,
) -> DocumentTermMatrix:
    """
    Pivot a (doc_id, word, n) count table into a sparse matrix.

    Parameters
    ----------
    counts : pd.DataFrame
        Per-document count table.
    doc_ids : Iterable[Hashable]
        All documents, in row order. Documents without counts become empty
        rows.
    vocabulary : Optional[Sequence[str]]
        Columns of the matrix. If None, computed with `filter_vocabulary`
        and `min_count`.
    min_count : int
        Corpus-frequency threshold used when `vocabulary` is None.
    binary : bool
        Store 1 for presence instead of counts.

    Returns
    -------
    DocumentTermMatrix

    Raises
    ------
    ValueError
        If `counts` refers to a document not in `doc_ids`.
    """
    doc_ids = list(doc_ids)
    if vocabulary is None:
        vocabulary = filter_vocabulary(counts, min_count, word_column, count_column)
    vocabulary = list(vocabulary)

    row_index = {d: i for i, d in enumerate(doc_ids)}
    term_index = {t: j for j, t in enumerate(vocabulary)}

    unknown = set(counts[doc_column].unique()) - set(row_index)
    if unknown:
        raise ValueError(f"Counts reference unknown document ids: {sorted(map(str, unknown))[:10]}")

    kept = counts.loc[counts[word_column].isin(term_index) & (counts[count_column] > 0)]
    rows = kept[doc_column].map(row_index).to_numpy(dtype=np.int64)
    cols = kept[word_column].map(term_index).to_numpy(dtype=np.int64)
    if binary:
        data = np.ones(len(kept), dtype=np.int64)
    else:
        data = kept[count_column].to_numpy(dtype=np.int64)

    # Duplicate coordinates are summed on conversion to CSR.
    matrix = sparse.coo_matrix(
        (data, (rows, cols)), shape=(len(doc_ids), len(vocabulary))
    ).tocsr()
    if binary:
        matrix.data = np.minimum(matrix.data, 1)
    matrix.sort_indices()

    return DocumentTermMatrix(matrix, doc_ids, vocabulary)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def save_document_term_matrix(dtm: DocumentTermMatrix, path: str) -> None:
    """Persist the matrix and its labels with joblib."""
    ensure_dir_exists(os.path.dirname(path))
    joblib.dump(
        {"matrix": dtm.matrix, "doc_ids": dtm.doc_ids, "terms": dtm.terms},
        path,
    )


def load_document_term_matrix(path: str) -> DocumentTermMatrix:
    """
    Load a matrix saved with `save_document_term_matrix`.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Document-term matrix not found at: {path}")
    payload = joblib.load(path)
    return DocumentTermMatrix(payload["matrix"], payload["doc_ids"], payload["terms"])
