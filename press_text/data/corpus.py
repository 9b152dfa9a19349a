"""
Document model for the press-release corpus.

This module turns a caller-supplied pandas DataFrame (one row per press
release) into immutable `Document` objects and back:

- validating that the text column is present and every text is a string
- choosing the document id (a configured column or the row index)
- keeping only the requested metadata columns (author, party, date, ...)

Reading the CSV itself is left to the caller; see scripts/run_pipeline.py.
A document with missing text is an error, never a silent drop, because
every downstream total depends on the number of documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Hashable, Iterable, List, Mapping, Optional, Sequence

import pandas as pd


DOC_ID_COLUMN = "doc_id"
TEXT_COLUMN = "text"


@dataclass(frozen=True)
class Document:
    """
    A single press release.

    Attributes
    ----------
    doc_id : Hashable
        Unique identifier (row index or configured id column).
    text : str
        Raw text body.
    metadata : Mapping[str, Any]
        Read-only document-level attributes such as author or party.
    """

    doc_id: Hashable
    text: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise ValueError(
                f"Document {self.doc_id!r} has missing or non-string text: {self.text!r}"
            )
        # Freeze the metadata so documents stay immutable once loaded.
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def documents_from_frame(
    df: pd.DataFrame,
    text_column: str = TEXT_COLUMN,
    id_column: Optional[str] = None,
    metadata_columns: Optional[Sequence[str]] = None,
) -> List[Document]:
    """
    Build documents from a DataFrame with one row per document.

    Parameters
    ----------
    df : pd.DataFrame
        Corpus table as read from the source CSV.
    text_column : str
        Column holding the raw text.
    id_column : Optional[str]
        Column holding the document id. If None, the row index is used.
    metadata_columns : Optional[Sequence[str]]
        Columns copied onto each document. If None, no metadata is kept.

    Returns
    -------
    List[Document]
        Documents in row order.

    Raises
    ------
    KeyError
        If a requested column is missing.
    ValueError
        If a text value is missing or not a string, or ids are duplicated.
    """
    metadata_columns = list(metadata_columns or [])
    required = [text_column] + metadata_columns + ([id_column] if id_column else [])
    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise KeyError(
            f"Missing required column(s) in corpus: {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    ids = df[id_column] if id_column else df.index.to_series()
    if ids.duplicated().any():
        dupes = ids[ids.duplicated()].unique().tolist()
        raise ValueError(f"Duplicate document ids in corpus: {dupes[:10]}")

    documents: List[Document] = []
    for doc_id, (_, row) in zip(ids.tolist(), df.iterrows()):
        text = row[text_column]
        if _is_missing(text):
            raise ValueError(f"Document {doc_id!r} has missing text in column '{text_column}'.")
        metadata = {col: row[col] for col in metadata_columns}
        documents.append(Document(doc_id=doc_id, text=text, metadata=metadata))

    return documents


def documents_from_config(df: pd.DataFrame, config: Mapping[str, Any]) -> List[Document]:
    """
    Build documents using the column names of the config's "dataset" section.
    """
    dataset_cfg = config.get("dataset", {}) or {}
    return documents_from_frame(
        df,
        text_column=dataset_cfg.get("text_column", TEXT_COLUMN),
        id_column=dataset_cfg.get("id_column"),
        metadata_columns=dataset_cfg.get("metadata_columns") or [],
    )


def document_ids(documents: Iterable[Document]) -> List[Hashable]:
    """Return document ids in corpus order."""
    return [doc.doc_id for doc in documents]


def corpus_frame(documents: Iterable[Document]) -> pd.DataFrame:
    """
    Convert documents back into a table with columns
    ["doc_id", "text", <metadata columns>...].

    Useful for joining per-document scores with metadata such as party.
    """
    records = [
        {DOC_ID_COLUMN: doc.doc_id, TEXT_COLUMN: doc.text, **dict(doc.metadata)}
        for doc in documents
    ]
    if not records:
        return pd.DataFrame(columns=[DOC_ID_COLUMN, TEXT_COLUMN])
    return pd.DataFrame.from_records(records)
