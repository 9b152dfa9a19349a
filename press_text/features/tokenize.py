"""
Tokenization utilities for the press-release corpus.

This module implements the tidy-text tokenization step:

- lowercasing
- splitting on non-word boundaries (punctuation and whitespace dropped,
  inner apostrophes kept so "don't" stays one token)
- optional n-grams for exercises that need word order
- optional stemming with NLTK

Tokens can be consumed lazily through `TokenStream` or materialized as a
token table (one row per token occurrence) with `unnest_tokens`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Hashable, Iterable, Iterator, List, Mapping, Optional, Sequence

import pandas as pd
from nltk.stem import PorterStemmer, SnowballStemmer

from press_text.data.corpus import DOC_ID_COLUMN, Document


WORD_COLUMN = "word"

# Runs of word characters, allowing apostrophes between them.
_WORD_RE = re.compile(r"\w+(?:['’]\w+)*", re.UNICODE)


# ---------------------------------------------------------------------------
# Stemming
# ---------------------------------------------------------------------------


def build_stemmer(algorithm: Optional[str] = "porter") -> Optional[Callable[[str], str]]:
    """
    Build a stemming function based on the chosen algorithm.

    Parameters
    ----------
    algorithm : Optional[str]
        "porter", "snowball", or None for no stemming.

    Returns
    -------
    Optional[Callable[[str], str]]
        A function mapping a token to its stem, or None.

    Raises
    ------
    ValueError
        If the algorithm name is unknown.
    """
    if algorithm is None:
        return None

    algo = algorithm.lower()
    if algo == "porter":
        return PorterStemmer().stem
    if algo == "snowball":
        return SnowballStemmer("english").stem
    raise ValueError(f"Unknown stemming algorithm: {algorithm!r} (expected 'porter' or 'snowball')")


# ---------------------------------------------------------------------------
# String-level tokenization
# ---------------------------------------------------------------------------


def _make_ngrams(tokens: List[str], n: int) -> List[str]:
    if n == 1:
        return tokens
    return [" ".join(tokens[i : i + n]) for i in range(len(tokens) - n + 1)]


def tokenize_text(
    text: str,
    lowercase: bool = True,
    ngram: int = 1,
    stemmer: Optional[Callable[[str], str]] = None,
) -> List[str]:
    """
    Split a text string into word tokens.

    Parameters
    ----------
    text : str
        Raw input text.
    lowercase : bool
        Convert text to lowercase first.
    ngram : int
        Size of the n-grams to return; 1 returns single words.
    stemmer : Optional[Callable[[str], str]]
        Optional stemming function applied to each word before n-gram
        construction.

    Returns
    -------
    List[str]
        Tokens in text order. Empty for text without word characters.

    Raises
    ------
    ValueError
        If `text` is not a string or `ngram` < 1.
    """
    if not isinstance(text, str):
        raise ValueError(f"Cannot tokenize non-string text: {text!r}")
    if ngram < 1:
        raise ValueError(f"ngram must be >= 1, got {ngram}")

    if lowercase:
        text = text.lower()

    tokens = _WORD_RE.findall(text)
    if stemmer is not None:
        tokens = [stemmer(t) for t in tokens]

    return _make_ngrams(tokens, ngram)


# ---------------------------------------------------------------------------
# Document-level tokenization
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TokenRecord:
    """One token occurrence tagged with its source document."""

    doc_id: Hashable
    word: str
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


class TokenStream:
    """
    Lazy, restartable sequence of token records over a set of documents.

    Each call to ``iter()`` starts again from the first document, so the
    same stream can feed several aggregations. Only the requested metadata
    columns are attached to records.

    Parameters
    ----------
    documents : Sequence[Document]
        Documents to tokenize.
    metadata_columns : Sequence[str]
        Document metadata keys to propagate onto each token.
    lowercase, ngram, stemmer :
        Passed through to `tokenize_text`.
    """

    def __init__(
        self,
        documents: Sequence[Document],
        metadata_columns: Sequence[str] = (),
        lowercase: bool = True,
        ngram: int = 1,
        stemmer: Optional[Callable[[str], str]] = None,
    ) -> None:
        self._documents = list(documents)
        self._metadata_columns = tuple(metadata_columns)
        self._lowercase = lowercase
        self._ngram = ngram
        self._stemmer = stemmer

    def __iter__(self) -> Iterator[TokenRecord]:
        for doc in self._documents:
            metadata = MappingProxyType(
                {col: doc.metadata[col] for col in self._metadata_columns}
            )
            for word in self._tokenize(doc):
                yield TokenRecord(doc_id=doc.doc_id, word=word, metadata=metadata)

    def _tokenize(self, doc: Document) -> List[str]:
        try:
            return tokenize_text(
                doc.text,
                lowercase=self._lowercase,
                ngram=self._ngram,
                stemmer=self._stemmer,
            )
        except ValueError as exc:
            raise ValueError(f"Failed to tokenize document {doc.doc_id!r}: {exc}") from exc

    def words(self) -> Iterator[str]:
        """Iterate over the bare words, ignoring document ids."""
        for record in self:
            yield record.word

    def count_tokens(self) -> int:
        """Total number of tokens, computed without keeping them."""
        return sum(len(self._tokenize(doc)) for doc in self._documents)


def unnest_tokens(
    documents: Iterable[Document],
    metadata_columns: Optional[Sequence[str]] = None,
    lowercase: bool = True,
    ngram: int = 1,
    stem: Optional[str] = None,
) -> pd.DataFrame:
    """
    Tokenize documents into a token table with one row per token.

    Parameters
    ----------
    documents : Iterable[Document]
        Documents to tokenize.
    metadata_columns : Optional[Sequence[str]]
        Metadata keys copied onto every token row. Leave empty for large
        corpora and join metadata back on "doc_id" only where needed.
    lowercase : bool
        Lowercase tokens.
    ngram : int
        n-gram size.
    stem : Optional[str]
        Stemming algorithm name ("porter", "snowball") or None.

    Returns
    -------
    pd.DataFrame
        Columns ["doc_id", "word", <metadata columns>...].
    """
    metadata_columns = list(metadata_columns or [])
    stream = TokenStream(
        list(documents),
        metadata_columns=metadata_columns,
        lowercase=lowercase,
        ngram=ngram,
        stemmer=build_stemmer(stem),
    )

    columns = [DOC_ID_COLUMN, WORD_COLUMN] + metadata_columns
    rows = [
        (record.doc_id, record.word, *(record.metadata[col] for col in metadata_columns))
        for record in stream
    ]
    return pd.DataFrame.from_records(rows, columns=columns)


def stem_tokens(
    tokens: pd.DataFrame,
    stem: Optional[str],
    word_column: str = WORD_COLUMN,
) -> pd.DataFrame:
    """
    Stem the word column of a token table.

    Each word of an n-gram is stemmed separately. Run this after stop-word
    removal: stems such as "thi" or "wa" no longer match a stop-word list.

    Returns
    -------
    pd.DataFrame
        A new table; `tokens` itself is returned unchanged when `stem` is None.
    """
    stemmer = build_stemmer(stem)
    if stemmer is None:
        return tokens

    out = tokens.copy()
    out[word_column] = [
        " ".join(stemmer(part) for part in word.split(" ")) for word in out[word_column]
    ]
    return out


def stemming_algorithm(preprocessing_cfg: Mapping[str, Any]) -> Optional[str]:
    """Stemming algorithm from the "preprocessing" section; None when disabled."""
    stem_cfg = preprocessing_cfg.get("stemming", {}) or {}
    if not bool(stem_cfg.get("enabled", False)):
        return None
    return stem_cfg.get("algorithm", "porter")


def unnest_tokens_from_config(
    documents: Iterable[Document],
    preprocessing_cfg: Mapping[str, Any],
    metadata_columns: Optional[Sequence[str]] = None,
    stem: bool = True,
) -> pd.DataFrame:
    """
    Tokenize documents using the "preprocessing" section of the config.

    Pass ``stem=False`` to keep surface forms, e.g. when stop words still
    have to be removed; stem afterwards with `stem_tokens`.
    """
    return unnest_tokens(
        documents,
        metadata_columns=metadata_columns,
        lowercase=bool(preprocessing_cfg.get("lowercase", True)),
        ngram=int(preprocessing_cfg.get("ngram", 1)),
        stem=stemming_algorithm(preprocessing_cfg) if stem else None,
    )
