"""
Dictionary (lexicon) matching.

A `Dictionary` is an immutable word -> weight mapping used for both topic
keyword lists and sentiment lexicons. Scoring joins a token table against
the dictionary with explicit lookups: a word outside the dictionary has
weight 0.0, and a document without any match scores exactly 0.0.
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Any, Dict, Hashable, Iterable, Iterator, List, Mapping, Optional

import numpy as np
import pandas as pd
import yaml

from press_text.data.corpus import DOC_ID_COLUMN
from press_text.features.tokenize import WORD_COLUMN


class Dictionary(Mapping[str, float]):
    """
    Immutable word -> weight mapping.

    Parameters
    ----------
    weights : Mapping[str, float]
        Word weights. Words are stored as given; use lowercase words to
        match the default tokenizer.
    name : Optional[str]
        Label used for score columns (e.g. "healthcare").
    """

    def __init__(self, weights: Mapping[str, float], name: Optional[str] = None) -> None:
        self._weights = MappingProxyType({str(w): float(v) for w, v in weights.items()})
        self.name = name

    # Mapping interface
    def __getitem__(self, word: str) -> float:
        return self._weights[word]

    def __iter__(self) -> Iterator[str]:
        return iter(self._weights)

    def __len__(self) -> int:
        return len(self._weights)

    def __repr__(self) -> str:
        return f"Dictionary(name={self.name!r}, terms={len(self)})"

    def weight_of(self, word: str) -> float:
        """Weight of a word; 0.0 when the word is not in the dictionary."""
        return self._weights.get(word, 0.0)

    @classmethod
    def from_terms(
        cls, terms: Iterable[str], weight: float = 1.0, name: Optional[str] = None
    ) -> "Dictionary":
        """Uniformly weighted dictionary from a plain keyword list."""
        return cls({t: weight for t in terms}, name=name)

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        word_column: str = WORD_COLUMN,
        weight_column: str = "weight",
        name: Optional[str] = None,
    ) -> "Dictionary":
        """
        Build a dictionary from a (word, weight) table.

        Raises
        ------
        KeyError
            If a column is missing.
        ValueError
            If the same word appears with different weights.
        """
        missing_cols = [c for c in (word_column, weight_column) if c not in df.columns]
        if missing_cols:
            raise KeyError(
                f"Missing column(s) in dictionary table: {missing_cols}. "
                f"Available columns: {list(df.columns)}"
            )

        pairs = df[[word_column, weight_column]].drop_duplicates()
        conflicts = pairs[word_column][pairs[word_column].duplicated()].unique().tolist()
        if conflicts:
            raise ValueError(f"Conflicting weights for dictionary word(s): {conflicts[:10]}")

        return cls(dict(zip(pairs[word_column], pairs[weight_column])), name=name)


def load_dictionaries(path: str) -> List[Dictionary]:
    """
    Load named topic dictionaries from YAML.

    The file maps a dictionary name to either a list of keywords (weight
    1.0 each) or a mapping of keyword -> weight::

        healthcare: [health, hospital, medicaid]
        economy:
          jobs: 1.0
          tax: 0.5

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file is empty or an entry has an unsupported shape, or a
        word is not a string (e.g. an unquoted `no`, which YAML reads as a
        boolean).
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Dictionary file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not raw or not isinstance(raw, dict):
        raise ValueError(f"Dictionary file is empty or not a mapping: {path}")

    dictionaries: List[Dictionary] = []
    for name, entry in raw.items():
        if isinstance(entry, list):
            words = entry
        elif isinstance(entry, dict):
            words = list(entry)
        else:
            raise ValueError(
                f"Dictionary {name!r} must be a list of words or a word -> weight mapping."
            )

        # YAML reads bare yes/no/on/off as booleans and 19 as an int.
        non_strings = [w for w in words if not isinstance(w, str)]
        if non_strings:
            raise ValueError(
                f"Dictionary {name!r} has non-string word(s) {non_strings[:10]}; "
                f"quote them in {path}."
            )

        if isinstance(entry, list):
            dictionaries.append(Dictionary.from_terms(entry, name=str(name)))
        else:
            dictionaries.append(Dictionary(entry, name=str(name)))
    return dictionaries


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def _resolve_doc_ids(
    tokens: pd.DataFrame, doc_ids: Optional[Iterable[Hashable]], doc_column: str
) -> List[Hashable]:
    if doc_ids is not None:
        return list(doc_ids)
    return list(pd.unique(tokens[doc_column]))


def match_weights(
    tokens: pd.DataFrame,
    dictionary: Dictionary,
    word_column: str = WORD_COLUMN,
) -> np.ndarray:
    """Per-token weights; 0.0 for tokens outside the dictionary."""
    return tokens[word_column].map(dictionary.weight_of).to_numpy(dtype=float)


def score_documents(
    tokens: pd.DataFrame,
    dictionary: Dictionary,
    doc_ids: Optional[Iterable[Hashable]] = None,
    doc_column: str = DOC_ID_COLUMN,
    word_column: str = WORD_COLUMN,
) -> pd.DataFrame:
    """
    Score each document by the summed weights of its dictionary matches.

    Parameters
    ----------
    tokens : pd.DataFrame
        Token table (one row per token occurrence).
    dictionary : Dictionary
        Word weights.
    doc_ids : Optional[Iterable[Hashable]]
        Documents to report, in order. Pass the full corpus ids so that
        documents without tokens still get a row. Defaults to the documents
        present in `tokens`.

    Returns
    -------
    pd.DataFrame
        Columns ["doc_id", "n_tokens", "n_matches", "score"]. Documents
        without matches have n_matches 0 and score 0.0.
    """
    ids = _resolve_doc_ids(tokens, doc_ids, doc_column)

    work = pd.DataFrame(
        {
            doc_column: tokens[doc_column].to_numpy(),
            "matched": tokens[word_column].isin(list(dictionary)).to_numpy(),
            "weight": match_weights(tokens, dictionary, word_column),
        }
    )
    per_doc = work.groupby(doc_column, sort=False).agg(
        n_tokens=("weight", "size"),
        n_matches=("matched", "sum"),
        score=("weight", "sum"),
    )

    out = per_doc.reindex(ids)
    out = out.fillna({"n_tokens": 0, "n_matches": 0, "score": 0.0})
    out["n_tokens"] = out["n_tokens"].astype("int64")
    out["n_matches"] = out["n_matches"].astype("int64")
    out["score"] = out["score"].astype(float)
    out.index.name = doc_column
    return out.reset_index()


def score_dictionaries(
    tokens: pd.DataFrame,
    dictionaries: Iterable[Dictionary],
    doc_ids: Optional[Iterable[Hashable]] = None,
    doc_column: str = DOC_ID_COLUMN,
    word_column: str = WORD_COLUMN,
) -> pd.DataFrame:
    """
    Score documents against several named dictionaries at once.

    Returns
    -------
    pd.DataFrame
        Columns ["doc_id", "n_tokens", <dictionary name>...], one score
        column per dictionary.
    """
    ids = _resolve_doc_ids(tokens, doc_ids, doc_column)

    table: Optional[pd.DataFrame] = None
    for i, dictionary in enumerate(dictionaries):
        name = dictionary.name or f"dictionary_{i}"
        scored = score_documents(tokens, dictionary, ids, doc_column, word_column)
        if table is None:
            table = scored[[doc_column, "n_tokens"]].copy()
        if name in table.columns:
            raise ValueError(f"Duplicate dictionary name: {name!r}")
        table[name] = scored["score"].to_numpy()

    if table is None:
        raise ValueError("At least one dictionary is required.")
    return table


def dictionary_summary(weights: Mapping[str, Any]) -> Dict[str, int]:
    """Number of positive, negative and zero weights; handy for logging."""
    values = np.fromiter((float(v) for v in weights.values()), dtype=float, count=len(weights))
    return {
        "positive": int((values > 0).sum()),
        "negative": int((values < 0).sum()),
        "zero": int((values == 0).sum()),
    }
