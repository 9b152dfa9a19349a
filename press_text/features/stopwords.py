"""
Stop-word reference sets and filtering.

Stop-word sets are plain immutable values: build one once (from
scikit-learn, NLTK, a file, or your own list) and pass it explicitly to
`remove_stopwords`. Filtering is an exact set-membership anti-join on the
word, with no partial matches and no stemming.
"""

from __future__ import annotations

import os
from typing import Any, FrozenSet, Iterable, List, Mapping, Union

import pandas as pd
from nltk.corpus import stopwords as nltk_stopwords
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from press_text.features.tokenize import WORD_COLUMN


def get_stopword_set(source: str = "sklearn", language: str = "english") -> FrozenSet[str]:
    """
    Build a reference stop-word set.

    Parameters
    ----------
    source : str
        "sklearn" for scikit-learn's English list, or "nltk" for the NLTK
        stopwords corpus.
    language : str
        Language name for the NLTK corpus, e.g. "english".

    Returns
    -------
    FrozenSet[str]
        Set of stop words.

    Raises
    ------
    ValueError
        If the source is unknown, or sklearn is asked for a non-English list.
    LookupError
        If the NLTK stopwords corpus is not installed
        (run ``nltk.download("stopwords")``).
    """
    src = (source or "sklearn").lower()
    lang = (language or "english").lower()

    if src == "sklearn":
        if lang != "english":
            raise ValueError(f"scikit-learn only ships English stop words, not {language!r}")
        return frozenset(ENGLISH_STOP_WORDS)
    if src == "nltk":
        return frozenset(nltk_stopwords.words(lang))
    raise ValueError(f"Unknown stop-word source: {source!r} (expected 'sklearn' or 'nltk')")


def load_stopwords_file(path: str) -> FrozenSet[str]:
    """
    Read a custom stop-word list, one word per line.

    Blank lines and lines starting with "#" are ignored; words are
    lowercased to match the tokenizer.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Stop-word file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        words = [line.strip().lower() for line in f]
    return frozenset(w for w in words if w and not w.startswith("#"))


def build_stopword_set(stopwords_cfg: Mapping[str, Any]) -> FrozenSet[str]:
    """
    Build the stop-word set described by the "preprocessing.stopwords"
    config section: a reference source, an optional file and extra words.

    Returns an empty set when stop-word removal is disabled.
    """
    if not bool(stopwords_cfg.get("enabled", True)):
        return frozenset()

    words = set(
        get_stopword_set(
            source=stopwords_cfg.get("source", "sklearn"),
            language=stopwords_cfg.get("language", "english"),
        )
    )
    if stopwords_cfg.get("file"):
        words |= load_stopwords_file(stopwords_cfg["file"])
    words |= {str(w).lower() for w in stopwords_cfg.get("extra_words") or []}
    return frozenset(words)


def remove_stopwords(
    tokens: Union[pd.DataFrame, Iterable[str]],
    stopword_set: Iterable[str],
    word_column: str = WORD_COLUMN,
) -> Union[pd.DataFrame, List[str]]:
    """
    Remove stop words from a token table or a plain sequence of words.

    Parameters
    ----------
    tokens : Union[pd.DataFrame, Iterable[str]]
        Token table with a word column, or an iterable of words.
    stopword_set : Iterable[str]
        Words to remove.
    word_column : str
        Name of the word column when `tokens` is a DataFrame.

    Returns
    -------
    Union[pd.DataFrame, List[str]]
        Same kind as the input, with stop words removed and order kept.
        DataFrames get a fresh 0..n-1 index.
    """
    stopword_set = frozenset(stopword_set)

    if isinstance(tokens, pd.DataFrame):
        if word_column not in tokens.columns:
            raise KeyError(
                f"Word column '{word_column}' not found in token table. "
                f"Available columns: {list(tokens.columns)}"
            )
        keep = ~tokens[word_column].isin(stopword_set)
        return tokens.loc[keep].reset_index(drop=True)

    return [t for t in tokens if t not in stopword_set]
