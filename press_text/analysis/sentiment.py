"""
Lexicon-based sentiment scoring.

A sentiment lexicon is a `Dictionary` whose weight sign marks polarity
(> 0 positive, < 0 negative). Each document gets separate positive and
negative match counts, their difference, and a length-normalized score

    sentiment = (positive - negative) / n_tokens

where n_tokens counts every token of the document, matched or not.
"""

from __future__ import annotations

import os
from typing import Hashable, Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd
from nltk.corpus import opinion_lexicon

from press_text.analysis.dictionary import Dictionary, match_weights
from press_text.data.corpus import DOC_ID_COLUMN
from press_text.features.tokenize import WORD_COLUMN


_LABEL_SIGNS = {"positive": 1.0, "negative": -1.0}


def lexicon_from_frame(
    df: pd.DataFrame,
    word_column: str = WORD_COLUMN,
    sentiment_column: str = "sentiment",
    name: Optional[str] = "sentiment",
) -> Dictionary:
    """
    Build a sentiment lexicon from a (word, sentiment) table.

    The sentiment column may hold "positive"/"negative" labels (any case)
    or signed numbers, as in AFINN-style lexicons.

    Raises
    ------
    ValueError
        If a label is neither "positive", "negative" nor numeric.
    """
    if sentiment_column not in df.columns:
        raise KeyError(
            f"Sentiment column '{sentiment_column}' not found in lexicon. "
            f"Available columns: {list(df.columns)}"
        )

    values = df[sentiment_column]
    if pd.api.types.is_numeric_dtype(values):
        weights = values.astype(float)
    else:
        labels = values.astype(str).str.strip().str.lower()
        unknown = sorted(set(labels) - set(_LABEL_SIGNS))
        if unknown:
            raise ValueError(f"Unknown sentiment label(s) in lexicon: {unknown[:10]}")
        weights = labels.map(_LABEL_SIGNS)

    table = pd.DataFrame({WORD_COLUMN: df[word_column].astype(str), "weight": weights})
    return Dictionary.from_frame(table, WORD_COLUMN, "weight", name=name)


def load_lexicon_csv(path: str, **kwargs) -> Dictionary:
    """
    Read a sentiment lexicon CSV (by default with "word" and "sentiment"
    columns). Extra keyword arguments go to `lexicon_from_frame`.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Lexicon file not found: {path}")
    return lexicon_from_frame(pd.read_csv(path), **kwargs)


def load_opinion_lexicon() -> Dictionary:
    """
    The Hu & Liu opinion lexicon from NLTK as a +1/-1 dictionary.

    Words listed as both positive and negative are dropped.

    Raises
    ------
    LookupError
        If the corpus is missing (run ``nltk.download("opinion_lexicon")``).
    """
    positive = set(opinion_lexicon.positive())
    negative = set(opinion_lexicon.negative())
    both = positive & negative
    weights = {w: 1.0 for w in positive - both}
    weights.update({w: -1.0 for w in negative - both})
    return Dictionary(weights, name="opinion_lexicon")


def score_sentiment(
    tokens: pd.DataFrame,
    lexicon: Dictionary,
    doc_ids: Optional[Iterable[Hashable]] = None,
    doc_column: str = DOC_ID_COLUMN,
    word_column: str = WORD_COLUMN,
) -> pd.DataFrame:
    """
    Per-document sentiment counts and normalized score.

    Parameters
    ----------
    tokens : pd.DataFrame
        Token table. Use the table before stop-word removal if document
        length should include stop words.
    lexicon : Dictionary
        Signed sentiment weights.
    doc_ids : Optional[Iterable[Hashable]]
        Documents to report, in order; defaults to documents in `tokens`.

    Returns
    -------
    pd.DataFrame
        Columns ["doc_id", "n_tokens", "positive", "negative", "net",
        "sentiment"]. Empty documents have all zeros.
    """
    if doc_ids is None:
        ids = list(pd.unique(tokens[doc_column]))
    else:
        ids = list(doc_ids)

    weights = match_weights(tokens, lexicon, word_column)
    work = pd.DataFrame(
        {
            doc_column: tokens[doc_column].to_numpy(),
            "positive": (weights > 0).astype("int64"),
            "negative": (weights < 0).astype("int64"),
        }
    )
    per_doc = work.groupby(doc_column, sort=False).agg(
        n_tokens=("positive", "size"),
        positive=("positive", "sum"),
        negative=("negative", "sum"),
    )

    out = per_doc.reindex(ids).fillna(0).astype("int64")
    out["net"] = out["positive"] - out["negative"]

    n_tokens = out["n_tokens"].to_numpy(dtype=float)
    sentiment = np.zeros(len(out), dtype=float)
    np.divide(out["net"].to_numpy(dtype=float), n_tokens, out=sentiment, where=n_tokens > 0)
    out["sentiment"] = sentiment

    out.index.name = doc_column
    return out.reset_index()


def sentiment_by_group(
    scores: pd.DataFrame,
    corpus: pd.DataFrame,
    by: Union[str, Sequence[str]],
    doc_column: str = DOC_ID_COLUMN,
) -> pd.DataFrame:
    """
    Average document sentiment per metadata group (e.g. party).

    Parameters
    ----------
    scores : pd.DataFrame
        Output of `score_sentiment`.
    corpus : pd.DataFrame
        Corpus table with a doc_id column and the grouping column(s).
    by : str or sequence of str
        Grouping column(s).

    Returns
    -------
    pd.DataFrame
        Columns [*by, "documents", "positive", "negative", "mean_sentiment"].
    """
    keys = [by] if isinstance(by, str) else list(by)
    merged = scores.merge(corpus[[doc_column] + keys], on=doc_column, how="left", validate="one_to_one")
    return (
        merged.groupby(keys, sort=True, dropna=False)
        .agg(
            documents=(doc_column, "size"),
            positive=("positive", "sum"),
            negative=("negative", "sum"),
            mean_sentiment=("sentiment", "mean"),
        )
        .reset_index()
    )
