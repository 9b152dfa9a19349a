"""
Word frequency tables.

Counts are aggregated from a token table into a long count table with one
row per (group, word) and an integer column "n". Grouping can be by
document or by any categorical column carried on the tokens (e.g. party).
The aggregation is order independent: shuffling token rows never changes
the counts.
"""

from __future__ import annotations

from typing import Hashable, Iterable, List, Sequence, Union

import pandas as pd

from press_text.data.corpus import DOC_ID_COLUMN
from press_text.features.tokenize import WORD_COLUMN


COUNT_COLUMN = "n"

GroupKey = Union[str, Sequence[str]]


def _as_list(by: GroupKey) -> List[str]:
    return [by] if isinstance(by, str) else list(by)


def count_words(
    tokens: pd.DataFrame,
    by: GroupKey = DOC_ID_COLUMN,
    word_column: str = WORD_COLUMN,
    sort: bool = False,
) -> pd.DataFrame:
    """
    Count word occurrences per group.

    Parameters
    ----------
    tokens : pd.DataFrame
        Token table with the grouping column(s) and a word column.
    by : str or sequence of str
        Grouping column(s), e.g. "doc_id" or "party".
    word_column : str
        Name of the word column.
    sort : bool
        If True, sort by descending count then group and word. Otherwise
        rows are ordered by group and word.

    Returns
    -------
    pd.DataFrame
        Columns [*by, word, "n"] with unique (group, word) keys.

    Raises
    ------
    KeyError
        If a grouping or word column is missing.
    ValueError
        If a grouping column has missing values; their tokens would
        otherwise drop out of the counts.
    """
    keys = _as_list(by) + [word_column]
    missing_cols = [col for col in keys if col not in tokens.columns]
    if missing_cols:
        raise KeyError(
            f"Missing column(s) for counting: {missing_cols}. "
            f"Available columns: {list(tokens.columns)}"
        )
    missing_keys = [col for col in _as_list(by) if tokens[col].isna().any()]
    if missing_keys:
        raise ValueError(f"Missing values in grouping column(s) {missing_keys}.")

    counts = (
        tokens.groupby(keys, sort=True, observed=True)
        .size()
        .rename(COUNT_COLUMN)
        .reset_index()
    )
    counts[COUNT_COLUMN] = counts[COUNT_COLUMN].astype("int64")

    if sort:
        counts = counts.sort_values(
            [COUNT_COLUMN] + keys, ascending=[False] + [True] * len(keys)
        ).reset_index(drop=True)
    return counts


def word_totals(
    counts: pd.DataFrame,
    word_column: str = WORD_COLUMN,
    count_column: str = COUNT_COLUMN,
) -> pd.DataFrame:
    """
    Total count of each word across all groups, most frequent first.
    """
    totals = counts.groupby(word_column, sort=True)[count_column].sum().reset_index()
    return totals.sort_values(
        [count_column, word_column], ascending=[False, True]
    ).reset_index(drop=True)


def group_totals(
    counts: pd.DataFrame,
    by: GroupKey = DOC_ID_COLUMN,
    count_column: str = COUNT_COLUMN,
) -> pd.DataFrame:
    """Total number of tokens in each group; column "total"."""
    return (
        counts.groupby(_as_list(by), sort=True, observed=True)[count_column]
        .sum()
        .rename("total")
        .reset_index()
    )


def count_term(
    counts: pd.DataFrame,
    word: str,
    groups: Iterable[Hashable],
    by: str = DOC_ID_COLUMN,
    word_column: str = WORD_COLUMN,
    count_column: str = COUNT_COLUMN,
) -> pd.Series:
    """
    Occurrences of a single word in each group.

    Groups where the word never occurs get 0, so the result always has one
    entry per requested group, in the requested order.
    """
    groups = list(groups)
    hits = counts.loc[counts[word_column] == word].set_index(by)[count_column]
    return hits.reindex(groups, fill_value=0).astype("int64").rename(word)
