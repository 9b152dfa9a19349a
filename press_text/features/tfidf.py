"""
TF-IDF scoring over long count tables.

For every (group, word) row of a count table:

- tf      = n / total tokens in the group (0 when the group has no tokens)
- idf     = ln(#groups / #groups containing the word)
- tf_idf  = tf * idf

A word used by every group gets idf 0, so it never ranks as distinctive.
Groups are documents or any coarser label such as party.
"""

from __future__ import annotations

from typing import Hashable, Iterable, Optional

import numpy as np
import pandas as pd

from press_text.data.corpus import DOC_ID_COLUMN
from press_text.features.counts import COUNT_COLUMN
from press_text.features.tokenize import WORD_COLUMN


def bind_tf_idf(
    counts: pd.DataFrame,
    group: str = DOC_ID_COLUMN,
    term: str = WORD_COLUMN,
    n: str = COUNT_COLUMN,
    groups: Optional[Iterable[Hashable]] = None,
    sort_by: Optional[str] = None,
) -> pd.DataFrame:
    """
    Add "tf", "idf" and "tf_idf" columns to a count table.

    Parameters
    ----------
    counts : pd.DataFrame
        Count table with group, term and count columns. Rows with a count
        of 0 are allowed and score 0.
    group : str
        Group column.
    term : str
        Term column.
    n : str
        Count column.
    groups : Optional[Iterable[Hashable]]
        Full set of groups used for the idf denominator. Pass it when some
        groups have no rows in `counts` (e.g. empty documents). Defaults to
        the distinct groups present in the table.
    sort_by : Optional[str]
        If given, sort the result by this column, descending.

    Returns
    -------
    pd.DataFrame
        Copy of `counts` with float columns "tf", "idf", "tf_idf".

    Raises
    ------
    KeyError
        If a required column is missing.
    ValueError
        If any count is negative or a group label is missing.
    """
    missing_cols = [col for col in (group, term, n) if col not in counts.columns]
    if missing_cols:
        raise KeyError(
            f"Missing column(s) for TF-IDF: {missing_cols}. "
            f"Available columns: {list(counts.columns)}"
        )
    if (counts[n] < 0).any():
        raise ValueError("Counts must be non-negative for TF-IDF.")
    if groups is not None:
        groups = list(groups)
    if counts[group].isna().any() or (groups is not None and pd.isna(groups).any()):
        raise ValueError(f"Missing values in group column '{group}' for TF-IDF.")

    out = counts.copy()
    counts_arr = out[n].to_numpy(dtype=float)

    # Term frequency, with an explicit 0 for groups without tokens.
    totals = out.groupby(group, sort=False)[n].transform("sum").to_numpy(dtype=float)
    tf = np.zeros_like(counts_arr)
    np.divide(counts_arr, totals, out=tf, where=totals > 0)

    # Document frequency counts only groups where the term actually occurs.
    if groups is None:
        n_groups = out[group].nunique()
    else:
        n_groups = len(set(groups) | set(out[group].unique()))

    present = out.loc[out[n] > 0]
    doc_freq = present.groupby(term, sort=False)[group].nunique()
    df_per_row = out[term].map(doc_freq).fillna(0).to_numpy(dtype=float)

    # Terms present in no group (only zero-count rows) keep ratio 1, i.e. idf 0.
    ratio = np.ones_like(counts_arr)
    np.divide(float(n_groups), df_per_row, out=ratio, where=df_per_row > 0)
    idf = np.log(ratio)

    out["tf"] = tf
    out["idf"] = idf
    out["tf_idf"] = tf * idf

    if sort_by is not None:
        out = out.sort_values(sort_by, ascending=False, kind="mergesort").reset_index(drop=True)
    return out


def top_terms(
    tfidf: pd.DataFrame,
    n: int = 10,
    by: str = DOC_ID_COLUMN,
    score: str = "tf_idf",
    term: str = WORD_COLUMN,
) -> pd.DataFrame:
    """
    Highest-scoring terms in each group.

    Ties are broken alphabetically by term so the result is deterministic.
    Groups with fewer than `n` rows return all of them.
    """
    ranked = tfidf.sort_values([by, score, term], ascending=[True, False, True])
    return ranked.groupby(by, sort=True).head(n).reset_index(drop=True)
