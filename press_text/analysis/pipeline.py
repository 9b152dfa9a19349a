"""
End-to-end analysis pipeline.

This module chains the individual stages over a corpus table that the
caller has already loaded:

- build documents (failing loudly on missing text)
- tokenize into a token table
- remove stop words
- count words per document and per configured group (e.g. party)
- compute TF-IDF by group and the top terms per group
- score topic dictionaries and sentiment
- build the sparse document-term matrix over the filtered vocabulary

Every stage is a pure function; `run_pipeline` only wires them together,
logs progress, and returns the tables in a `PipelineResult`. Writing the
tables to disk is a separate step (`write_results`).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from press_text.analysis.dictionary import Dictionary, dictionary_summary, score_dictionaries
from press_text.analysis.sentiment import score_sentiment, sentiment_by_group
from press_text.data.corpus import DOC_ID_COLUMN, corpus_frame, document_ids, documents_from_config
from press_text.features.counts import count_words, word_totals
from press_text.features.dtm import (
    DocumentTermMatrix,
    build_document_term_matrix,
    filter_vocabulary,
    save_document_term_matrix,
)
from press_text.features.stopwords import build_stopword_set, remove_stopwords
from press_text.features.tfidf import bind_tf_idf, top_terms
from press_text.features.tokenize import (
    stem_tokens,
    stemming_algorithm,
    unnest_tokens_from_config,
)
from press_text.utils.run_utils import ensure_dir_exists, get_logger, get_section


@dataclass(frozen=True)
class PipelineResult:
    """Tables produced by one pipeline run."""

    corpus: pd.DataFrame
    tokens: pd.DataFrame
    doc_counts: pd.DataFrame
    word_totals: pd.DataFrame
    group_counts: Optional[pd.DataFrame]
    group_tfidf: Optional[pd.DataFrame]
    group_top_terms: Optional[pd.DataFrame]
    dictionary_scores: Optional[pd.DataFrame]
    sentiment: Optional[pd.DataFrame]
    group_sentiment: Optional[pd.DataFrame]
    vocabulary: List[str]
    dtm: DocumentTermMatrix

    def tables(self) -> Dict[str, pd.DataFrame]:
        """All non-empty tabular outputs keyed by report name."""
        named = {
            "doc_counts": self.doc_counts,
            "word_totals": self.word_totals,
            "group_counts": self.group_counts,
            "group_tfidf": self.group_tfidf,
            "group_top_terms": self.group_top_terms,
            "dictionary_scores": self.dictionary_scores,
            "sentiment": self.sentiment,
            "group_sentiment": self.group_sentiment,
        }
        return {name: table for name, table in named.items() if table is not None}


def run_pipeline(
    corpus_df: pd.DataFrame,
    config: Dict[str, Any],
    stopword_set: Optional[Iterable[str]] = None,
    dictionaries: Optional[Iterable[Dictionary]] = None,
    lexicon: Optional[Dictionary] = None,
    logger: Optional[logging.Logger] = None,
) -> PipelineResult:
    """
    Run the full analysis over a corpus table.

    Parameters
    ----------
    corpus_df : pd.DataFrame
        One row per document, with the columns named in the config's
        "dataset" section.
    config : Dict[str, Any]
        Analysis configuration (see config/analysis.yaml).
    stopword_set : Optional[Iterable[str]]
        Stop words to remove. If None, built from
        "preprocessing.stopwords" in the config.
    dictionaries : Optional[Iterable[Dictionary]]
        Topic dictionaries to score; skipped if None or empty.
    lexicon : Optional[Dictionary]
        Sentiment lexicon; sentiment is skipped if None.
    logger : Optional[logging.Logger]
        Logger to use. Defaults to one built from the config.

    Returns
    -------
    PipelineResult
    """
    logger = logger or get_logger("pipeline", config, log_file_suffix="pipeline")

    dataset_cfg = get_section(config, "dataset")
    preprocessing_cfg = get_section(config, "preprocessing")
    vocabulary_cfg = get_section(config, "vocabulary")
    analysis_cfg = get_section(config, "analysis")

    # Documents
    documents = documents_from_config(corpus_df, config)
    ids = document_ids(documents)
    corpus = corpus_frame(documents)
    logger.info("Loaded %d documents.", len(documents))

    # Tokens; only the grouping column is copied onto token rows.
    group_column = analysis_cfg.get("group_column")
    metadata_columns = dataset_cfg.get("metadata_columns") or []
    if group_column and group_column not in metadata_columns:
        raise KeyError(
            f"Group column '{group_column}' must be listed in dataset.metadata_columns."
        )
    if group_column and group_column in corpus.columns:
        missing_group = corpus.loc[corpus[group_column].isna(), DOC_ID_COLUMN].tolist()
        if missing_group:
            raise ValueError(
                f"Document(s) {missing_group[:10]} have no value in group column "
                f"'{group_column}'."
            )
    token_metadata = [group_column] if group_column else []

    # Surface forms first: stop words are matched before stemming.
    all_tokens = unnest_tokens_from_config(
        documents, preprocessing_cfg, token_metadata, stem=False
    )
    logger.info("Tokenized corpus into %d tokens.", len(all_tokens))

    if stopword_set is None:
        stopword_set = build_stopword_set(get_section(preprocessing_cfg, "stopwords"))
    stopword_set = frozenset(stopword_set)
    tokens = remove_stopwords(all_tokens, stopword_set)
    logger.info(
        "Removed %d stop-word tokens (%d stop words); %d tokens remain.",
        len(all_tokens) - len(tokens),
        len(stopword_set),
        len(tokens),
    )
    tokens = stem_tokens(tokens, stemming_algorithm(preprocessing_cfg))

    # Counts
    doc_counts = count_words(tokens, by="doc_id", sort=True)
    totals = word_totals(doc_counts)
    logger.info("Vocabulary before filtering: %d distinct words.", len(totals))

    group_counts = group_tfidf = group_top = None
    if group_column:
        group_counts = count_words(tokens, by=group_column, sort=True)
        group_tfidf = bind_tf_idf(
            group_counts,
            group=group_column,
            groups=corpus[group_column].unique(),
            sort_by="tf_idf",
        )
        group_top = top_terms(group_tfidf, n=int(analysis_cfg.get("top_n", 10)), by=group_column)
        logger.info(
            "Computed TF-IDF over %d groups of '%s'.",
            corpus[group_column].nunique(),
            group_column,
        )

    # Dictionaries
    dictionary_scores = None
    dictionaries = list(dictionaries or [])
    if dictionaries:
        dictionary_scores = score_dictionaries(tokens, dictionaries, doc_ids=ids)
        logger.info("Scored %d topic dictionaries.", len(dictionaries))

    # Sentiment uses the unfiltered, unstemmed tokens: document length counts
    # every word and lexicon entries match surface forms.
    sentiment = group_sentiment = None
    if lexicon is not None:
        sentiment = score_sentiment(all_tokens, lexicon, doc_ids=ids)
        if group_column:
            group_sentiment = sentiment_by_group(sentiment, corpus, by=group_column)
        logger.info(
            "Scored sentiment with a %d-word lexicon %s.", len(lexicon), dictionary_summary(lexicon)
        )

    # Document-term matrix
    min_count = int(vocabulary_cfg.get("min_count", 1))
    vocabulary = filter_vocabulary(doc_counts, min_count)
    dtm = build_document_term_matrix(
        doc_counts,
        doc_ids=ids,
        vocabulary=vocabulary,
        binary=bool(vocabulary_cfg.get("binary", False)),
    )
    logger.info(
        "Built document-term matrix: %d documents x %d terms (min_count=%d, %d nonzero).",
        dtm.shape[0],
        dtm.shape[1],
        min_count,
        dtm.nnz,
    )

    return PipelineResult(
        corpus=corpus,
        tokens=tokens,
        doc_counts=doc_counts,
        word_totals=totals,
        group_counts=group_counts,
        group_tfidf=group_tfidf,
        group_top_terms=group_top,
        dictionary_scores=dictionary_scores,
        sentiment=sentiment,
        group_sentiment=group_sentiment,
        vocabulary=vocabulary,
        dtm=dtm,
    )


def write_results(
    result: PipelineResult,
    output_dir: str,
    logger: Optional[logging.Logger] = None,
) -> List[str]:
    """
    Write every table as CSV and the document-term matrix with joblib.

    Returns
    -------
    List[str]
        Paths of the written files.
    """
    ensure_dir_exists(output_dir)
    written: List[str] = []

    for name, table in result.tables().items():
        path = os.path.join(output_dir, f"{name}.csv")
        table.to_csv(path, index=False)
        written.append(path)
        if logger is not None:
            logger.info("Saved %s (%d rows) to %s", name, len(table), path)

    dtm_path = os.path.join(output_dir, "document_term_matrix.joblib")
    save_document_term_matrix(result.dtm, dtm_path)
    written.append(dtm_path)
    if logger is not None:
        logger.info("Saved document-term matrix to %s", dtm_path)

    return written
