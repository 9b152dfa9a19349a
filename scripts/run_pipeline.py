"""
Run the press-release text analysis pipeline.

This script is a convenience wrapper around
`press_text.analysis.pipeline.run_pipeline`, which:

- builds documents from the configured CSV
- tokenizes and removes stop words
- counts words per document and per group
- computes TF-IDF by group and the top terms per group
- scores topic dictionaries and sentiment (when provided)
- builds the sparse document-term matrix
- writes every table under the configured results directory

Usage (from project root):

    python -m scripts.run_pipeline
    # or
    python scripts/run_pipeline.py --csv data/raw/press_releases.csv \
        --dictionaries config/dictionaries.yaml --lexicon opinion
"""

from __future__ import annotations

import argparse
import os

import pandas as pd

from press_text.analysis.dictionary import load_dictionaries
from press_text.analysis.pipeline import run_pipeline, write_results
from press_text.analysis.sentiment import load_lexicon_csv, load_opinion_lexicon
from press_text.features.stopwords import load_stopwords_file
from press_text.utils.run_utils import DEFAULT_CONFIG_PATH, get_logger, get_section, load_analysis_config


def parse_args() -> argparse.Namespace:
    """
    Parse command-line arguments.

    Paths given here override the ones in the config file.
    """
    parser = argparse.ArgumentParser(
        description="Run word counts, TF-IDF, dictionary and sentiment analysis over press releases."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to analysis config YAML (default: {DEFAULT_CONFIG_PATH}).",
    )
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Path to the corpus CSV (default: dataset.path from the config).",
    )
    parser.add_argument(
        "--stopwords",
        type=str,
        default=None,
        help="Optional custom stop-word file (one word per line) replacing the configured set.",
    )
    parser.add_argument(
        "--dictionaries",
        type=str,
        default=None,
        help="Optional YAML file of topic dictionaries.",
    )
    parser.add_argument(
        "--lexicon",
        type=str,
        default=None,
        help='Sentiment lexicon CSV (word,sentiment), or "opinion" for the NLTK opinion lexicon.',
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for result tables (default: paths.results_dir from the config).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    config = load_analysis_config(args.config)
    logger = get_logger(name="run_pipeline", config=config, log_file_suffix="pipeline")

    dataset_cfg = get_section(config, "dataset")
    analysis_cfg = get_section(config, "analysis")

    csv_path = args.csv or dataset_cfg.get("path")
    if not csv_path or not os.path.exists(csv_path):
        raise FileNotFoundError(f"Corpus CSV not found at: {csv_path}")

    logger.info("=" * 80)
    logger.info("Starting text analysis pipeline.")
    logger.info("Config: %s, corpus: %s", args.config, csv_path)

    corpus_df = pd.read_csv(csv_path)

    stopword_set = load_stopwords_file(args.stopwords) if args.stopwords else None

    dictionaries_path = args.dictionaries or analysis_cfg.get("dictionaries_path")
    dictionaries = load_dictionaries(dictionaries_path) if dictionaries_path else None

    lexicon_path = args.lexicon or analysis_cfg.get("lexicon_path")
    if lexicon_path == "opinion":
        lexicon = load_opinion_lexicon()
    elif lexicon_path:
        lexicon = load_lexicon_csv(lexicon_path)
    else:
        lexicon = None

    result = run_pipeline(
        corpus_df,
        config,
        stopword_set=stopword_set,
        dictionaries=dictionaries,
        lexicon=lexicon,
        logger=logger,
    )

    output_dir = args.output_dir or get_section(config, "paths").get("results_dir", "outputs/results")
    write_results(result, output_dir, logger=logger)

    if result.group_top_terms is not None:
        logger.info("Top terms by group:\n%s", result.group_top_terms)
    logger.info("Text analysis pipeline completed.")


if __name__ == "__main__":
    main()
