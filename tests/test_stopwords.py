"""
Tests for stop-word sets and filtering.
"""

from __future__ import annotations

import nltk
import pandas as pd
import pytest

from press_text.features.stopwords import (
    build_stopword_set,
    get_stopword_set,
    load_stopwords_file,
    remove_stopwords,
)
from press_text.features.tokenize import tokenize_text


def _nltk_corpus_available(name: str) -> bool:
    try:
        nltk.data.find(f"corpora/{name}")
    except LookupError:
        return False
    return True


def test_remove_stopwords_from_words():
    tokens = tokenize_text("the cat sat")
    assert remove_stopwords(tokens, {"the", "a"}) == ["cat", "sat"]


def test_remove_stopwords_is_exact_match_only():
    # No partial matches: "there" and "another" survive "the" and "a".
    assert remove_stopwords(["there", "another", "a"], {"the", "a"}) == ["there", "another"]


def test_remove_stopwords_from_table_is_idempotent():
    tokens = pd.DataFrame(
        {"doc_id": [1, 1, 1, 2, 2], "word": ["the", "cat", "sat", "a", "dog"]}
    )
    stop = {"the", "a"}

    once = remove_stopwords(tokens, stop)
    twice = remove_stopwords(once, stop)

    assert once["word"].tolist() == ["cat", "sat", "dog"]
    pd.testing.assert_frame_equal(once, twice)


def test_remove_stopwords_requires_word_column():
    with pytest.raises(KeyError):
        remove_stopwords(pd.DataFrame({"token": ["a"]}), {"a"})


def test_sklearn_stopwords():
    words = get_stopword_set("sklearn")
    assert "the" in words
    assert isinstance(words, frozenset)


def test_unknown_source_raises():
    with pytest.raises(ValueError):
        get_stopword_set("spacy")


def test_sklearn_non_english_raises():
    with pytest.raises(ValueError):
        get_stopword_set("sklearn", language="german")


@pytest.mark.skipif(
    not _nltk_corpus_available("stopwords"),
    reason="NLTK stopwords corpus not installed; skipping.",
)
def test_nltk_stopwords():
    assert "the" in get_stopword_set("nltk", "english")


def test_load_stopwords_file(tmp_path):
    path = tmp_path / "stop.txt"
    path.write_text("# custom list\nThe\n\nsenator\n", encoding="utf-8")

    assert load_stopwords_file(str(path)) == frozenset({"the", "senator"})


def test_build_stopword_set_from_config(tmp_path):
    path = tmp_path / "stop.txt"
    path.write_text("congressman\n", encoding="utf-8")

    cfg = {"enabled": True, "source": "sklearn", "extra_words": ["Rep"], "file": str(path)}
    words = build_stopword_set(cfg)

    assert {"the", "rep", "congressman"} <= words


def test_build_stopword_set_disabled():
    assert build_stopword_set({"enabled": False}) == frozenset()
