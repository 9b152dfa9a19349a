"""
Top-level package for the press-release text analysis toolkit.

This package contains modules for:
- the document model and corpus validation
- tokenization, stop-word removal and word counts
- TF-IDF scoring and sparse document-term matrices
- dictionary matching and lexicon-based sentiment
- configuration and logging helpers

Every analysis step is a pure function over tables; the pipeline in
press_text.analysis.pipeline chains them for a full run.
"""

__version__ = "0.1.0"
