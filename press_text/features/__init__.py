"""
Word-level features.

This subpackage includes:
- tokenization (with optional n-grams and stemming)
- stop-word reference sets and filtering
- word counts per document or group
- TF-IDF scoring
- sparse document-term matrices.
"""
