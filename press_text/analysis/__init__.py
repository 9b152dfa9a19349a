"""
Document-level analyses built on the token and count tables.

This subpackage includes:
- dictionary (topic keyword) matching
- lexicon-based sentiment scoring
- the end-to-end pipeline that wires all stages together.
"""
