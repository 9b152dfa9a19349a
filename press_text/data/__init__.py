"""
Corpus data model.

This subpackage provides:
- the immutable `Document` type
- conversion between corpus DataFrames and documents, with loud failures
  for documents whose text is missing.
"""
