"""
Shared utility functions.

This subpackage includes:
- YAML configuration loading
- directory management
- lightweight logging helpers used across the project.
"""
