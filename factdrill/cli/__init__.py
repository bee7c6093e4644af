"""Command-line interface for factdrill (``factdrill`` console script)."""
