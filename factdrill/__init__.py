"""
factdrill - adaptive times-table practice engine.
"""

__version__ = "1.0.0"
