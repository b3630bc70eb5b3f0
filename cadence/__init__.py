"""
Cadence - weekly review board engine.

Items under review rotate through seven day-of-week buckets, are reordered by
drag gestures, and retire into a category-grouped archive once mastered.
"""

__version__ = "1.0.0"
