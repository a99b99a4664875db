"""
Request Service Package.

Tracks item requests through their lifecycle: creation, status edits,
paginated listing, batch administration and a location heatmap.
"""

__version__ = "1.0.0"
