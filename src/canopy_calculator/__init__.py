"""
Canopy Calculator Package

Ballpark price estimates for tree services.
Resolves a homeowner's request against a static pricing table keyed by trunk circumference.
"""

__version__ = "1.0.0"
