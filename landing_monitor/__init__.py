"""
Landing Page Monitor - Batch health checks for ad destination URLs.
"""

__version__ = "1.0.1"
