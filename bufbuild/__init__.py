"""
Download, cache and run the buf CLI on demand.
"""

__version__ = "0.1.0"
