"""
paperharvest - discover arXiv papers that use a given software package

This package drives the arXiv full-text search for a software name, resolves
each hit's metadata (falling back past withdrawn revisions) and merges the
results into a store that maps papers to the software names they mention.
"""

__version__ = "0.1.0"
__author__ = "hpc-site"
__license__ = "MIT"

from .config import HarvestSettings, load_settings
from .crawler import Crawler
from .models import CrawlReport, IngestOutcome, Paper

__all__ = [
    "Crawler",
    "CrawlReport",
    "HarvestSettings",
    "IngestOutcome",
    "Paper",
    "load_settings",
]
