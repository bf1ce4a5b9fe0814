"""
paperharvest - discover arXiv papers that use a given software package

This is the main public API module.
"""

from .core.config import HarvestSettings, load_settings
from .core.crawler import Crawler
from .core.models import CrawlReport, IngestOutcome, Paper

__version__ = "0.1.0"
__all__ = [
    "Crawler",
    "CrawlReport",
    "HarvestSettings",
    "IngestOutcome",
    "Paper",
    "load_settings",
]
