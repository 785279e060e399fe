"""Page access layer: publication listings that can be grown and read."""

from .base import (
    AffordanceStrategy,
    ContentSource,
    ContentSourceError,
)
from .scholar_html import HTMLFetcher, ScholarHtmlSource

__all__ = [
    "AffordanceStrategy",
    "ContentSource",
    "ContentSourceError",
    "HTMLFetcher",
    "ScholarHtmlSource",
]
