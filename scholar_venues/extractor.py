"""Locate the venue citation inside one publication row."""

from typing import Optional

from scholar_venues.sources.base import ContentSource, Record


class RecordExtractor:
    """
    Picks the venue text out of a publication row.

    Scholar styles both the author list and the venue line with the same
    grey secondary-text class, so position decides: with two fragments the
    venue is the second, with one it is the only one. Rows without grey
    fragments fall back to the dedicated venue field.
    """

    def __init__(self, source: ContentSource):
        self.source = source

    def extract_raw(self, record: Record) -> Optional[str]:
        fragments = self.source.secondary_fragments(record)

        if len(fragments) >= 2:
            text = fragments[1]
        elif len(fragments) == 1:
            text = fragments[0]
        else:
            text = self.source.venue_field(record)

        if text is None:
            return None
        return text.strip()
