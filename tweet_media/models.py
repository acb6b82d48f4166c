"""
Media data model for the tweet media pipeline.

A MediaReference is created by the discoverer and written at most once by the
orchestrator, when OCR produced text. The combined text of a result is always
derived from its items.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class MediaKind(str, Enum):
    IMAGE = 'image'
    VIDEO = 'video'


@dataclass
class MediaReference:
    """A candidate media attachment discovered in embed markup."""

    kind: MediaKind
    source_url: str
    extracted_text: Optional[str] = None

    def __post_init__(self):
        if not self.source_url:
            raise ValueError('MediaReference.source_url must not be empty')
        self.kind = MediaKind(self.kind)

    def to_dict(self) -> Dict:
        data = {
            'type': self.kind.value,
            'url': self.source_url,
        }
        if self.extracted_text is not None:
            data['extractedText'] = self.extracted_text
        return data


@dataclass
class MediaAnalysisResult:
    """All discovered references plus their aggregated OCR text."""

    items: List[MediaReference] = field(default_factory=list)

    @property
    def combined_text(self) -> str:
        blocks = [
            f"[{item.kind.value}]: {item.extracted_text}"
            for item in self.items
            if item.extracted_text
        ]
        return '\n\n'.join(blocks)

    def to_dict(self) -> Dict:
        return {
            'mediaItems': [item.to_dict() for item in self.items],
            'combinedText': self.combined_text,
        }
