"""
Dictionary: term lookup, the saved-words notebook, and the features built on it.

Components:
- resolver: cache-first, parallel enrichment of looked-up terms
- notebook: versioned JSON persistence of saved entries
- story: mnemonic stories over saved words
- tutor: per-term Q&A chat
"""

from .notebook import NotebookStore
from .resolver import EntryResolver
from .story import StoryWriter, split_highlights
from .tutor import TermTutor

__all__ = [
    "EntryResolver",
    "NotebookStore",
    "StoryWriter",
    "TermTutor",
    "split_highlights",
]
