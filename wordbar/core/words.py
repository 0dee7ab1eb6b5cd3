"""
Word list storage for WordBar.
Holds the ordered word entries and the currently selected position.
"""
import os
import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from wordbar.constants import DEFAULT_WORDS, LAST_INDEX_KEY

# Record keys accepted in the word file, in lookup order
TERM_KEYS = ('english', 'term')
TRANSLATION_KEYS = ('chinese', 'translation')


@dataclass(frozen=True)
class WordEntry:
    """A term and its translation."""
    term: str
    translation: str


def default_entries() -> List[WordEntry]:
    """Built-in word list used when nothing else is available."""
    return [WordEntry(term, translation) for term, translation in DEFAULT_WORDS]


def _first_text(record: dict, keys: Tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = record.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class WordStore:
    """Read-only word list plus the index of the word being shown.

    The list is never empty: constructing a store from no entries falls back
    to the built-in list.
    """

    def __init__(self, entries: Optional[Iterable[WordEntry]] = None, current_index: Optional[int] = None):
        entries = tuple(entries or ())
        if not entries:
            logging.warning("Word list is empty, using built-in words")
            entries = tuple(default_entries())
        self._entries: Tuple[WordEntry, ...] = entries
        self._current_index = 0
        self.restore_index(current_index)

    @classmethod
    def from_config(cls, config) -> 'WordStore':
        """Load the configured word file and restore the remembered position."""
        entries = cls.load(config.get_words_file())
        return cls(entries, config.get_last_index())

    @staticmethod
    def load(source) -> List[WordEntry]:
        """Parse a JSON list of {english, chinese} (or {term, translation}) records.

        Args:
            source: Path of the word file

        Returns:
            The parsed entries, or an empty list if the file can't be read
        """
        try:
            with open(source, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logging.warning(f"Word file not found: {source}")
            return []
        except (OSError, TypeError, ValueError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            logging.error(f"Failed to load word file {source}: {e}")
            return []

        if not isinstance(data, list):
            logging.error(f"Word file {source} must contain a list, got {type(data).__name__}")
            return []

        entries = []
        for position, record in enumerate(data):
            if not isinstance(record, dict):
                logging.warning(f"Skipping word #{position} in {source}: not an object")
                continue
            term = _first_text(record, TERM_KEYS)
            translation = _first_text(record, TRANSLATION_KEYS)
            if term is None or translation is None:
                logging.warning(f"Skipping word #{position} in {source}: missing term or translation")
                continue
            entries.append(WordEntry(term, translation))

        logging.info(f"Loaded {len(entries)} words from {os.path.basename(str(source))}")
        return entries

    @property
    def entries(self) -> Tuple[WordEntry, ...]:
        return self._entries

    @property
    def current_index(self) -> int:
        return self._current_index

    @current_index.setter
    def current_index(self, index: int):
        if not 0 <= index < len(self._entries):
            raise IndexError(f"Word index {index} out of range for {len(self._entries)} words")
        self._current_index = index

    @property
    def current(self) -> WordEntry:
        return self._entries[self._current_index]

    def __len__(self) -> int:
        return len(self._entries)

    def restore_index(self, persisted: Any) -> int:
        """Adopt a remembered index, falling back to 0 when it no longer fits.

        Args:
            persisted: Value read from settings, may be None

        Returns:
            The index now selected
        """
        if isinstance(persisted, int) and not isinstance(persisted, bool) and 0 <= persisted < len(self._entries):
            self._current_index = persisted
        else:
            if persisted is not None:
                logging.info(f"Stored word index {persisted!r} is out of range, starting from the first word")
            self._current_index = 0
        return self._current_index

    def persist_index(self, settings):
        """Remember the current index for the next launch.

        Args:
            settings: Key-value store with a set(key, value) method
        """
        settings.set(LAST_INDEX_KEY, self._current_index)
        logging.info(f"Saved word position {self._current_index}")
