"""
Shared pytest fixtures for WordBar tests.
"""
import os
import sys
import json
import tempfile
import pytest
from unittest.mock import MagicMock, patch

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wordbar.config import Config
from wordbar.core.words import WordEntry, WordStore


@pytest.fixture
def temp_config_dir():
    """Create temporary config directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def config(temp_config_dir):
    """Config object writing into a temporary directory."""
    with patch.object(Config, 'CONFIG_DIR', temp_config_dir):
        with patch.object(Config, 'CONFIG_FILE', os.path.join(temp_config_dir, 'config.json')):
            yield Config()


@pytest.fixture
def sample_words():
    """Word records as they appear in words.json."""
    return [
        {"english": "vacant", "chinese": "空的"},
        {"english": "abandon", "chinese": "放弃"},
    ]


@pytest.fixture
def write_words(temp_config_dir):
    """Write content to a words file and return its path."""
    def _write(content, name='words.json'):
        path = os.path.join(temp_config_dir, name)
        with open(path, 'w', encoding='utf-8') as f:
            if isinstance(content, str):
                f.write(content)
            else:
                json.dump(content, f, ensure_ascii=False)
        return path
    return _write


@pytest.fixture
def two_word_store():
    """Store with the two sample words, starting at the first."""
    return WordStore([WordEntry("vacant", "空的"), WordEntry("abandon", "放弃")])


@pytest.fixture
def mock_notifier():
    """Notifier capturing notices."""
    return MagicMock()
