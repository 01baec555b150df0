"""
Keyword blacklist loading.

The blacklist is a JSON document of the form::

    {"blacklistedWords": ["casino", "payday loan", ...]}

Loading fails soft: any problem with the resource yields an empty set and
a warning, which disables keyword filtering without blocking traffic.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

BLACKLIST_KEY = "blacklistedWords"


def load_word_list(source: str | Path) -> frozenset[str]:
    """
    Load blacklisted substrings from a JSON file.

    Entries are stripped and lower-cased. Blank and non-string entries
    are skipped.

    Args:
        source: Path to the JSON keyword resource

    Returns:
        Set of lower-case substrings, empty if the resource is unusable
    """
    path = Path(source)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Blacklisted words file not found: %s", path)
        return frozenset()
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Blacklisted words file unreadable: %s - %s", path, e)
        return frozenset()

    words = data.get(BLACKLIST_KEY) if isinstance(data, dict) else None
    if not isinstance(words, list):
        logger.warning("Blacklisted words file has no %r list: %s", BLACKLIST_KEY, path)
        return frozenset()

    loaded = frozenset(
        word.strip().lower() for word in words if isinstance(word, str) and word.strip()
    )
    logger.info("Loaded %d blacklisted word(s) from %s", len(loaded), path)
    return loaded
