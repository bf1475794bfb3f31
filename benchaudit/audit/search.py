"""Shared helpers for file and text search audits"""

from typing import Any, Mapping

SEARCH_EXACT = 'exact'
SEARCH_CONTAINS = 'contains'
SEARCH_HAS_PREFIX = 'has_prefix'
SEARCH_HAS_SUFFIX = 'has_suffix'

# Definitions written for older runners use camelCase keys
_KEY_ALIASES = {
    'searchTerm': 'search_term',
    'searchType': 'search_type',
    'fileType': 'file_type',
    'userId': 'user_id',
    'groupId': 'group_id',
}

_TYPE_ALIASES = {
    'hasPrefix': SEARCH_HAS_PREFIX,
    'hasSuffix': SEARCH_HAS_SUFFIX,
    'symblink': 'symlink',
}


def normalize_args(payload: Any) -> dict:
    """
    Turn a search audit payload into a dict with snake_case keys

    Raises:
        TypeError: If the payload is not a mapping
    """
    if not isinstance(payload, Mapping):
        raise TypeError(f"search audit expects a mapping, got {type(payload).__name__}")

    args = {}
    for key, value in payload.items():
        key = _KEY_ALIASES.get(str(key), str(key))
        if isinstance(value, str):
            value = _TYPE_ALIASES.get(value, value)
        args[key] = value
    return args


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1')
    return bool(value)


def matches_term(text: str, term: str, search_type: str) -> bool:
    """Match a name or word against a search term"""
    if search_type == SEARCH_EXACT:
        return text == term
    if search_type == SEARCH_HAS_PREFIX:
        return text.startswith(term)
    if search_type == SEARCH_HAS_SUFFIX:
        return text.endswith(term)
    return term in text
