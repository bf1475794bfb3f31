"""Flag value extraction from raw audit output"""

import logging
import re

logger = logging.getLogger(__name__)

# Ordered from the most specific to the broadest pattern. The first pattern
# with a non-empty capture wins. A flag written without dashes also matches
# its command line form, so "allow-privileged" finds "--allow-privileged=false".
_FLAG_PATTERNS = (
    r'(?:^|\s+)"?(?:--?)?{flag}"?\s*[=:][\r\t\f\v ]*"(.*)"',
    r'(?:^|\s+)"?(?:--?)?{flag}"?\s*[=:][\r\t\f\v ]*(\S*)',
    r'(?:^|\s+)"?(?:--?)?{flag}"?\s+([^-\s]+)',
    r'(?:^|\s+)(?:--?)?({flag})(?:\s|$)',
)

# The flag may not continue a longer word on either side. Leading dashes are
# allowed, as in the extraction patterns.
_PRESENCE_PATTERN = r'(?:^|[^a-zA-Z0-9\-_])(?:--?)?{flag}(?:[^a-zA-Z0-9\-_]|$)'


def get_flag_value(output: str, flag: str) -> str:
    """
    Extract the value of a flag from a line of audit output.

    Args:
        output: Raw audit output (a single line or a whole block)
        flag: Flag name. An empty flag selects the whole output.

    Returns:
        The extracted value, the flag itself when it appears on its own,
        or an empty string when nothing matched.
    """
    if not flag:
        return output

    for template in _FLAG_PATTERNS:
        try:
            match = re.search(template.format(flag=flag), output)
        except re.error as e:
            logger.error(f"Flag '{flag}' cannot be used as a pattern: {e}")
            return ''
        if match is None:
            continue
        for value in match.groups():
            if value:
                return value

    return ''


def is_flag_present(output: str, flag: str) -> bool:
    """Check that the flag appears in the output as a whole word"""
    try:
        return re.search(_PRESENCE_PATTERN.format(flag=flag), output) is not None
    except re.error as e:
        logger.error(f"Flag '{flag}' cannot be used as a pattern: {e}")
        return False
