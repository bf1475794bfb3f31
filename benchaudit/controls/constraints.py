"""Defined constraints and sub-check selection"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

DefinedConstraints = Dict[str, List[str]]


def parse_defined_constraints(definitions: Iterable[str]) -> DefinedConstraints:
    """
    Build the defined constraints mapping from ``key=value`` strings.

    Repeated keys accumulate values in order. Entries that are not exactly
    one non-empty key and one non-empty value are logged and ignored.

    Example:
        >>> parse_defined_constraints(['platform=ubuntu', 'platform=rhel', 'boot=grub'])
        {'platform': ['ubuntu', 'rhel'], 'boot': ['grub']}
    """
    constraints: DefinedConstraints = {}
    for entry in definitions or []:
        parts = str(entry).split('=')
        if len(parts) == 2 and parts[0] and parts[1]:
            values = constraints.setdefault(parts[0], [])
            if parts[1] not in values:
                values.append(parts[1])
        else:
            logger.info(f"failed to parse defined constraint, {entry}")
    return constraints


def is_sub_check_compatible(key: str, values: Sequence[str],
                            defined_constraints: Mapping[str, Sequence[str]]) -> bool:
    """
    Check one constraint key of a sub-check against the defined constraints.

    The key must be defined, and at least one of the acceptable values
    declared for it must be among the defined values.
    """
    defined_values = (defined_constraints or {}).get(key) or []
    if not defined_values:
        return False

    for value in values:
        if value in defined_values:
            return True
    return False


def constraints_satisfied(constraints: Mapping[str, Sequence[str]],
                          defined_constraints: Mapping[str, Sequence[str]]) -> bool:
    """True when every declared constraint key is compatible; no constraints always match"""
    for key, values in (constraints or {}).items():
        if not is_sub_check_compatible(key, values, defined_constraints):
            return False
    return True


def select_sub_check(sub_checks: Sequence, defined_constraints: Mapping[str, Sequence[str]]):
    """
    Return the first sub-check whose constraints are satisfied, or None.

    Args:
        sub_checks: Sub-checks in declared order, each with a ``constraints`` mapping
        defined_constraints: Runtime environment description
    """
    for sub_check in sub_checks or []:
        if constraints_satisfied(sub_check.constraints, defined_constraints):
            return sub_check
    return None


def clean_ids(ids: Optional[str]) -> List[str]:
    """
    Split a comma separated ID list, trimming blanks and dropping empty entries.

    Example:
        >>> clean_ids(' 1.1, 1.2,')
        ['1.1', '1.2']
    """
    if not ids:
        return []
    return [item.strip() for item in str(ids).split(',') if item.strip()]
