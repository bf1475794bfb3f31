"""Comparison operators used by test items"""

import logging
import re
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

ARRAY_SEPARATOR = ','

_INTEGER_RE = re.compile(r'[+-]?[0-9]+')
_OCTAL_RE = re.compile(r'[+-]?[0-7]+')
_BOOLEAN_VALUES = ('true', 'false')


class EvaluationError(Exception):
    """Base exception for errors raised while evaluating a test"""
    pass


class InvalidNumberError(EvaluationError):
    """Operand of a numeric or bitmask comparison is not a number"""
    pass


class InvalidPatternError(EvaluationError):
    """Regular expression used by a test cannot be compiled"""
    pass


class UnknownOperatorError(EvaluationError):
    """Compare operator is not supported"""
    pass


def to_numeric(a: str, b: str) -> Tuple[int, int]:
    """
    Convert two operands to integers, ignoring surrounding whitespace.

    Raises:
        InvalidNumberError: If either operand is blank or not an integer
    """
    a = a.strip()
    b = b.strip()

    if not a or not b:
        raise InvalidNumberError("cannot convert blank value to numeric")

    for value in (a, b):
        if not _INTEGER_RE.fullmatch(value):
            raise InvalidNumberError(f"failed converting {value} to integer")

    return int(a), int(b)


def _parse_octal(value: str) -> int:
    if not _OCTAL_RE.fullmatch(value):
        raise InvalidNumberError(f"failed converting {value!r} to an octal integer")
    return int(value, 8)


def split_and_remove_last_separator(value: str, sep: str = ARRAY_SEPARATOR) -> List[str]:
    """Split a separated list, dropping a trailing separator and blank input"""
    clean = value.strip().rstrip(sep)
    if not clean:
        return []
    return [item.strip() for item in clean.split(sep)]


def all_elements_valid(source: List[str], target: List[str]) -> bool:
    """True when every element of source appears in target"""
    if not source and not target:
        return True

    # exactly one side empty
    if not source or not target:
        return False

    return all(item in target for item in source)


def _booleans_equal(flag_value: str, compare_value: str) -> bool:
    actual = flag_value.lower()
    expected = compare_value.lower()
    if actual in _BOOLEAN_VALUES and expected in _BOOLEAN_VALUES:
        return actual == expected
    return flag_value == compare_value


def compare_op(op: str, flag_value: str, compare_value: str,
               flag_name: str = '') -> Tuple[bool, str, Optional[EvaluationError]]:
    """
    Compare an extracted value against the expected value.

    Args:
        op: Operator name (eq, noteq, gt, gte, lt, lte, has, nothave,
            regex, valid_elements, bitmask)
        flag_value: Value extracted from the audit output
        compare_value: Value expected by the test
        flag_name: Flag under test, used in the explanation

    Returns:
        Tuple of (result, explanation, error). ``error`` is None unless the
        operands or the operator could not be used.
    """
    logger.debug(f"Actual value flag '{flag_name}' = '{flag_value}'")

    if op == 'eq':
        if flag_value == '' and compare_value == '':
            return True, f"{flag_name} '{compare_value}' has no output", None
        result = _booleans_equal(flag_value, compare_value)
        return result, f"'{flag_name}' is equal to '{compare_value}'", None

    if op == 'noteq':
        result = not _booleans_equal(flag_value, compare_value)
        return result, f"'{flag_name}' is not equal to '{compare_value}'", None

    if op in ('gt', 'gte', 'lt', 'lte'):
        try:
            a, b = to_numeric(flag_value, compare_value)
        except InvalidNumberError as e:
            logger.info(
                f"Not numeric value - flag: {flag_value!r} - compareValue: {compare_value!r} {e}"
            )
            explanation = (
                f"Invalid Number(s) used for comparison: '{flag_value}' '{compare_value}'"
            )
            return False, explanation, InvalidNumberError(
                f"not numeric value - flag: {flag_value!r} - compareValue: {compare_value!r} {e}"
            )

        if op == 'gt':
            return a > b, f"'{flag_name}' is greater than {compare_value}", None
        if op == 'gte':
            return a >= b, f"'{flag_name}' is greater or equal to {compare_value}", None
        if op == 'lt':
            return a < b, f"'{flag_name}' is lower than {compare_value}", None
        return a <= b, f"'{flag_name}' is lower or equal to {compare_value}", None

    if op == 'has':
        return compare_value in flag_value, f"'{flag_name}' has '{compare_value}'", None

    if op == 'nothave':
        return (compare_value not in flag_value,
                f"'{flag_name}' does not have '{compare_value}'", None)

    if op == 'regex':
        explanation = f"'{flag_name}' matched by regex expression '{compare_value}'"
        try:
            pattern = re.compile(compare_value)
        except re.error as e:
            logger.error(f"Invalid regex expression '{compare_value}': {e}")
            return False, explanation, InvalidPatternError(
                f"invalid regex expression {compare_value!r}: {e}"
            )
        return pattern.search(flag_value) is not None, explanation, None

    if op == 'valid_elements':
        source = split_and_remove_last_separator(flag_value)
        target = split_and_remove_last_separator(compare_value)
        return (all_elements_valid(source, target),
                f"'{flag_name}' contains valid elements from '{compare_value}'", None)

    if op == 'bitmask':
        try:
            requested = _parse_octal(flag_value)
        except InvalidNumberError as e:
            return False, f"'{flag_name}' has a non numeric value: '{flag_value}'", e
        try:
            allowed = _parse_octal(compare_value)
        except InvalidNumberError as e:
            return False, f"'{flag_name}' is testing for a non numeric value: '{compare_value}'", e

        explanation = (
            f"'{flag_name}' has permissions {flag_value}, "
            f"expected {compare_value} or more restrictive"
        )
        return (allowed & requested) == requested, explanation, None

    logger.warning(f"Unknown compare operator '{op}' for flag '{flag_name}'")
    return False, '', UnknownOperatorError(f"unknown compare operator {op!r}")
