"""Test expression evaluation module"""

from benchaudit.evaluation.operators import (
    compare_op,
    to_numeric,
    EvaluationError,
    InvalidNumberError,
    InvalidPatternError,
    UnknownOperatorError,
)
from benchaudit.evaluation.flags import get_flag_value, is_flag_present
from benchaudit.evaluation.jsonpath import execute_path, load_structured, PathExpressionError
from benchaudit.evaluation.testset import Compare, TestItem, TestSet, InvalidBinOpError

__all__ = [
    'compare_op',
    'to_numeric',
    'get_flag_value',
    'is_flag_present',
    'execute_path',
    'load_structured',
    'Compare',
    'TestItem',
    'TestSet',
    'EvaluationError',
    'InvalidNumberError',
    'InvalidPatternError',
    'UnknownOperatorError',
    'PathExpressionError',
    'InvalidBinOpError',
]
