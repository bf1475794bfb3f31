"""Test items and test sets evaluated against audit output"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from benchaudit.models import TestOutput
from benchaudit.evaluation.flags import get_flag_value, is_flag_present
from benchaudit.evaluation.jsonpath import PathExpressionError, execute_path, load_structured
from benchaudit.evaluation.operators import EvaluationError, compare_op

logger = logging.getLogger(__name__)

BIN_OP_AND = 'and'
BIN_OP_OR = 'or'


class InvalidBinOpError(Exception):
    """Test set declares a binary operator other than 'and' or 'or'"""
    pass


@dataclass
class Compare:
    """Comparison operator and expected value"""
    op: str = ''
    value: str = ''


@dataclass
class TestItem:
    """A single assertion against audit output"""
    __test__ = False

    flag: str = ''
    path: str = ''
    set: bool = True
    compare: Compare = field(default_factory=Compare)

    @property
    def name(self) -> str:
        return self.flag or self.path

    def evaluate(self, output: str) -> Tuple[bool, str, Optional[EvaluationError]]:
        """
        Evaluate this item against one unit of output.

        Args:
            output: A line, or the whole trimmed output

        Returns:
            Tuple of (result, explanation, error)
        """
        path_value = ''
        if not self.flag and self.path:
            try:
                data = load_structured(output)
                path_value = execute_path(self.path, data)
            except PathExpressionError as e:
                logger.info(f"Unable to evaluate path expression '{self.path}': {e}")
                return False, '', e
            present = path_value != ''
        else:
            present = is_flag_present(output, self.flag)

        error = None
        if self.set:
            if self.compare.op:
                # an empty path result falls back to the pattern extraction
                flag_value = path_value or get_flag_value(output, self.flag)
                result, expected, error = compare_op(
                    self.compare.op, flag_value, self.compare.value, self.name
                )
            else:
                expected = f"'{self.name}' Is present"
                result = present
        else:
            expected = f"'{self.name}' Is not present"
            result = not present

        logger.debug(f"evaluate ExpectedResult: {expected}")
        logger.debug(f"evaluate TestResult: {result}")
        if error is not None:
            logger.debug(f"evaluate Error: {error}")
        return result, expected, error

    def execute(self, output: str, multiple_output: bool) -> Tuple[bool, str, Optional[EvaluationError]]:
        """Evaluate against the whole output, or against every row of it"""
        output = output.rstrip(' \n')

        if not multiple_output:
            return self.evaluate(output)

        result, expected, error = False, '', None
        for row in output.split('\n'):
            result, expected, error = self.evaluate(row)
            # no need to look at the remaining rows once one fails
            if not result:
                break
        return result, expected, error


@dataclass
class TestSet:
    """Ordered test items combined with a binary operator"""
    __test__ = False

    test_items: List[TestItem] = field(default_factory=list)
    bin_op: str = ''

    def execute(self, output: str, test_id: str = '', multiple_output: bool = False) -> TestOutput:
        """
        Run every test item and combine the verdicts.

        Args:
            output: Raw audit output
            test_id: Check ID, used for logging
            multiple_output: Evaluate each item against every output row

        Returns:
            TestOutput carrying the first item error, if any; a zero value
            when there are no test items

        Raises:
            InvalidBinOpError: If bin_op is not 'and', 'or' or empty
        """
        final = TestOutput()
        if not self.test_items:
            return final

        if self.bin_op in (BIN_OP_AND, ''):
            combine, separator = all, ' AND '
        elif self.bin_op == BIN_OP_OR:
            combine, separator = any, ' OR '
        else:
            raise InvalidBinOpError(
                f"unknown binary operator for tests {test_id}: {self.bin_op!r}"
            )

        results = []
        explanations = []
        for item in self.test_items:
            result, expected, error = item.execute(output, multiple_output)
            if error is not None:
                logger.info(f"Failed running test {test_id}. {error}")
                if not final.error_message:
                    final.error_message = str(error)
            results.append(result)
            explanations.append(expected)

        final.test_result = combine(results)
        final.expected_result = separator.join(explanations)
        final.actual_result = output
        return final
