"""Checks and the state machine that runs them"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from benchaudit.models import State
from benchaudit.audit.base import Auditer
from benchaudit.evaluation.testset import InvalidBinOpError, TestSet
from benchaudit.controls.constraints import select_sub_check

logger = logging.getLogger(__name__)

CHECK_TYPE_MANUAL = 'manual'
CHECK_TYPE_SKIP = 'skip'


@dataclass
class AuditableUnit:
    """An audit paired with the tests that judge its output"""
    audit: Any = ''
    audit_type: str = ''
    auditer: Optional[Auditer] = None
    tests: Optional[TestSet] = None
    remediation: str = ''

    @property
    def has_tests(self) -> bool:
        return self.tests is not None and bool(self.tests.test_items)

    def describe(self) -> str:
        if self.auditer is not None and self.auditer.describe():
            return self.auditer.describe()
        if isinstance(self.audit, str):
            return self.audit
        return str(self.audit or '')


@dataclass
class SubCheck:
    """Environment specific variant of a check, selected through its constraints"""
    unit: AuditableUnit = field(default_factory=AuditableUnit)
    constraints: Dict[str, List[str]] = field(default_factory=dict)


@dataclass
class Check:
    """
    One benchmark recommendation.

    The definition fields never change during a run. ``state``,
    ``actual_value``, ``expected_result``, ``error_message`` and
    ``test_info`` are rewritten by every call to :meth:`run`.
    """
    id: str
    text: str = ''
    type: str = ''
    scored: bool = False
    use_multiple_values: bool = False
    unit: AuditableUnit = field(default_factory=AuditableUnit)
    sub_checks: List[SubCheck] = field(default_factory=list)
    custom_configs: Tuple = ()

    state: Optional[State] = None
    actual_value: str = ''
    expected_result: str = ''
    error_message: str = ''
    test_info: List[str] = field(default_factory=list)
    selected: Optional[AuditableUnit] = None

    @property
    def remediation(self) -> str:
        if self.selected is not None and self.selected.remediation:
            return self.selected.remediation
        return self.unit.remediation

    @property
    def audit(self) -> str:
        return (self.selected or self.unit).describe()

    def run(self, defined_constraints: Optional[Mapping[str, Sequence[str]]] = None,
            skip: bool = False) -> State:
        """
        Run the check and record its result.

        Args:
            defined_constraints: Runtime environment description used to pick a sub-check
            skip: Treat the check as type ``skip``, used when its group is skipped

        Returns:
            The state the check ended in
        """
        self.state = None
        self.actual_value = ''
        self.expected_result = ''
        self.error_message = ''
        self.selected = None

        self.state = self._evaluate(defined_constraints or {}, skip)
        self.test_info = [self.remediation]
        return self.state

    def _evaluate(self, defined_constraints: Mapping[str, Sequence[str]], skip: bool) -> State:
        if skip or self.type == CHECK_TYPE_SKIP:
            return State.INFO

        if self.type == CHECK_TYPE_MANUAL:
            return State.WARN

        if not self.sub_checks and not self.unit.has_tests:
            logger.info(f"Check {self.id} has no tests")
            return State.WARN

        if self.sub_checks:
            sub_check = select_sub_check(self.sub_checks, defined_constraints)
            if sub_check is None:
                logger.info(f"Failed to find a valid sub check, check {self.id}")
                return State.WARN
            unit = sub_check.unit
        else:
            unit = self.unit
        self.selected = unit

        if unit.auditer is None:
            logger.info(f"Check {self.id} has no audit")
            return State.WARN

        try:
            result = unit.auditer.execute(*self.custom_configs)
        except Exception as e:
            logger.warning(f"Audit for check {self.id} raised an error: {e}")
            self.error_message = str(e)
            return State.WARN

        if result.error_message:
            self.error_message = result.error_message
            logger.info(f"Check {self.id}: {result.error_message}")

        if result.state is not None:
            return result.state

        if not unit.has_tests:
            logger.info(f"Check {self.id} has no test items for the selected audit")
            return State.WARN

        try:
            output = unit.tests.execute(result.output, self.id, self.use_multiple_values)
        except InvalidBinOpError as e:
            logger.warning(str(e))
            self.actual_value = result.output
            self.expected_result = str(e)
            return State.FAIL

        self.actual_value = output.actual_result
        self.expected_result = output.expected_result
        if output.error_message:
            if self.error_message:
                self.error_message = f"{self.error_message}; {output.error_message}"
            else:
                self.error_message = output.error_message

        if output.test_result:
            return State.PASS
        if self.scored:
            return State.FAIL
        return State.WARN

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view of the check's definition and last result"""
        return {
            'test_number': self.id,
            'test_desc': self.text,
            'audit': self.audit,
            'type': self.type,
            'test_info': list(self.test_info),
            'status': str(self.state) if self.state is not None else '',
            'actual_value': self.actual_value,
            'expected_result': self.expected_result,
            'scored': self.scored,
        }
