"""Groups of checks and the run orchestrator"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from benchaudit.models import Summary
from benchaudit.controls.check import Check, CHECK_TYPE_SKIP
from benchaudit.controls.constraints import DefinedConstraints, constraints_satisfied

logger = logging.getLogger(__name__)


@dataclass
class Group:
    """A collection of related checks with running totals"""
    id: str
    text: str = ''
    type: str = ''
    constraints: Dict[str, List[str]] = field(default_factory=dict)
    checks: List[Check] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)

    def is_skipped(self, defined_constraints: DefinedConstraints) -> bool:
        """A skipped group turns every contained check into type skip"""
        if self.type == CHECK_TYPE_SKIP:
            return True
        return not constraints_satisfied(self.constraints, defined_constraints)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'section': self.id,
            'desc': self.text,
            'pass': self.summary.pass_,
            'fail': self.summary.fail,
            'warn': self.summary.warn,
            'info': self.summary.info,
            'results': [check.to_dict() for check in self.checks],
        }


@dataclass
class Controls:
    """
    A loaded benchmark definition.

    ``groups`` holds the definition as loaded. A run rewrites the result
    fields of the checks it runs, and ``run_group`` also refills the summary
    of each group it runs. Groups and checks are never added, removed or
    reordered. ``results`` holds the groups of the last run, reduced to the
    checks that were run, for reporters.
    """
    id: str = ''
    text: str = ''
    groups: List[Group] = field(default_factory=list)
    defined_constraints: DefinedConstraints = field(default_factory=dict)
    custom_configs: Tuple = ()
    summary: Summary = field(default_factory=Summary)
    results: List[Group] = field(default_factory=list)

    def run_group(self, *group_ids: str) -> Summary:
        """
        Run every check of the selected groups.

        Args:
            group_ids: Group IDs to run; all groups when none are given

        Returns:
            Summary of the run
        """
        self._start_run()
        wanted = set(group_ids)

        for group in self.groups:
            if wanted and group.id not in wanted:
                continue

            group.summary.reset()
            skip = group.is_skipped(self.defined_constraints)
            if skip:
                logger.debug(f"Group {group.id} is skipped")

            for check in group.checks:
                self._run_check(check, skip)
                group.summary.add(check.state)
            self.results.append(group)

        logger.info(f"Run finished: {self.summary}")
        return replace(self.summary)

    def run_checks(self, *check_ids: str) -> Summary:
        """
        Run the selected checks.

        Results are collected in reduced groups that keep the identity and
        description of the group each check came from.

        Args:
            check_ids: Check IDs to run; all checks when none are given

        Returns:
            Summary of the run
        """
        self._start_run()
        wanted = set(check_ids)
        reduced: Dict[str, Group] = {}

        for group in self.groups:
            skip: Optional[bool] = None
            for check in group.checks:
                if wanted and check.id not in wanted:
                    continue

                if skip is None:
                    skip = group.is_skipped(self.defined_constraints)
                self._run_check(check, skip)

                target = reduced.get(group.id)
                if target is None:
                    target = Group(id=group.id, text=group.text, type=group.type,
                                   constraints=group.constraints)
                    reduced[group.id] = target
                    self.results.append(target)
                target.checks.append(check)
                target.summary.add(check.state)

        logger.info(f"Run finished: {self.summary}")
        return replace(self.summary)

    def _start_run(self) -> None:
        self.summary.reset()
        self.results = []

    def _run_check(self, check: Check, skip: bool) -> None:
        check.custom_configs = self.custom_configs
        state = check.run(self.defined_constraints, skip=skip)
        logger.debug(f"Check {check.id}: {state}")
        self.summary.add(state)

    @property
    def check_count(self) -> int:
        return sum(len(group.checks) for group in self.groups)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view of the last run"""
        return {
            'id': self.id,
            'text': self.text,
            'tests': [group.to_dict() for group in self.results],
            'total_pass': self.summary.pass_,
            'total_fail': self.summary.fail,
            'total_warn': self.summary.warn,
            'total_info': self.summary.info,
        }
