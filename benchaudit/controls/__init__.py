"""Benchmark definitions, checks and the run orchestrator"""

from benchaudit.controls.check import AuditableUnit, Check, SubCheck, CHECK_TYPE_MANUAL, CHECK_TYPE_SKIP
from benchaudit.controls.constraints import (
    clean_ids,
    constraints_satisfied,
    is_sub_check_compatible,
    parse_defined_constraints,
    select_sub_check,
)
from benchaudit.controls.group import Controls, Group
from benchaudit.controls.loader import DefinitionError, DefinitionLoader, load_controls

__all__ = [
    'AuditableUnit',
    'Check',
    'SubCheck',
    'CHECK_TYPE_MANUAL',
    'CHECK_TYPE_SKIP',
    'clean_ids',
    'constraints_satisfied',
    'is_sub_check_compatible',
    'parse_defined_constraints',
    'select_sub_check',
    'Controls',
    'Group',
    'DefinitionError',
    'DefinitionLoader',
    'load_controls',
]
