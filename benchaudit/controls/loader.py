"""
Loading of benchmark definitions.

A definition is a YAML document with groups of checks. Audits are turned into
Auditer objects through an AuditTypeRegistry while the document is loaded, so
an unknown audit type is reported before anything runs.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from benchaudit.audit.registry import AuditTypeError, AuditTypeRegistry
from benchaudit.evaluation.testset import Compare, TestItem, TestSet
from benchaudit.controls.check import AuditableUnit, Check, SubCheck
from benchaudit.controls.constraints import parse_defined_constraints
from benchaudit.controls.group import Controls, Group

logger = logging.getLogger(__name__)


class DefinitionError(Exception):
    """Exception raised when a benchmark definition cannot be loaded"""
    pass


_NUMERIC_TAGS = ('tag:yaml.org,2002:int', 'tag:yaml.org,2002:float')


class DefinitionYamlLoader(yaml.SafeLoader):
    """Safe loader that keeps numbers as written, so ``1.10`` and ``0600`` stay strings"""
    pass


DefinitionYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _NUMERIC_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _to_str(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1')
    return bool(value)


class DefinitionLoader:
    """Builds Controls from definition documents"""

    def __init__(self, registry: Optional[AuditTypeRegistry] = None, *custom_configs):
        """
        Args:
            registry: Registry used to build audits; the built-in types when omitted
            custom_configs: Objects handed to every audit when it runs
        """
        self.registry = registry or AuditTypeRegistry.with_defaults()
        self.custom_configs = tuple(custom_configs)

    def load_file(self, path: str, definitions: Sequence[str] = ()) -> Controls:
        """
        Load a definition file

        Raises:
            DefinitionError: If the file cannot be read or is invalid
        """
        try:
            text = Path(path).read_text(encoding='utf-8')
        except OSError as e:
            raise DefinitionError(f"Unable to read definition file {path}: {e}") from e

        logger.info(f"Loading definitions from {path}")
        return self.load(text, definitions)

    def load(self, text: str, definitions: Sequence[str] = ()) -> Controls:
        """
        Load a definition document

        Args:
            text: YAML document
            definitions: ``key=value`` strings describing the environment

        Returns:
            Controls ready to run

        Raises:
            DefinitionError: If the YAML is invalid or the document has the wrong shape
        """
        try:
            data = yaml.load(text, Loader=DefinitionYamlLoader)
        except yaml.YAMLError as e:
            raise DefinitionError(f"failed to parse YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise DefinitionError("definition must be a mapping")

        groups = [self._build_group(item) for item in self._as_list(data.get('groups'), 'groups')]

        controls = Controls(
            id=_to_str(data.get('id')),
            text=_to_str(data.get('text')),
            groups=groups,
            defined_constraints=parse_defined_constraints(definitions),
            custom_configs=self.custom_configs,
        )
        logger.debug(f"Loaded {len(groups)} groups with {controls.check_count} checks")
        return controls

    def _build_group(self, data: Any) -> Group:
        if not isinstance(data, dict):
            raise DefinitionError(f"group must be a mapping, got {type(data).__name__}")

        group_id = _to_str(data.get('id'))
        return Group(
            id=group_id,
            text=_to_str(data.get('text')),
            type=_to_str(data.get('type')),
            constraints=self._build_constraints(data.get('constraints'), f"group {group_id}"),
            checks=[self._build_check(item) for item in self._as_list(data.get('checks'), 'checks')],
        )

    def _build_check(self, data: Any) -> Check:
        if not isinstance(data, dict):
            raise DefinitionError(f"check must be a mapping, got {type(data).__name__}")

        check_id = _to_str(data.get('id'))
        sub_checks = [
            self._build_sub_check(item, check_id)
            for item in self._as_list(data.get('sub_checks'), f"sub_checks of check {check_id}")
        ]

        # sub-checks replace the check's own audit, which may then be left out
        if sub_checks:
            unit = AuditableUnit(
                audit=data.get('audit'),
                audit_type=_to_str(data.get('audit_type')),
                tests=self._build_tests(data.get('tests'), check_id),
                remediation=_to_str(data.get('remediation')),
            )
        else:
            unit = self._build_unit(data, check_id)

        return Check(
            id=check_id,
            text=_to_str(data.get('text')),
            type=_to_str(data.get('type')),
            scored=_to_bool(data.get('scored'), False),
            use_multiple_values=_to_bool(data.get('use_multiple_values'), False),
            unit=unit,
            sub_checks=sub_checks,
            custom_configs=self.custom_configs,
        )

    def _build_sub_check(self, data: Any, check_id: str) -> SubCheck:
        if not isinstance(data, dict):
            raise DefinitionError(f"sub check of check {check_id} must be a mapping")

        # "check:" may hold the fields or be an empty key next to them
        body = data.get('check')
        if body is None:
            body = data
        if not isinstance(body, dict):
            raise DefinitionError(f"sub check of check {check_id} must be a mapping")

        return SubCheck(
            unit=self._build_unit(body, check_id),
            constraints=self._build_constraints(body.get('constraints'), f"check {check_id}"),
        )

    def _build_unit(self, data: Dict[str, Any], check_id: str) -> AuditableUnit:
        audit = data.get('audit')
        audit_type = _to_str(data.get('audit_type'))
        if isinstance(audit, (str, bool, int, float)):
            audit = _to_str(audit)

        try:
            auditer = self.registry.create(audit_type, audit)
        except AuditTypeError as e:
            raise DefinitionError(f"check {check_id}: {e}") from e

        return AuditableUnit(
            audit=audit if audit is not None else '',
            audit_type=audit_type,
            auditer=auditer,
            tests=self._build_tests(data.get('tests'), check_id),
            remediation=_to_str(data.get('remediation')),
        )

    def _build_tests(self, data: Any, check_id: str) -> Optional[TestSet]:
        if data is None:
            return None
        if not isinstance(data, dict):
            raise DefinitionError(f"tests of check {check_id} must be a mapping")

        items = []
        for item in self._as_list(data.get('test_items'), f"test_items of check {check_id}"):
            if not isinstance(item, dict):
                raise DefinitionError(f"test item of check {check_id} must be a mapping")

            compare = item.get('compare') or {}
            if not isinstance(compare, dict):
                raise DefinitionError(f"compare of check {check_id} must be a mapping")

            items.append(TestItem(
                flag=_to_str(item.get('flag')),
                path=_to_str(item.get('path')),
                set=_to_bool(item.get('set'), True),
                compare=Compare(op=_to_str(compare.get('op')), value=_to_str(compare.get('value'))),
            ))

        return TestSet(test_items=items, bin_op=_to_str(data.get('bin_op')))

    @staticmethod
    def _build_constraints(data: Any, owner: str) -> Dict[str, List[str]]:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise DefinitionError(f"constraints of {owner} must be a mapping")

        constraints = {}
        for key, values in data.items():
            if not isinstance(values, list):
                values = [values]
            constraints[_to_str(key)] = [_to_str(value) for value in values]
        return constraints

    @staticmethod
    def _as_list(data: Any, name: str) -> List[Any]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise DefinitionError(f"{name} must be a list")
        return data


def load_controls(text: str, definitions: Sequence[str] = (),
                  registry: Optional[AuditTypeRegistry] = None, *custom_configs) -> Controls:
    """Load a definition document with a one-off DefinitionLoader"""
    return DefinitionLoader(registry, *custom_configs).load(text, definitions)
