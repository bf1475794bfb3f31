"""Tests for loading benchmark definitions"""

import pytest

from benchaudit.audit.file_search import FileSearchAudit
from benchaudit.audit.shell import ShellAudit
from benchaudit.controls.loader import DefinitionError, DefinitionLoader, load_controls
from benchaudit.models import State


pytestmark = pytest.mark.unit


SUB_CHECK_DEFINITION = """
id: 5
text: "Boot settings"
groups:
  - id: 5.1
    text: "Bootloader"
    checks:
      - id: 5.1.1
        text: "Bootloader config permissions"
        scored: true
        sub_checks:
          - check:
              constraints:
                boot:
                  - grub
                  - also valid if grub is defined
              audit_type: static
              audit: {output: "600"}
              tests:
                test_items:
                  - compare: {op: bitmask, value: 0600}
              remediation: "chmod 600 /boot/grub/grub.cfg"
          - check:
            constraints:
              boot: [lilo]
            audit_type: static
            audit: {output: "644"}
            tests:
              test_items:
                - compare: {op: eq, value: 644}
            remediation: "chmod 644 /etc/lilo.conf"
"""


class TestValues:
    """Test how scalar values are read"""

    def test_numeric_ids_stay_strings(self, registry):
        """IDs written as numbers keep their text"""
        controls = load_controls("""
id: 1
groups:
  - id: 1.10
    checks:
      - id: 1.10.1
""", (), registry)
        assert controls.id == '1'
        assert controls.groups[0].id == '1.10'
        assert controls.groups[0].checks[0].id == '1.10.1'

    def test_compare_values_are_text(self, registry, sample_definition):
        """Booleans and numbers in compare values become their text"""
        controls = load_controls(sample_definition, (), registry)
        first, _, third, _ = controls.groups[0].checks
        assert first.unit.tests.test_items[0].compare.value == 'false'
        assert third.unit.tests.test_items[0].compare.value == '443'

    def test_octal_looking_values_are_kept(self, registry):
        """0600 stays 0600"""
        controls = load_controls(SUB_CHECK_DEFINITION, (), registry)
        item = controls.groups[0].checks[0].sub_checks[0].unit.tests.test_items[0]
        assert item.compare.value == '0600'

    def test_defaults(self, registry):
        """set defaults to true, scored and multiple values to false"""
        controls = load_controls("""
groups:
  - id: "1"
    checks:
      - id: "1.1"
        audit: "echo hi"
        tests:
          test_items:
            - flag: hi
""", (), registry)
        check = controls.groups[0].checks[0]
        assert check.scored is False
        assert check.use_multiple_values is False
        assert check.unit.tests.test_items[0].set is True
        assert check.unit.tests.bin_op == ''

    def test_empty_document(self, registry):
        """An empty document has no groups"""
        controls = load_controls('', (), registry)
        assert controls.groups == []
        assert controls.check_count == 0


class TestAudits:
    """Test audits built while loading"""

    def test_shell_audit_by_default(self, registry):
        """A check without audit_type runs a shell command"""
        controls = load_controls("""
groups:
  - id: "1"
    checks:
      - id: "1.1"
        audit: "ps -ef | grep kubelet"
""", (), registry)
        auditer = controls.groups[0].checks[0].unit.auditer
        assert isinstance(auditer, ShellAudit)
        assert auditer.command == 'ps -ef | grep kubelet'
        assert auditer.timeout == 5

    def test_typed_audit(self, registry, temp_dir):
        """audit_type selects the registered factory"""
        controls = load_controls("""
groups:
  - id: "1"
    checks:
      - id: "1.1"
        audit_type: file_search
        audit:
          path: /etc
          searchTerm: passwd
          searchType: exact
""", (), registry)
        auditer = controls.groups[0].checks[0].unit.auditer
        assert isinstance(auditer, FileSearchAudit)
        assert auditer.search_term == 'passwd'
        assert auditer.search_type == 'exact'

    def test_unknown_audit_type(self, registry):
        """An unregistered audit type fails the load"""
        with pytest.raises(DefinitionError, match='check 1.1'):
            load_controls("""
groups:
  - id: "1"
    checks:
      - id: "1.1"
        audit_type: ldap
        audit: "anything"
""", (), registry)

    def test_invalid_payload(self, registry):
        """A payload rejected by the factory fails the load"""
        with pytest.raises(DefinitionError):
            load_controls("""
groups:
  - id: "1"
    checks:
      - id: "1.1"
        audit_type: file_search
        audit:
          path: /etc
          perm: "99"
""", (), registry)

    def test_default_registry(self):
        """A loader without a registry knows the built-in types"""
        loader = DefinitionLoader()
        assert 'audit' in loader.registry
        assert 'file_search' in loader.registry
        assert 'text_search' in loader.registry


class TestSubChecks:
    """Test both sub-check layouts"""

    def test_nested_and_sibling_layouts(self, registry):
        """check: may hold the fields or sit next to them"""
        controls = load_controls(SUB_CHECK_DEFINITION, (), registry)
        check = controls.groups[0].checks[0]

        assert len(check.sub_checks) == 2
        assert check.sub_checks[0].constraints == {'boot': ['grub', 'also valid if grub is defined']}
        assert check.sub_checks[1].constraints == {'boot': ['lilo']}
        assert check.sub_checks[1].unit.remediation == 'chmod 644 /etc/lilo.conf'
        assert check.unit.auditer is None

    def test_sub_check_selection_on_run(self, registry):
        """The defined constraints pick the sub-check at run time"""
        controls = load_controls(SUB_CHECK_DEFINITION, ['boot=grub'], registry)
        check = controls.groups[0].checks[0]
        assert check.run(controls.defined_constraints) == State.PASS
        assert check.test_info == ['chmod 600 /boot/grub/grub.cfg']

        assert check.run({'boot': ['lilo']}) == State.PASS
        assert check.test_info == ['chmod 644 /etc/lilo.conf']

        assert check.run({'boot': ['systemd-boot']}) == State.WARN


class TestInvalidDocuments:
    """Test documents with the wrong shape"""

    @pytest.mark.parametrize('text', [
        'groups: [unclosed',
        '- just\n- a list\n',
        'groups: "not a list"',
        'groups:\n  - "not a mapping"',
        'groups:\n  - id: "1"\n    checks: {}',
        'groups:\n  - id: "1"\n    checks:\n      - id: "1.1"\n        tests: [a]',
        'groups:\n  - id: "1"\n    checks:\n      - id: "1.1"\n        tests:\n          test_items: [flag]',
        'groups:\n  - id: "1"\n    constraints: [a]',
    ])
    def test_invalid_definition(self, registry, text):
        """Malformed documents raise DefinitionError"""
        with pytest.raises(DefinitionError):
            load_controls(text, (), registry)

    def test_missing_file(self, temp_dir):
        """An unreadable file raises DefinitionError"""
        with pytest.raises(DefinitionError, match='Unable to read'):
            DefinitionLoader().load_file(f"{temp_dir}/missing.yaml")

    def test_load_file(self, definition_file):
        """A definition file is read from disk"""
        controls = DefinitionLoader().load_file(definition_file, ['platform=ubuntu'])
        assert controls.text == 'Shell Benchmark'
        assert controls.defined_constraints == {'platform': ['ubuntu']}
