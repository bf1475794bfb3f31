"""Tests for groups and the run orchestrator"""

import pytest

from benchaudit.controls.loader import load_controls
from benchaudit.models import State


pytestmark = pytest.mark.integration


@pytest.fixture
def controls(sample_definition, registry):
    return load_controls(sample_definition, ['platform=ubuntu'], registry)


def states(group):
    return {check.id: check.state for check in group.checks}


class TestRunGroup:
    """Test running whole groups"""

    def test_group_with_every_outcome(self, controls):
        """Pass, audit failure, scored test failure and skip"""
        summary = controls.run_group('1.1')

        assert summary.as_tuple() == (1, 2, 0, 1)
        group = controls.results[0]
        assert group.id == '1.1'
        assert states(group) == {
            '1.1.1': State.PASS,
            '1.1.2': State.FAIL,
            '1.1.3': State.FAIL,
            '1.1.4': State.INFO,
        }
        assert group.summary.as_tuple() == (1, 2, 0, 1)

    def test_skipped_group(self, controls):
        """A skip group turns its checks into INFO"""
        summary = controls.run_group('2.1')
        assert summary.as_tuple() == (0, 0, 0, 1)
        assert controls.groups[1].checks[0].state == State.INFO

    def test_all_groups(self, controls):
        """No IDs run every group"""
        summary = controls.run_group()
        assert summary.as_tuple() == (1, 2, 0, 2)
        assert [group.id for group in controls.results] == ['1.1', '2.1']

    def test_unknown_group(self, controls):
        """An unknown group ID runs nothing"""
        assert controls.run_group('9.9').total == 0
        assert controls.results == []

    def test_repeated_runs_give_the_same_summary(self, controls):
        """Counters restart from zero on every run"""
        first = controls.run_group('1.1')
        second = controls.run_group('1.1')
        assert first == second
        assert controls.groups[0].summary.as_tuple() == (1, 2, 0, 1)

    def test_returned_summary_is_a_copy(self, controls):
        """A later run does not change an earlier summary"""
        first = controls.run_group('1.1')
        controls.run_group('2.1')
        assert first.as_tuple() == (1, 2, 0, 1)

    def test_group_constraints_skip_checks(self, registry):
        """A group whose constraints are not satisfied is skipped"""
        controls = load_controls("""
groups:
  - id: "3.1"
    constraints:
      platform: [rhel]
    checks:
      - id: "3.1.1"
        audit_type: static
        audit: {output: "x"}
        tests: {test_items: [{flag: x}]}
        scored: true
""", ['platform=ubuntu'], registry)
        assert controls.run_group().as_tuple() == (0, 0, 0, 1)

        controls.defined_constraints = {'platform': ['rhel']}
        assert controls.run_group().as_tuple() == (1, 0, 0, 0)


class TestRunChecks:
    """Test running checks selected by ID"""

    def test_reduced_groups(self, controls):
        """Only the selected checks are run and reported"""
        summary = controls.run_checks('1.1.1', '2.1.1')

        assert summary.as_tuple() == (1, 0, 0, 1)
        assert [group.id for group in controls.results] == ['1.1', '2.1']
        assert [group.text for group in controls.results] == ['API Server', 'Kubelet']
        assert [c.id for c in controls.results[0].checks] == ['1.1.1']
        assert controls.results[0].summary.as_tuple() == (1, 0, 0, 0)

    def test_definition_groups_keep_their_checks(self, controls):
        """The loaded groups keep all their checks; only run checks get results"""
        controls.run_checks('1.1.3')
        assert [len(group.checks) for group in controls.groups] == [4, 1]
        assert controls.groups[0].checks[0].state is None
        assert controls.groups[0].checks[2].state == State.FAIL
        assert controls.groups[0].summary.total == 0

    def test_all_checks(self, controls):
        """No IDs run every check"""
        assert controls.run_checks().as_tuple() == (1, 2, 0, 2)

    def test_check_in_skipped_group(self, controls):
        """Group skip applies to checks selected by ID"""
        controls.run_checks('2.1.1')
        assert controls.results[0].checks[0].state == State.INFO


class TestControlsSerialization:
    """Test the structure handed to reporters"""

    def test_to_dict(self, controls):
        """Totals and groups of the last run"""
        controls.run_group('1.1')
        data = controls.to_dict()

        assert data['id'] == '1'
        assert data['text'] == 'Master Node Security Configuration'
        assert (data['total_pass'], data['total_fail'], data['total_warn'], data['total_info']) == (1, 2, 0, 1)
        assert len(data['tests']) == 1
        section = data['tests'][0]
        assert section['section'] == '1.1'
        assert section['desc'] == 'API Server'
        assert (section['pass'], section['fail'], section['warn'], section['info']) == (1, 2, 0, 1)
        assert [r['status'] for r in section['results']] == ['PASS', 'FAIL', 'FAIL', 'INFO']

    def test_check_count(self, controls):
        """check_count counts every loaded check"""
        assert controls.check_count == 5


class TestCustomConfigs:
    """Test objects handed to every audit"""

    def test_custom_configs_reach_audits(self, sample_definition, registry):
        """Every executed audit receives the custom configs"""
        marker = {'kubeconfig': '/etc/kubernetes/admin.conf'}
        controls = load_controls(sample_definition, (), registry, marker)
        controls.run_group('1.1')
        audit = controls.groups[0].checks[0].unit.auditer
        assert audit.received_configs == (marker,)
