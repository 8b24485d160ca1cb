"""Tests for validation sections."""

from image_pipeline.validation import CheckRecord, ImageCheck, SectionStatus, Severity, ValidationContext, ValidationSection


class ScriptedCheck(ImageCheck):
    """Check returning a fixed list of severities."""

    def __init__(self, name: str, severities: list[Severity], is_critical: bool = False, stop: bool = False):
        super().__init__(name, is_critical)
        self.severities = severities
        self.stop = stop
        self.execute_called = False

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        self.execute_called = True
        if self.stop:
            return [self.stop_section(f"{self.name} cannot proceed")]
        records = []
        for severity in self.severities:
            records.append(self._record(severity, f"{self.name} {severity}"))
        return records


class TestValidationSection:
    """Test ValidationSection class."""

    def test_section_initialization(self):
        section = ValidationSection("tools", "1. Tool checks")

        assert section.name == "tools"
        assert section.description == "1. Tool checks"
        assert section.checks == []

    def test_add_check_is_fluent(self):
        section = ValidationSection("tools", "Tools")
        check = ScriptedCheck("a", [Severity.PASS])

        result = section.add_check(check)

        assert result is section
        assert section.get_check("a") is check
        assert section.get_check("missing") is None

    def test_add_multiple_checks(self):
        section = ValidationSection("tools", "Tools")
        section.add_checks([ScriptedCheck("a", []), ScriptedCheck("b", [])])

        assert section.get_check_names() == ["a", "b"]

    def test_empty_section_succeeds(self, make_context):
        result = ValidationSection("empty", "Empty").execute(make_context())

        assert result.status == SectionStatus.SUCCESS
        assert result.records == []
        assert result.total_checks == 0

    def test_all_checks_run_and_records_keep_order(self, make_context):
        section = ValidationSection("fs", "Filesystem").add_checks(
            [
                ScriptedCheck("a", [Severity.PASS, Severity.INFO]),
                ScriptedCheck("b", [Severity.WARN]),
                ScriptedCheck("c", [Severity.FAIL]),
            ]
        )

        result = section.execute(make_context())

        assert result.status == SectionStatus.FAILED
        assert [record.check_name for record in result.records] == ["a", "a", "b", "c"]
        assert result.passed == 1
        assert result.warnings == 1
        assert result.failed == 1
        assert result.executed_checks == 3
        assert result.execution_time_ms is not None

    def test_warnings_do_not_fail_the_section(self, make_context):
        section = ValidationSection("fs", "Filesystem").add_check(ScriptedCheck("a", [Severity.WARN, Severity.PASS]))

        result = section.execute(make_context())

        assert result.status == SectionStatus.SUCCESS

    def test_stop_section_skips_remaining_checks(self, make_context):
        later = ScriptedCheck("later", [Severity.PASS])
        section = ValidationSection("fs", "Filesystem").add_checks(
            [
                ScriptedCheck("mount", [], stop=True),
                later,
            ]
        )

        result = section.execute(make_context())

        assert result.status == SectionStatus.STOPPED
        assert later.execute_called is False
        assert result.failed == 1
        assert result.skipped_checks == 1
        # Skipped checks assert nothing
        assert [record.check_name for record in result.records] == ["mount"]

    def test_critical_failure_aborts(self, make_context):
        later = ScriptedCheck("later", [Severity.PASS])
        section = ValidationSection("setup", "Setup").add_checks(
            [
                ScriptedCheck("image", [Severity.FAIL], is_critical=True),
                later,
            ]
        )

        result = section.execute(make_context())

        assert result.status == SectionStatus.ABORTED
        assert "Critical check 'image' failed" in result.message
        assert later.execute_called is False

    def test_non_critical_failure_continues(self, make_context):
        later = ScriptedCheck("later", [Severity.PASS])
        section = ValidationSection("fs", "Filesystem").add_checks([ScriptedCheck("a", [Severity.FAIL]), later])

        section.execute(make_context())

        assert later.execute_called is True
