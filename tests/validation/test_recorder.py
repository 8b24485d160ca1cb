"""Tests for CheckRecorder."""

from image_pipeline.validation import CheckRecorder, Severity


def test_records_carry_current_section():
    recorder = CheckRecorder("remote_test")

    recorder.start_section("preflight", "1. Pre-flight")
    recorder.passed("config loaded")
    recorder.start_section("upload", "2. Upload")
    recorder.failed("upload failed")

    assert [(record.section, record.severity) for record in recorder.records] == [
        ("preflight", Severity.PASS),
        ("upload", Severity.FAIL),
    ]
    assert recorder.failures == 1


def test_record_line_uses_severity_tag():
    recorder = CheckRecorder("remote_test")

    record = recorder.warning("could not extract year")

    assert record.line == "[WARN] could not extract year"
    assert recorder.info("x").line == "[INFO] x"
