"""Tests for the upload-and-boot procedure."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from image_pipeline.exceptions import RemoteCommandError
from image_pipeline.oxide import (
    BootOutcome,
    BootResult,
    BootVerifier,
    ExternalIp,
    OxideClient,
    RemoteTester,
)
from image_pipeline.validation import Severity


@pytest.fixture
def image(tmp_path: Path) -> Path:
    path = tmp_path / "windows-server-2022.raw"
    path.write_bytes(b"\0" * 1024)
    return path


def make_client() -> Mock:
    client = Mock(spec=OxideClient)
    client.project = "image-tests"
    client.binary = "oxide"
    client.available.return_value = True
    client.check_access.return_value = True
    client.view_instance.return_value = {"name": "vm", "run_state": "running"}
    client.external_ips.return_value = [ExternalIp(ip="203.0.113.7", kind="ephemeral")]
    return client


def make_verifier(outcome: BootOutcome) -> Mock:
    verifier = Mock(spec=BootVerifier)
    verifier.verify.return_value = BootResult(
        outcome=outcome,
        rounds=2,
        elapsed_s=30.0,
        reason="Success marker found after ~30s" if outcome == BootOutcome.PASSED else "Boot not confirmed within timeout",
        transcript_path="serial.log",
    )
    return verifier


def severities(report) -> list[str]:
    return [record.severity for record in report.records]


class TestRemoteTester:
    def test_successful_run(self, image, tmp_path):
        client = make_client()
        tester = RemoteTester(client, make_verifier(BootOutcome.PASSED), output_dir=tmp_path)

        report = tester.run("2022", image, datestamp="20250101")

        assert report.exit_code == 0
        assert report.boot_outcome == BootOutcome.PASSED
        assert report.resources.instance == "win-server-2022-20250101-test"
        client.import_disk.assert_called_once_with(image, report.resources)
        client.create_instance.assert_called_once()
        details = json.loads((tmp_path / "win-server-2022-20250101-test.json").read_text())
        assert details["name"] == "vm"
        assert any("ssh oxide@203.0.113.7" in record.message for record in report.records)
        assert report.summary_line.startswith("remote-test: ")

    def test_upload_failure_ends_run(self, image, tmp_path):
        client = make_client()
        client.import_disk.side_effect = RemoteCommandError(["oxide"], 1, "upload interrupted")
        verifier = make_verifier(BootOutcome.PASSED)

        report = RemoteTester(client, verifier, output_dir=tmp_path).run("2022", image, datestamp="20250101")

        assert report.exit_code == 1
        client.create_instance.assert_not_called()
        verifier.verify.assert_not_called()
        assert severities(report)[-1] == Severity.FAIL

    def test_missing_image_fails_preflight(self, tmp_path):
        client = make_client()

        report = RemoteTester(client, make_verifier(BootOutcome.PASSED), output_dir=tmp_path).run("2022", tmp_path / "none.raw")

        assert report.failed == 1
        assert "Output image not found" in report.records[-1].message
        client.import_disk.assert_not_called()

    def test_unreachable_project_fails_preflight(self, image, tmp_path):
        client = make_client()
        client.check_access.return_value = False

        report = RemoteTester(client, make_verifier(BootOutcome.PASSED), output_dir=tmp_path).run("2022", image)

        assert report.failed == 1
        assert "oxide auth login" in report.records[-1].message

    def test_timeout_counts_as_failure(self, image, tmp_path):
        tester = RemoteTester(make_client(), make_verifier(BootOutcome.TIMED_OUT), output_dir=tmp_path)

        report = tester.run("2022", image, datestamp="20250101")

        assert report.boot_outcome == BootOutcome.TIMED_OUT
        assert report.exit_code == 1

    def test_existing_image_skips_upload(self, tmp_path):
        client = make_client()
        tester = RemoteTester(client, make_verifier(BootOutcome.PASSED), output_dir=tmp_path)

        report = tester.run("2022", None, image_name="golden-2022", datestamp="20250101")

        client.import_disk.assert_not_called()
        assert report.resources.image == "golden-2022"
        assert report.exit_code == 0

    def test_version_from_iso_name(self, image, tmp_path):
        tester = RemoteTester(make_client(), make_verifier(BootOutcome.PASSED), output_dir=tmp_path)

        report = tester.run(None, image, iso_path=Path("isos/windows-server-2019-eval.iso"), datestamp="20250101")

        assert report.resources.version == "2019"

    def test_unknown_version_warns(self, image, tmp_path):
        tester = RemoteTester(make_client(), make_verifier(BootOutcome.PASSED), output_dir=tmp_path)

        report = tester.run(None, image, iso_path=Path("custom.iso"), datestamp="20250101")

        assert report.resources.version == "unknown"
        assert report.warnings == 1
        assert report.exit_code == 0
