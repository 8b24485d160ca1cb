"""Tests for setup, tool and workspace checks and the default validator layout."""

from pathlib import Path

from image_pipeline.checks import build_image_validator
from image_pipeline.checks.setup import ImagePresenceCheck, ToolAvailabilityCheck
from image_pipeline.checks.workspace import LoopAttachCheck, SparseCopyCheck
from image_pipeline.settings import Settings
from image_pipeline.validation import Severity


def test_missing_image_fails(make_context, tmp_path):
    records = ImagePresenceCheck().run(make_context(tmp_path / "missing.raw"))

    assert records[0].severity == Severity.FAIL
    assert "Image not found" in records[0].message


def test_present_image_records_size(make_context, tmp_path):
    image = tmp_path / "image.raw"
    image.write_bytes(b"\0" * 4096)
    context = make_context(image)

    records = ImagePresenceCheck().run(context)

    assert {record.severity for record in records} == {Severity.INFO}
    assert context.image_size == 4096


def test_tool_availability(fake_runner, make_context, monkeypatch):
    monkeypatch.setattr("image_pipeline.checks.setup.os.access", lambda path, mode: False)
    fake_runner.tools = {"sgdisk", "cp", "hivexget"}

    records = ToolAvailabilityCheck(("sgdisk", "losetup", "cp")).run(make_context())

    by_message = {record.message.split()[0]: record.severity for record in records}
    assert by_message["sgdisk"] == Severity.PASS
    assert by_message["losetup"] == Severity.FAIL
    assert by_message["ntfs-3g"] == Severity.WARN
    assert by_message["hivexget"] == Severity.PASS


def test_ntfs_found_outside_path(fake_runner, make_context, monkeypatch):
    monkeypatch.setattr("image_pipeline.checks.setup.os.access", lambda path, mode: str(path) == "/sbin/mount.ntfs-3g")

    records = ToolAvailabilityCheck(()).run(make_context())

    assert records[0].severity == Severity.PASS
    assert records[0].message.startswith("ntfs-3g")


def test_sparse_copy_and_attach(fake_runner, make_context, tmp_path):
    fake_runner.script(["losetup", "-Pr"], stdout="/dev/loop9\n")
    context = make_context()

    copy_records = SparseCopyCheck().run(context)
    attach_records = LoopAttachCheck().run(context)

    assert copy_records[0].severity == Severity.PASS
    assert attach_records[0].severity == Severity.PASS
    assert context.loop_device == "/dev/loop9"
    # Records never name the device or the workspace
    assert "/dev/loop9" not in attach_records[0].message
    assert str(context.workspace) not in copy_records[0].message

    context.close()
    assert fake_runner.calls[-1][:2] == ["losetup", "-d"]


def test_failed_copy(fake_runner, make_context):
    fake_runner.script(["cp"], returncode=1, stderr="No space left on device")
    context = make_context()

    records = SparseCopyCheck().run(context)

    assert records[0].severity == Severity.FAIL
    assert context.copy_path is None


def test_default_validator_sections(fake_runner, tmp_path):
    settings = Settings(_env_file=None, validate_tmp_dir=tmp_path)

    validator = build_image_validator(settings, fake_runner)

    assert validator.get_section_names() == ["setup", "tools", "workspace", "partition_table", "filesystem", "boot_config"]
    assert validator.get_section("filesystem").get_check_names()[0] == "os_partition_mount"


def test_missing_image_aborts_before_any_tool_runs(fake_runner, tmp_path):
    validator = build_image_validator(Settings(_env_file=None, validate_tmp_dir=tmp_path), fake_runner)

    report = validator.validate(Path(tmp_path / "missing.raw"))

    assert report.aborted is True
    assert report.failed == 1
    assert report.exit_code == 1
    assert fake_runner.calls == []
