"""Tests for image_pipeline.settings.Settings behavior."""

from pathlib import Path
from typing import Any

import pytest

from image_pipeline.settings import Settings, get_settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch):
    """Defaults should be stable even if external env or .env sets values.

    We explicitly delete the variables and bypass .env loading by passing `_env_file=None`.
    """
    for var in [
        "IMAGE_PIPELINE_VERSIONS",
        "IMAGE_PIPELINE_LOG_LEVEL",
        "IMAGE_PIPELINE_OXIDE_PROJECT",
        "IMAGE_PIPELINE_BOOT_ROUNDS",
        "IMAGE_PIPELINE_USE_SUDO",
        "image_pipeline_versions",
    ]:
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None)  # ignore project .env file if present
    assert s.versions == "2022 2025"
    assert s.version_list == ["2022", "2025"]
    assert s.log_level == "INFO"
    assert s.oxide_project is None
    assert s.boot_rounds == 40
    assert s.boot_interval_s == 15.0
    assert s.state_watch_rounds == 60
    assert s.use_sudo is True
    assert s.iso_dir == Path("isos")
    assert s.output_dir == Path("output")


def test_env_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("IMAGE_PIPELINE_VERSIONS", "2019,2022")
    monkeypatch.setenv("IMAGE_PIPELINE_OXIDE_PROJECT", "image-tests")
    monkeypatch.setenv("IMAGE_PIPELINE_BOOT_ROUNDS", "5")
    monkeypatch.setenv("IMAGE_PIPELINE_USE_SUDO", "false")
    s = Settings(_env_file=None)
    assert s.version_list == ["2019", "2022"]
    assert s.oxide_project == "image-tests"
    assert s.boot_rounds == 5
    assert s.use_sudo is False


def test_case_insensitive_env_name(monkeypatch: pytest.MonkeyPatch):
    # lower-case variable name should still be picked up due to case_sensitive=False
    monkeypatch.setenv("image_pipeline_oxide_project", "lower")  # type: ignore[arg-type]
    s = Settings(_env_file=None)
    assert s.oxide_project == "lower"


def test_version_list_drops_duplicates_and_keeps_order():
    s = Settings(_env_file=None, versions="2025 2022, 2025")
    assert s.version_list == ["2025", "2022"]


def test_unattend_overrides_from_json(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("IMAGE_PIPELINE_UNATTEND_OVERRIDES", '{"2016": "unattend/2016"}')
    s = Settings(_env_file=None)
    assert s.unattend_overrides == {"2016": Path("unattend/2016")}


def test_build_argv_is_split_like_a_shell():
    s = Settings(_env_file=None, build_command="bash 'my build.sh' build-image")
    assert s.build_argv == ["bash", "my build.sh", "build-image"]


def test_log_level_normalized():
    assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"


def test_invalid_log_level_rejected():
    with pytest.raises(ValueError):
        Settings(_env_file=None, log_level="verbose")


def test_get_settings_singleton():
    a = get_settings()
    b = get_settings()
    assert a is b


@pytest.mark.parametrize(
    "override,expected",
    [
        ({"instance_ncpus": 4}, 4),
        ({"instance_memory": "16GiB"}, "16GiB"),
    ],
)
def test_direct_instantiation_with_overrides(override: dict[str, Any], expected: Any):
    s = Settings(_env_file=None, **override)
    key = next(iter(override.keys()))
    assert getattr(s, key) == expected
