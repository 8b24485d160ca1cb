"""Shared fixtures: a scripted command runner and validation contexts around it."""

from pathlib import Path

import pytest

from image_pipeline.commands import CommandResult
from image_pipeline.exceptions import CommandError
from image_pipeline.system import BlockDeviceTools, HiveReader
from image_pipeline.validation import ValidationContext


class FakeRunner:
    """Command runner returning scripted results.

    Responses are keyed by a command prefix; the longest matching prefix wins.
    Unscripted commands succeed with empty output.
    """

    def __init__(self, tools: tuple[str, ...] = (), use_sudo: bool = False):
        self.tools = set(tools)
        self.use_sudo = use_sudo
        self.calls: list[list[str]] = []
        self.responses: dict[tuple[str, ...], CommandResult] = {}

    def script(self, prefix: list[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[tuple(prefix)] = CommandResult(args=prefix, returncode=returncode, stdout=stdout, stderr=stderr)

    def run(self, args: list[str], *, privileged: bool = False, check: bool = False, capture: bool = True) -> CommandResult:
        self.calls.append(list(args))
        matches = [prefix for prefix in self.responses if tuple(args[: len(prefix)]) == prefix]
        if matches:
            scripted = self.responses[max(matches, key=len)]
            result = CommandResult(args=list(args), returncode=scripted.returncode, stdout=scripted.stdout, stderr=scripted.stderr)
        else:
            result = CommandResult(args=list(args), returncode=0)
        if check and not result.ok:
            raise CommandError(list(args), result.returncode, result.stderr)
        return result

    def which(self, tool: str) -> str | None:
        return f"/usr/bin/{tool}" if tool in self.tools else None

    def called(self, *prefix: str) -> bool:
        return any(tuple(call[: len(prefix)]) == prefix for call in self.calls)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_context(fake_runner: FakeRunner, tmp_path: Path):
    """Factory for validation contexts over ``fake_runner``, closed after the test."""
    contexts: list[ValidationContext] = []

    def _make(image_path: Path | None = None) -> ValidationContext:
        context = ValidationContext(
            image_path or tmp_path / "image.raw",
            BlockDeviceTools(fake_runner),
            HiveReader(fake_runner),
            tmp_root=tmp_path,
        )
        contexts.append(context)
        return context

    yield _make
    for context in contexts:
        context.close()
