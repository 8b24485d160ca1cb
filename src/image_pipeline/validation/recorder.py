"""Record accumulator for procedural checks.

Components that are a linear procedure rather than a set of independent
checks (the remote boot test) append records through a ``CheckRecorder``
instead of sharing global counters.
"""

from loguru import logger

from .enums import Severity
from .models import CheckRecord, count_severity


class CheckRecorder:
    """Collects records in order and logs each one as it is added."""

    def __init__(self, check_name: str):
        self.check_name = check_name
        self.section: str | None = None
        self.records: list[CheckRecord] = []

    def start_section(self, name: str, title: str) -> None:
        self.section = name
        logger.info("==> {}", title)

    def add(self, severity: Severity, message: str) -> CheckRecord:
        record = CheckRecord(severity=severity, message=message, check_name=self.check_name, section=self.section)
        self.records.append(record)
        level = {Severity.FAIL: "ERROR", Severity.WARN: "WARNING"}.get(severity, "INFO")
        logger.log(level, record.line)
        return record

    def passed(self, message: str) -> CheckRecord:
        return self.add(Severity.PASS, message)

    def failed(self, message: str) -> CheckRecord:
        return self.add(Severity.FAIL, message)

    def warning(self, message: str) -> CheckRecord:
        return self.add(Severity.WARN, message)

    def info(self, message: str) -> CheckRecord:
        return self.add(Severity.INFO, message)

    @property
    def failures(self) -> int:
        return count_severity(self.records, Severity.FAIL)
