"""Upload an image to the rack, boot it, and verify the boot.

The procedure is linear: pre-flight, upload (disk + snapshot + image), launch
a test instance, verify boot from the serial console, capture access info.
Any failure before the boot check ends the run early. Records use the same
Pass/Fail/Warn/Info taxonomy as the image validator.
"""

import json
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field

from image_pipeline.exceptions import RemoteCommandError
from image_pipeline.validation import CheckRecord, CheckRecorder, Severity, count_severity

from .boot_verifier import BootOutcome, BootVerifier
from .client import OxideClient
from .models import ResourceNames, extract_version


class RemoteTestReport(BaseModel):
    """Records of one upload-and-boot run plus the resources it created."""

    resources: ResourceNames
    records: list[CheckRecord] = Field(default_factory=list)
    boot_outcome: BootOutcome | None = None

    @property
    def passed(self) -> int:
        return count_severity(self.records, Severity.PASS)

    @property
    def failed(self) -> int:
        return count_severity(self.records, Severity.FAIL)

    @property
    def warnings(self) -> int:
        return count_severity(self.records, Severity.WARN)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed > 0 else 0

    @property
    def summary_line(self) -> str:
        return f"remote-test: {self.passed} passed, {self.failed} failed, {self.warnings} warnings"


class InstanceSpec(BaseModel):
    hostname: str | None = None
    disk_size: str = "80GiB"
    memory: str = "8GiB"
    ncpus: int = 2


def resolve_version(version: str | None, iso_path: Path | None, recorder: CheckRecorder) -> str:
    """Use the given version, else the one in the ISO name, else ``unknown`` with a warning."""
    if version:
        return version
    iso_name = iso_path.name if iso_path else ""
    extracted = extract_version(iso_name)
    if extracted is None:
        recorder.warning(f"Could not extract year from ISO name '{iso_name}', using 'unknown'")
        return "unknown"
    return extracted


class RemoteTester:
    """Runs the upload and boot test for one image."""

    def __init__(
        self,
        client: OxideClient,
        verifier: BootVerifier,
        output_dir: Path = Path("."),
        instance_spec: InstanceSpec | None = None,
    ):
        """Initialize the tester.

        Args:
            client: Platform client scoped to the test project
            verifier: Boot verifier used once the instance is launched
            output_dir: Where the serial log and instance JSON are written
            instance_spec: Size of the test instance
        """
        self.client = client
        self.verifier = verifier
        self.output_dir = output_dir
        self.instance_spec = instance_spec or InstanceSpec()

    def plan_resources(self, version: str, datestamp: str | None = None, image_name: str | None = None) -> ResourceNames:
        return ResourceNames.for_version(version, datestamp, image_name)

    def run(
        self,
        version: str | None,
        image_path: Path | None,
        skip_upload: bool = False,
        image_name: str | None = None,
        iso_path: Path | None = None,
        datestamp: str | None = None,
    ) -> RemoteTestReport:
        """Upload ``image_path`` (unless skipped), boot it, and verify the boot.

        Args:
            version: Target version; extracted from ``iso_path`` when None
            image_path: Raw image to upload
            skip_upload: Reuse an existing platform image instead of uploading
            image_name: Existing image to boot (implies ``skip_upload``)
            iso_path: Installation ISO, only used to derive the version
            datestamp: ``YYYYMMDD`` used in resource names; today if None

        Returns:
            RemoteTestReport: records, resources and boot outcome
        """
        recorder = CheckRecorder("remote_test")
        skip_upload = skip_upload or image_name is not None

        recorder.start_section("preflight", "1. Config & pre-flight")
        version = resolve_version(version, iso_path, recorder)
        report = RemoteTestReport(resources=self.plan_resources(version, datestamp, image_name))
        # Share the recorder's list so early returns still carry every record
        report.records = recorder.records
        if not self._preflight(recorder, image_path, skip_upload):
            return report

        names = report.resources
        if image_name:
            recorder.info(f"Using existing image: {names.image}")
        for label, value in (
            ("Version", names.version),
            ("Datestamp", names.datestamp),
            ("Disk name", names.disk),
            ("Snapshot name", names.snapshot),
            ("Image name", names.image),
            ("Instance name", names.instance),
            ("Serial log", names.serial_log),
        ):
            recorder.info(f"{label + ':':<15}{value}")

        recorder.start_section("upload", "2. Upload image (disk + snapshot + image)")
        if skip_upload:
            recorder.info(f"Skipping upload, using existing image '{names.image}'")
        else:
            logger.info("Uploading {}, this may take several minutes...", image_path)
            try:
                self.client.import_disk(image_path, names)
            except RemoteCommandError as e:
                logger.debug("disk import failed: {}", e)
                recorder.failed("oxide disk import failed (see output above)")
                return report
            recorder.passed(f"Image uploaded: disk={names.disk}  snap={names.snapshot}  image={names.image}")

        recorder.start_section("launch", "3. Launch test instance")
        spec = self.instance_spec
        try:
            self.client.create_instance(names, spec.hostname, spec.disk_size, spec.memory, spec.ncpus)
        except RemoteCommandError as e:
            recorder.failed(f"oxide instance from-image failed: {e.stderr or e}")
            return report
        recorder.info(f"Launched instance {names.instance}")

        recorder.start_section("boot", "4. Poll serial console")
        serial_log = self.output_dir / names.serial_log
        boot = self.verifier.verify(names.instance, serial_log)
        report.boot_outcome = boot.outcome
        if boot.outcome == BootOutcome.PASSED:
            recorder.passed(f"{boot.reason}, instance booted successfully")
        elif boot.outcome == BootOutcome.FAILED:
            recorder.failed(f"{boot.reason}, see {serial_log}")
        else:
            recorder.failed(f"{boot.reason}, serial log saved to {serial_log}")
        if boot.outcome != BootOutcome.TIMED_OUT:
            recorder.info(f"Serial log saved to {serial_log}")

        recorder.start_section("access", "5. Access info")
        self._capture_access_info(recorder, names)
        return report

    def _preflight(self, recorder: CheckRecorder, image_path: Path | None, skip_upload: bool) -> bool:
        if not self.client.project:
            recorder.failed("No project configured (set IMAGE_PIPELINE_OXIDE_PROJECT)")
            return False
        recorder.passed(f"Config loaded (project: {self.client.project})")

        if not self.client.available():
            recorder.failed(f"{self.client.binary} CLI not found, install it or add it to PATH")
            return False
        recorder.passed(f"{self.client.binary} CLI found")

        if not self.client.check_access():
            recorder.failed(f"{self.client.binary} CLI cannot reach project '{self.client.project}', run: oxide auth login")
            return False
        recorder.passed(f"{self.client.binary} CLI authenticated to project '{self.client.project}'")

        if skip_upload:
            return True
        if image_path is None or not image_path.is_file() or image_path.stat().st_size == 0:
            recorder.failed(f"Output image not found or empty: {image_path}")
            return False
        recorder.passed(f"Output image found: {image_path} ({image_path.stat().st_size // (1024 * 1024)} MiB)")
        return True

    def _capture_access_info(self, recorder: CheckRecorder, names: ResourceNames) -> None:
        project = self.client.project
        instance_json = self.output_dir / f"{names.instance}.json"
        try:
            details = self.client.view_instance(names.instance)
            instance_json.write_text(json.dumps(details, indent=2))
            recorder.info(f"Instance details saved to {instance_json}")
        except (RemoteCommandError, OSError) as e:
            logger.debug("Could not save instance details: {}", e)
            recorder.info(f"Instance details unavailable for {names.instance}")

        try:
            addresses = self.client.external_ips(names.instance)
        except RemoteCommandError as e:
            logger.debug("Could not list external IPs: {}", e)
            addresses = []

        for address in addresses:
            recorder.info(f"External IP: {address.ip}" + (f" ({address.kind})" if address.kind else ""))
            recorder.info(f"To SSH:            ssh oxide@{address.ip}")
        if not addresses:
            recorder.info(f"No external IPs found (add one: oxide instance external-ip add -p {project} -i {names.instance})")

        recorder.info(f"To connect serial: oxide instance serial console -p {project} -i {names.instance}")
