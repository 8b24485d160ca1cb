"""Component wiring shared by the CLI commands.

Factories build the concrete collaborators from ``Settings`` so commands stay
thin and tests can build the same graph around fakes.
"""

import arrow
from loguru import logger

from image_pipeline.checks import build_image_validator
from image_pipeline.commands import CommandRunner
from image_pipeline.exceptions import PreconditionError
from image_pipeline.oxide import BootPolicy, BootVerifier, InstanceSpec, OxideClient, ProjectCleaner, RemoteTester
from image_pipeline.regression import (
    BuildRunner,
    CleanupAdapter,
    RegressionPipeline,
    RemoteTestAdapter,
    ValidatorDelegate,
    WorkItem,
)
from image_pipeline.settings import Settings


def build_oxide_client(settings: Settings, project: str | None = None, runner: CommandRunner | None = None) -> OxideClient:
    """Create the platform client for ``project`` (the configured project by default).

    Raises:
        PreconditionError: If no project is given or configured
    """
    project = project or settings.oxide_project
    if not project:
        raise PreconditionError("No project configured (set IMAGE_PIPELINE_OXIDE_PROJECT or pass --project)")
    return OxideClient(runner or CommandRunner(), project, settings.oxide_profile, settings.oxide_bin)


def build_boot_policy(settings: Settings) -> BootPolicy:
    return BootPolicy(
        rounds=settings.boot_rounds,
        interval_s=settings.boot_interval_s,
        watch_rounds=settings.state_watch_rounds,
        watch_interval_s=settings.state_watch_interval_s,
    )


def build_remote_tester(settings: Settings, client: OxideClient) -> RemoteTester:
    return RemoteTester(
        client,
        BootVerifier(client, build_boot_policy(settings)),
        output_dir=settings.serial_log_dir,
        instance_spec=InstanceSpec(
            hostname=settings.instance_hostname,
            disk_size=settings.instance_disk_size,
            memory=settings.instance_memory,
            ncpus=settings.instance_ncpus,
        ),
    )


def build_project_cleaner(settings: Settings, client: OxideClient) -> ProjectCleaner:
    return ProjectCleaner(
        client,
        stop_attempts=settings.instance_stop_attempts,
        stop_interval_s=settings.instance_stop_interval_s,
    )


def build_work_items(settings: Settings, versions: list[str] | None = None) -> list[WorkItem]:
    """One work item per version, in order."""
    return [WorkItem.for_version(version, settings.iso_dir, settings.output_dir) for version in versions or settings.version_list]


def build_regression_pipeline(settings: Settings) -> RegressionPipeline:
    """Wire build, validate, remote-test and cleanup collaborators.

    Without a configured project the remote stages are left out and the
    pipeline skips them.
    """
    runner = CommandRunner()
    validator = build_image_validator(settings, CommandRunner(use_sudo=settings.use_sudo))

    remote_tester = cleaner = None
    if settings.oxide_project:
        client = build_oxide_client(settings, runner=runner)
        # One datestamp for the whole run so planned and created names match
        remote_tester = RemoteTestAdapter(build_remote_tester(settings, client), arrow.utcnow().format("YYYYMMDD"))
        cleaner = CleanupAdapter(build_project_cleaner(settings, client))
    else:
        logger.warning("No project configured, remote test and cleanup will be skipped")

    return RegressionPipeline(BuildRunner(runner, settings), ValidatorDelegate(validator), remote_tester, cleaner)
