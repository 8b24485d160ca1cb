"""Workspace preparation: private sparse copy and read-only loop attachment.

Both checks register their release on the validation context as soon as the
resource exists, so the loop device is detached and the copy removed on every
exit path.
"""

from loguru import logger

from image_pipeline.exceptions import CommandError
from image_pipeline.validation import CheckRecord, ImageCheck, ValidationContext

COPY_NAME = "image.raw"


class SparseCopyCheck(ImageCheck):
    """Copy the image into the private workspace, preserving holes."""

    def __init__(self, name: str = "sparse_copy", is_critical: bool = True):
        super().__init__(name, is_critical)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        workspace = context.ensure_workspace()
        copy_path = workspace / COPY_NAME

        logger.info("Copying image (this may take a minute)...")
        try:
            context.tools.sparse_copy(context.image_path, copy_path)
        except CommandError as e:
            logger.debug("Sparse copy failed: {}", e)
            return [self.failed("Failed to create sparse copy of image")]

        context.copy_path = copy_path
        return [self.passed("Image copied to private workspace")]


class LoopAttachCheck(ImageCheck):
    """Attach the copy read-only with partition scanning."""

    def __init__(self, name: str = "loop_attach", is_critical: bool = True):
        super().__init__(name, is_critical)

    def _execute(self, context: ValidationContext) -> list[CheckRecord]:
        if context.copy_path is None:
            return [self.failed("No image copy to attach")]

        try:
            device = context.tools.attach_readonly(context.copy_path)
        except CommandError as e:
            logger.debug("losetup failed: {}", e)
            return [self.failed("losetup failed, could not attach loop device")]

        context.loop_device = device
        context.on_close(context.tools.detach, device)
        logger.debug("Loop device: {}", device)
        return [self.passed("Loop device attached read-only with partition scan")]
