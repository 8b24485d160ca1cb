"""Remote rack operations: typed CLI client, disk reconciler, boot verification and cleanup."""

from .boot_verifier import BootOutcome, BootPolicy, BootResult, BootVerifier, InstanceStateWatcher, classify_transcript
from .cleanup import CleanupReport, ProjectCleaner
from .client import OxideClient
from .models import DiskState, DiskView, ExternalIp, InstanceState, InstanceView, ResourceNames, extract_version
from .reconciler import DiskReconciler, ReconcileResult, ReconcileStatus
from .remote_test import InstanceSpec, RemoteTester, RemoteTestReport

__all__ = [
    "BootOutcome",
    "BootPolicy",
    "BootResult",
    "BootVerifier",
    "CleanupReport",
    "DiskReconciler",
    "DiskState",
    "DiskView",
    "ExternalIp",
    "InstanceSpec",
    "InstanceState",
    "InstanceStateWatcher",
    "InstanceView",
    "OxideClient",
    "ProjectCleaner",
    "ReconcileResult",
    "ReconcileStatus",
    "RemoteTestReport",
    "RemoteTester",
    "ResourceNames",
    "classify_transcript",
    "extract_version",
]
