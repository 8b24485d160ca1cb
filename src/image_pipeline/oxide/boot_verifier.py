"""Boot verification from the instance's serial console.

Two activities run while an instance boots:

- the primary loop fetches the full console transcript each round, saves it,
  and decides the outcome (success marker, failure marker, terminal run
  state, or timeout once the rounds are exhausted);
- a background watcher polls the run state on its own cadence and logs
  transitions for the operator. It never decides the outcome.

The watcher is signalled and joined before ``verify`` returns.
"""

import threading
import time
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from image_pipeline.constants import BOOT_FAILURE_MARKERS, BOOT_SUCCESS_MARKER
from image_pipeline.exceptions import RemoteCommandError

from .client import OxideClient
from .models import InstanceState


class BootOutcome(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class BootPolicy(BaseModel):
    """Polling budget and transcript markers."""

    rounds: int = 40
    interval_s: float = 15.0
    success_marker: str = BOOT_SUCCESS_MARKER
    failure_markers: tuple[str, ...] = BOOT_FAILURE_MARKERS
    watch_rounds: int = 60
    watch_interval_s: float = 10.0


class BootResult(BaseModel):
    """The single decision of one ``verify`` call."""

    model_config = {"use_enum_values": True}

    outcome: BootOutcome
    rounds: int
    elapsed_s: float
    reason: str
    last_state: InstanceState | None = None
    watched_state: InstanceState | None = None
    transcript_path: str


def classify_transcript(text: str, success_marker: str, failure_markers: tuple[str, ...]) -> BootOutcome | None:
    """Decide from one transcript snapshot.

    The success marker is checked first: a snapshot holding both a success
    and a failure marker counts as a successful boot.
    """
    if success_marker in text:
        return BootOutcome.PASSED
    if any(marker in text for marker in failure_markers):
        return BootOutcome.FAILED
    return None


class InstanceStateWatcher(threading.Thread):
    """Background thread logging run state transitions of one instance.

    Ends on its own after observing running, failed or stopped, after
    ``rounds`` polls, or as soon as ``stop()`` is called.
    """

    FINAL_STATES = (InstanceState.RUNNING, InstanceState.FAILED, InstanceState.STOPPED)

    def __init__(self, client: OxideClient, instance: str, rounds: int, interval_s: float):
        super().__init__(name=f"state-watcher-{instance}", daemon=True)
        self.client = client
        self.instance = instance
        self.rounds = rounds
        self.interval_s = interval_s
        self.last_seen: InstanceState | None = None
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()

    def run(self) -> None:
        for _ in range(self.rounds):
            if self._stop_event.is_set():
                return
            try:
                state = self.client.get_instance_state(self.instance)
            except RemoteCommandError:
                state = None

            if state is not None and state != self.last_seen:
                logger.info("Instance state -> {}", state)
                self.last_seen = state
                if state in self.FINAL_STATES:
                    return

            if self._stop_event.wait(self.interval_s):
                return


class BootVerifier:
    """Polls the serial console until the instance boots, fails or times out."""

    def __init__(
        self,
        client: OxideClient,
        policy: BootPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the verifier.

        Args:
            client: Platform client for transcript and state queries
            policy: Polling budget and markers
            sleep: Sleep function between rounds (replaceable in tests)
        """
        self.client = client
        self.policy = policy or BootPolicy()
        self.sleep = sleep

    def verify(self, instance: str, transcript_path: Path) -> BootResult:
        """Watch ``instance`` boot and save its console transcript to ``transcript_path``.

        The transcript file exists when this returns, whatever the outcome.

        Returns:
            BootResult: exactly one of passed, failed or timed out
        """
        transcript_path.parent.mkdir(parents=True, exist_ok=True)
        transcript_path.touch()

        watcher = InstanceStateWatcher(self.client, instance, self.policy.watch_rounds, self.policy.watch_interval_s)
        watcher.start()
        try:
            outcome, rounds, reason, last_state = self._poll(instance, transcript_path)
        finally:
            watcher.stop()
            watcher.join()

        result = BootResult(
            outcome=outcome,
            rounds=rounds,
            elapsed_s=rounds * self.policy.interval_s,
            reason=reason,
            last_state=last_state,
            watched_state=watcher.last_seen,
            transcript_path=str(transcript_path),
        )
        logger.debug("Boot verification of {} finished: {}", instance, result.outcome)
        return result

    def _poll(self, instance: str, transcript_path: Path) -> tuple[BootOutcome, int, str, InstanceState | None]:
        policy = self.policy
        text = ""
        state: InstanceState | None = None

        for round_no in range(1, policy.rounds + 1):
            text = self._fetch_transcript(instance, transcript_path, text)

            outcome = classify_transcript(text, policy.success_marker, policy.failure_markers)
            if outcome == BootOutcome.PASSED:
                return outcome, round_no, f"Success marker found after ~{round_no * policy.interval_s:.0f}s", state
            if outcome == BootOutcome.FAILED:
                return outcome, round_no, "Boot failure marker found in console transcript", state

            state = self._instance_state(instance)
            if state is not None and state.is_terminal:
                return BootOutcome.FAILED, round_no, f"Instance entered state '{state}' without successful boot", state

            logger.info("Round {}/{}: waiting for boot... (state: {})", round_no, policy.rounds, state or InstanceState.UNKNOWN)
            if round_no < policy.rounds:
                self.sleep(policy.interval_s)

        return BootOutcome.TIMED_OUT, policy.rounds, "Boot not confirmed within timeout", state

    def _fetch_transcript(self, instance: str, transcript_path: Path, previous: str) -> str:
        """Fetch and save the transcript; a failed fetch keeps the previous text."""
        try:
            data = self.client.serial_history(instance)
        except RemoteCommandError as e:
            logger.debug("Serial history unavailable: {}", e)
            return previous

        transcript_path.write_bytes(data)
        return data.decode("utf-8", errors="replace")

    def _instance_state(self, instance: str) -> InstanceState | None:
        try:
            return self.client.get_instance_state(instance)
        except RemoteCommandError as e:
            logger.debug("Instance state unavailable: {}", e)
            return None
