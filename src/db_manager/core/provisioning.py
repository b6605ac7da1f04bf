"""
Container provisioning pipeline.

A provisioning run checks that the container name is free, pulls the image,
creates the named volumes, creates the container and starts it. Progress is
reported as a lazy sequence of events ending in exactly one ``Done`` or
``Error``. Resources created before a failure are left in place.
"""

import logging
from enum import Enum
from typing import Iterator, Optional

from .channel import EventStream, run_in_background
from .errors import ContainerRuntimeError, NameConflictError, ProvisioningError
from .events import Building, Done, Error, ProvisioningEvent, Pulling
from .models import MANAGEMENT_LABEL, ContainerSpec
from .runtime import RuntimeClient

logger = logging.getLogger(__name__)

VOLUME_LABELS = {MANAGEMENT_LABEL: "volume"}
CONTAINER_LABELS = {MANAGEMENT_LABEL: "container"}


class ProvisioningState(Enum):
    """States of a single provisioning run."""
    IDLE = "idle"
    CHECKING_CONFLICT = "checking_conflict"
    PULLING = "pulling"
    BUILDING = "building"
    STARTING = "starting"
    DONE = "done"
    ERROR = "error"


class ConflictChecker:
    """Verifies that no resource already uses a name."""

    def __init__(self, runtime: RuntimeClient):
        self._runtime = runtime

    def check_container(self, name: str) -> None:
        """
        Raises:
            NameConflictError: If a container called ``name`` exists
            ContainerRuntimeError: If the inspect call itself fails
        """
        if self._runtime.inspect_container(name) is not None:
            raise NameConflictError(name, "container")

    def check_volume(self, name: str) -> None:
        """
        Raises:
            NameConflictError: If a volume called ``name`` exists
            ContainerRuntimeError: If the inspect call itself fails
        """
        if self._runtime.inspect_volume(name) is not None:
            raise NameConflictError(name, "volume")


class ImagePuller:
    """Pulls an image and maps the runtime's progress stream to Pulling events."""

    def __init__(self, runtime: RuntimeClient):
        self._runtime = runtime

    def pull(self, image: str, tag: str) -> Iterator[Pulling]:
        """
        Pull ``image:tag``.

        Each runtime notification produces one event carrying the progress of
        every layer seen so far. A cached image may produce no notifications;
        a single empty event is emitted in that case.

        Yields:
            Pulling events
        """
        layers: dict[str, float] = {}
        emitted = False

        for progress in self._runtime.pull_image(image, tag):
            # The opening "Pulling from ..." line uses the tag as its id
            if progress.layer_id and progress.layer_id != tag:
                layers[progress.layer_id] = progress.fraction(layers.get(progress.layer_id))
            emitted = True
            yield Pulling(tuple(layers.items()))

        if not emitted:
            yield Pulling()


class VolumeProvisioner:
    """Creates the named volumes a container needs."""

    def __init__(self, runtime: RuntimeClient, checker: ConflictChecker):
        self._runtime = runtime
        self._checker = checker

    def provision(self, volume_mounts: dict[str, str]) -> None:
        """
        Create each volume in turn; the first failure aborts the rest.

        Args:
            volume_mounts: Namespaced volume name -> mount path (path unused)
        """
        for name in volume_mounts:
            self._checker.check_volume(name)
            self._runtime.create_volume(name, VOLUME_LABELS)


class ContainerCreator:
    """Builds the runtime container definition and creates it."""

    def __init__(self, runtime: RuntimeClient):
        self._runtime = runtime

    def create(self, spec: ContainerSpec) -> str:
        """
        Create the container described by ``spec``.

        Returns:
            The runtime-assigned container id
        """
        # A name taken since the conflict check fails server-side (409)
        return self._runtime.create_container(
            name=spec.container_name,
            image=spec.image_ref,
            environment=spec.environment,
            mounts=spec.volume_mounts,
            labels=CONTAINER_LABELS,
        )


class ContainerStarter:
    """Starts a created container."""

    def __init__(self, runtime: RuntimeClient):
        self._runtime = runtime

    def start(self, container_id: str) -> None:
        self._runtime.start_container(container_id)


class ProvisioningRun:
    """
    One execution of the provisioning state machine.

    Iterate it to drive the run. Iteration can happen only once; ``state``
    reflects how far the run got.
    """

    def __init__(self, orchestrator: "ProvisioningOrchestrator", spec: ContainerSpec):
        self.spec = spec
        self.state = ProvisioningState.IDLE
        self.container_id: Optional[str] = None
        self._orchestrator = orchestrator
        self._started = False

    def __iter__(self) -> Iterator[ProvisioningEvent]:
        if self._started:
            raise RuntimeError("A provisioning run can only be iterated once")
        self._started = True
        return self._run()

    def _transition(self, state: ProvisioningState) -> None:
        logger.debug("%s: %s -> %s", self.spec.container_name, self.state.value, state.value)
        self.state = state

    def _run(self) -> Iterator[ProvisioningEvent]:
        spec = self.spec
        steps = self._orchestrator

        try:
            self._transition(ProvisioningState.CHECKING_CONFLICT)
            steps.checker.check_container(spec.container_name)
            for name in spec.volume_mounts:
                steps.checker.check_volume(name)

            self._transition(ProvisioningState.PULLING)
            yield from steps.puller.pull(spec.image, spec.tag)

            self._transition(ProvisioningState.BUILDING)
            yield Building()
            steps.volumes.provision(spec.volume_mounts)
            self.container_id = steps.creator.create(spec)

            self._transition(ProvisioningState.STARTING)
            steps.starter.start(self.container_id)
        except ProvisioningError as e:
            logger.warning("Provisioning %s failed while %s: %s",
                           spec.container_name, self.state.value, e)
            self._transition(ProvisioningState.ERROR)
            yield Error(str(e))
            return
        except Exception as e:
            logger.exception("Unexpected failure provisioning %s", spec.container_name)
            error = ContainerRuntimeError(f"Unexpected runtime failure: {e}", e)
            self._transition(ProvisioningState.ERROR)
            yield Error(str(error))
            return

        self._transition(ProvisioningState.DONE)
        logger.info("Container %s is running (%s)", spec.container_name, self.container_id)
        yield Done(self.container_id)


class ProvisioningOrchestrator:
    """Drives provisioning runs against a shared runtime client."""

    def __init__(self, runtime: RuntimeClient, channel_capacity: int = 5):
        """
        Initialize the orchestrator.

        Args:
            runtime: Shared runtime client
            channel_capacity: Number of undelivered events a background run
                may buffer before it blocks
        """
        self.runtime = runtime
        self.channel_capacity = channel_capacity
        self.checker = ConflictChecker(runtime)
        self.puller = ImagePuller(runtime)
        self.volumes = VolumeProvisioner(runtime, self.checker)
        self.creator = ContainerCreator(runtime)
        self.starter = ContainerStarter(runtime)

    def provision(self, spec: ContainerSpec) -> ProvisioningRun:
        """Create a lazy run for ``spec``; nothing happens until it is iterated."""
        return ProvisioningRun(self, spec)

    def submit(self, spec: ContainerSpec) -> EventStream:
        """
        Start provisioning ``spec`` on a background thread.

        Returns:
            Stream of events; closing it abandons the run
        """
        logger.info("Provisioning %s from %s", spec.container_name, spec.image_ref)
        return run_in_background(
            iter(self.provision(spec)),
            capacity=self.channel_capacity,
            name=f"provision-{spec.name}",
        )
