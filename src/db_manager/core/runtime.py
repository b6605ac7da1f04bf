"""
Container runtime client.

Thin wrapper over the Docker SDK's low-level API. This is the only module
that talks to Docker directly; every Docker exception is translated into
``ContainerRuntimeError`` here so the rest of the application never sees
SDK types.
"""

import logging
from typing import Iterator, Optional

import docker
from docker.errors import DockerException, NotFound
from docker.types import Mount

from .errors import ContainerRuntimeError
from .models import PullProgress

logger = logging.getLogger(__name__)


class RuntimeClient:
    """Handle to the local container engine, shared by every component."""

    def __init__(self, client: "docker.DockerClient"):
        """
        Initialize the runtime client.

        Args:
            client: Connected Docker SDK client
        """
        self._client = client

    @classmethod
    def from_env(cls) -> "RuntimeClient":
        """
        Connect using the standard Docker environment variables.

        Raises:
            ContainerRuntimeError: If the daemon cannot be reached
        """
        try:
            client = docker.from_env()
            client.ping()
        except DockerException as e:
            raise ContainerRuntimeError(f"Error connecting to docker {e}", e) from e
        return cls(client)

    @property
    def api(self):
        return self._client.api

    def ping(self) -> bool:
        """Check whether the daemon still answers."""
        try:
            return bool(self._client.ping())
        except DockerException:
            return False

    def close(self) -> None:
        """Release the underlying connection pool."""
        logger.debug("Closing Docker client")
        self._client.close()

    # =========================================================================
    # Inspection
    # =========================================================================

    def inspect_container(self, name: str) -> Optional[dict]:
        """
        Inspect a container by name or id.

        Returns:
            The inspect document, or None if no such container exists
        """
        try:
            return self.api.inspect_container(name)
        except NotFound:
            return None
        except DockerException as e:
            raise ContainerRuntimeError(str(e), e) from e

    def inspect_volume(self, name: str) -> Optional[dict]:
        """
        Inspect a volume by name.

        Returns:
            The inspect document, or None if no such volume exists
        """
        try:
            return self.api.inspect_volume(name)
        except NotFound:
            return None
        except DockerException as e:
            raise ContainerRuntimeError(str(e), e) from e

    # =========================================================================
    # Image Management
    # =========================================================================

    def pull_image(self, image: str, tag: str) -> Iterator[PullProgress]:
        """
        Pull an image, streaming progress notifications.

        Args:
            image: Image repository, e.g. ``postgres``
            tag: Image tag

        Yields:
            One PullProgress per line of the pull stream

        Raises:
            ContainerRuntimeError: If the daemon rejects the pull or a
                stream line reports an error
        """
        logger.info("Pulling %s:%s", image, tag)
        try:
            for line in self.api.pull(image, tag=tag, stream=True, decode=True):
                if "error" in line:
                    raise ContainerRuntimeError(
                        f"Error pulling {image}:{tag}: {line['error']}"
                    )
                yield PullProgress.from_stream(line)
        except DockerException as e:
            raise ContainerRuntimeError(f"Error pulling {image}:{tag}: {e}", e) from e

    # =========================================================================
    # Volume Management
    # =========================================================================

    def create_volume(self, name: str, labels: dict[str, str]) -> None:
        """Create a named volume carrying ``labels``."""
        logger.info("Creating volume %s", name)
        try:
            self.api.create_volume(name=name, labels=labels)
        except DockerException as e:
            raise ContainerRuntimeError(f"Failed to create volume {name}: {e}", e) from e

    # =========================================================================
    # Container Management
    # =========================================================================

    def create_container(
        self,
        name: str,
        image: str,
        environment: list[str],
        mounts: dict[str, str],
        labels: dict[str, str],
    ) -> str:
        """
        Create (but do not start) a container.

        Args:
            name: Container name
            image: Full image reference including tag
            environment: Entries in ``NAME=VALUE`` form
            mounts: Volume name -> target path, mounted read-write
            labels: Labels to attach

        Returns:
            The runtime-assigned container id
        """
        logger.info("Creating container %s from %s", name, image)
        try:
            host_config = self.api.create_host_config(mounts=[
                Mount(target=path, source=volume, type="volume", read_only=False)
                for volume, path in mounts.items()
            ])
            container = self.api.create_container(
                image=image,
                name=name,
                environment=environment,
                labels=labels,
                host_config=host_config,
            )
        except DockerException as e:
            raise ContainerRuntimeError(f"Failed to create container {name}: {e}", e) from e

        for warning in container.get("Warnings") or []:
            logger.warning("Docker warning for %s: %s", name, warning)
        return container["Id"]

    def start_container(self, container_id: str) -> None:
        """Start a container by id or name."""
        logger.info("Starting container %s", container_id)
        try:
            self.api.start(container_id)
        except DockerException as e:
            raise ContainerRuntimeError(f"Failed to start container: {e}", e) from e

    def stop_container(self, container_id: str, timeout: int = 10) -> None:
        """Stop a container by id or name."""
        logger.info("Stopping container %s", container_id)
        try:
            self.api.stop(container_id, timeout=timeout)
        except DockerException as e:
            raise ContainerRuntimeError(f"Failed to stop container: {e}", e) from e

    def list_managed_containers(self, label: str) -> list[dict]:
        """
        Inspect every container (in any state) carrying ``label``.

        Containers that disappear or fail to inspect between the listing and
        the inspect call are skipped.

        Args:
            label: Label filter in ``key=value`` form

        Returns:
            Inspect documents, in listing order
        """
        try:
            summaries = self.api.containers(all=True, filters={"label": [label]})
        except DockerException as e:
            raise ContainerRuntimeError(f"Could not get containers: {e}", e) from e

        details = []
        for summary in summaries:
            container_id = summary.get("Id")
            if not container_id:
                continue
            try:
                details.append(self.api.inspect_container(container_id))
            except DockerException as e:
                logger.debug("Skipping container %s: %s", container_id, e)
        return details
