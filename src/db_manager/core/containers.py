"""
Listing and start/stop of managed containers.
"""

import logging
from typing import Optional

from .models import MANAGEMENT_LABEL, RuntimeContainer
from .runtime import RuntimeClient

logger = logging.getLogger(__name__)

CONTAINER_FILTER = f"{MANAGEMENT_LABEL}=container"


def parse_environment(entries: Optional[list[str]]) -> dict[str, str]:
    """
    Parse ``KEY=VALUE`` entries as reported by the runtime.

    The split happens at the first ``=``; an entry without one maps to "".
    """
    variables = {}
    for entry in entries or []:
        key, sep, value = entry.partition("=")
        variables[key] = value if sep else ""
    return variables


def parse_mounts(mounts: Optional[list[dict]]) -> dict[str, str]:
    """Map each mount's volume name (or source, for bind mounts) to its destination."""
    volumes = {}
    for mount in mounts or []:
        name = mount.get("Name") or mount.get("Source")
        destination = mount.get("Destination")
        if name and destination:
            volumes[name] = destination
    return volumes


def project_container(details: dict) -> Optional[RuntimeContainer]:
    """
    Build a RuntimeContainer from an inspect document.

    Returns:
        None if the id, name, image or state cannot be resolved
    """
    config = details.get("Config") or {}
    state = details.get("State") or {}

    container_id = details.get("Id")
    name = details.get("Name")
    image = config.get("Image")
    status = state.get("Status")

    if not (container_id and name and image and status):
        return None

    return RuntimeContainer(
        id=container_id,
        name=name,
        state=status,
        image=image,
        variables=parse_environment(config.get("Env")),
        volumes=parse_mounts(details.get("Mounts")),
    )


class ContainerService:
    """Lists, starts and stops containers created by this application."""

    def __init__(self, runtime: RuntimeClient):
        self.runtime = runtime

    def list_containers(self) -> list[RuntimeContainer]:
        """
        Get every managed container, in any state.

        Entries the runtime reports only partially are left out.
        """
        containers = []
        for details in self.runtime.list_managed_containers(CONTAINER_FILTER):
            container = project_container(details)
            if container is None:
                logger.debug("Ignoring incomplete container entry %s", details.get("Id"))
                continue
            containers.append(container)
        return containers

    def start(self, container_id: str) -> None:
        self.runtime.start_container(container_id)

    def stop(self, container_id: str) -> None:
        self.runtime.stop_container(container_id)
