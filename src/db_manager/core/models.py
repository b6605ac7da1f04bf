"""
Data model shared by the runtime client, the provisioning pipeline and the UI.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

# Prefix applied to every container and volume this application creates
RESOURCE_PREFIX = "db-mgr"

# Label key marking resources as managed by this application
MANAGEMENT_LABEL = "db-mgr-resource"

DEFAULT_TAG = "latest"

# Pull statuses after which a layer is fully downloaded
_LAYER_COMPLETE_STATUSES = frozenset({
    "Download complete",
    "Verifying Checksum",
    "Extracting",
    "Pull complete",
    "Already exists",
})


def container_name(name: str) -> str:
    """Runtime name of the container created for ``name``."""
    return f"{RESOURCE_PREFIX}__{name}"


def volume_name(container: str, volume: str) -> str:
    """
    Namespaced runtime name of a volume belonging to a container.

    Args:
        container: Container name as entered by the user (no prefix)
        volume: Volume name as offered by the database catalog

    Returns:
        Name such as ``db-mgr__pg__data``
    """
    return f"{RESOURCE_PREFIX}__{container}__{volume}"


class ContainerState(Enum):
    """Known lifecycle states reported by the runtime."""
    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    RESTARTING = "restarting"
    REMOVING = "removing"
    EXITED = "exited"
    DEAD = "dead"
    UNKNOWN = "unknown"

    @classmethod
    def from_status(cls, status: str) -> "ContainerState":
        """Map a runtime status string, treating unrecognised values as UNKNOWN."""
        try:
            return cls(status)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class ContainerSpec:
    """
    Desired container, as submitted from the add-container form.

    Normalisation happens on construction: whitespace in the name becomes
    ``-``, an empty or blank tag becomes ``latest`` and environment entries
    with an empty value are dropped.
    """
    name: str
    image: str
    tag: str = DEFAULT_TAG
    variables: dict[str, str] = field(default_factory=dict)
    volumes: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Container name must not be empty")
        if not self.image or not self.image.strip():
            raise ValueError("Image reference must not be empty")

        object.__setattr__(self, "name", re.sub(r"\s", "-", self.name))
        object.__setattr__(self, "tag", (self.tag or "").strip() or DEFAULT_TAG)
        object.__setattr__(self, "variables", {
            key: value for key, value in self.variables.items() if value != ""
        })
        object.__setattr__(self, "volumes", dict(self.volumes))

    @property
    def container_name(self) -> str:
        return container_name(self.name)

    @property
    def image_ref(self) -> str:
        return f"{self.image}:{self.tag}"

    @property
    def volume_mounts(self) -> dict[str, str]:
        """Namespaced volume name -> mount path inside the container."""
        return {
            volume_name(self.name, volume): path
            for volume, path in self.volumes.items()
        }

    @property
    def environment(self) -> list[str]:
        """Environment entries in the ``NAME="VALUE"`` form passed to the runtime."""
        return [f'{key}="{value}"' for key, value in self.variables.items()]


@dataclass(frozen=True)
class RuntimeContainer:
    """A managed container as reported by the runtime."""
    id: str
    name: str
    state: str
    image: str
    variables: dict[str, str] = field(default_factory=dict)
    volumes: dict[str, str] = field(default_factory=dict)

    @property
    def lifecycle_state(self) -> ContainerState:
        return ContainerState.from_status(self.state)

    @property
    def is_running(self) -> bool:
        return self.lifecycle_state == ContainerState.RUNNING

    @property
    def short_id(self) -> str:
        return self.id[:12]

    @property
    def repository(self) -> str:
        """Image reference without its tag."""
        slash = self.image.rfind("/")
        colon = self.image.rfind(":")
        return self.image[:colon] if colon > slash else self.image

    @property
    def display_name(self) -> str:
        """Name without the runtime's leading slash and our resource prefix."""
        name = self.name.lstrip("/")
        prefix = f"{RESOURCE_PREFIX}__"
        if name.startswith(prefix):
            name = name[len(prefix):]
        return name


@dataclass(frozen=True)
class PullProgress:
    """One low-level notification from an image pull stream."""
    status: str
    layer_id: Optional[str] = None
    current: Optional[int] = None
    total: Optional[int] = None

    @classmethod
    def from_stream(cls, line: dict) -> "PullProgress":
        """Build from a decoded line of the Docker pull stream."""
        detail = line.get("progressDetail") or {}
        return cls(
            status=line.get("status", ""),
            layer_id=line.get("id"),
            current=detail.get("current"),
            total=detail.get("total"),
        )

    def fraction(self, previous: Optional[float] = None) -> float:
        """
        Download progress of this layer between 0.0 and 1.0.

        Args:
            previous: Last known fraction for the layer, kept when this
                notification carries no byte counts
        """
        if self.status in _LAYER_COMPLETE_STATUSES:
            return 1.0
        if self.status == "Downloading" and self.total:
            return max(0.0, min(1.0, (self.current or 0) / self.total))
        return previous if previous is not None else 0.0
