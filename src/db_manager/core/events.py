"""
Events emitted by a provisioning run.

Each run produces zero or more ``Pulling`` events, one ``Building`` event
and then exactly one terminal event, ``Done`` or ``Error``.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Pulling:
    """Image layers are being downloaded.

    ``layers`` holds ``(layer_id, fraction)`` pairs in the order the layers
    were first reported; it is empty when the runtime gave no per-layer detail.
    """
    layers: tuple[tuple[str, float], ...] = ()

    @property
    def overall(self) -> float:
        """Mean progress across known layers (0.0 when none are known)."""
        if not self.layers:
            return 0.0
        return sum(fraction for _, fraction in self.layers) / len(self.layers)


@dataclass(frozen=True)
class Building:
    """Volumes and the container object are being created."""


@dataclass(frozen=True)
class Done:
    """The container exists and has been started."""
    container_id: str


@dataclass(frozen=True)
class Error:
    """The run failed; no further events follow."""
    message: str


ProvisioningEvent = Union[Pulling, Building, Done, Error]


def is_terminal(event: ProvisioningEvent) -> bool:
    """Whether ``event`` ends a provisioning run."""
    return isinstance(event, (Done, Error))
