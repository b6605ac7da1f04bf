"""
Shared fixtures: an in-memory stand-in for the container runtime.
"""

import threading

import pytest

from db_manager.core.errors import ContainerRuntimeError
from db_manager.core.models import ContainerSpec, PullProgress


class FakeRuntime:
    """Records every call and answers like a Docker daemon would."""

    def __init__(self):
        self.containers = {}   # name -> inspect document
        self.volumes = {}      # name -> labels
        self.pull_lines = [
            PullProgress("Pulling from library/postgres", layer_id="latest"),
            PullProgress("Pulling fs layer", layer_id="a1"),
            PullProgress("Downloading", layer_id="a1", current=50, total=100),
            PullProgress("Pull complete", layer_id="a1"),
        ]
        self.pull_error = None
        self.fail = {}          # method name -> message
        self.calls = []
        self.started = []
        self.stopped = []
        self.pull_gate = None   # threading.Event the pull waits on per line
        self._next_id = 1

    def _check(self, method):
        if method in self.fail:
            raise ContainerRuntimeError(self.fail[method])

    def inspect_container(self, name):
        self.calls.append(("inspect_container", name))
        self._check("inspect_container")
        return self.containers.get(name)

    def inspect_volume(self, name):
        self.calls.append(("inspect_volume", name))
        self._check("inspect_volume")
        if name in self.volumes:
            return {"Name": name, "Labels": self.volumes[name]}
        return None

    def pull_image(self, image, tag):
        self.calls.append(("pull_image", image, tag))
        self._check("pull_image")
        for line in self.pull_lines:
            if self.pull_gate is not None:
                self.pull_gate.wait(5)
            yield line
        if self.pull_error:
            raise ContainerRuntimeError(self.pull_error)

    def create_volume(self, name, labels):
        self.calls.append(("create_volume", name))
        self._check("create_volume")
        self.volumes[name] = dict(labels)

    def create_container(self, name, image, environment, mounts, labels):
        self.calls.append(("create_container", name))
        self._check("create_container")
        if name in self.containers:
            raise ContainerRuntimeError(f"Conflict. The container name \"/{name}\" is already in use")
        container_id = f"{self._next_id:064x}"
        self._next_id += 1
        self.containers[name] = {
            "Id": container_id,
            "Name": f"/{name}",
            "Config": {
                "Image": image,
                "Env": list(environment),
                "Labels": dict(labels),
            },
            "State": {"Status": "created"},
            "Mounts": [
                {"Type": "volume", "Name": volume, "Destination": path}
                for volume, path in mounts.items()
            ],
        }
        return container_id

    def _find(self, container_id):
        for details in self.containers.values():
            if details["Id"] == container_id:
                return details
        raise ContainerRuntimeError(f"No such container: {container_id}")

    def start_container(self, container_id):
        self.calls.append(("start_container", container_id))
        self._check("start_container")
        self._find(container_id)["State"]["Status"] = "running"
        self.started.append(container_id)

    def stop_container(self, container_id):
        self.calls.append(("stop_container", container_id))
        self._check("stop_container")
        self._find(container_id)["State"]["Status"] = "exited"
        self.stopped.append(container_id)

    def list_managed_containers(self, label):
        self.calls.append(("list_managed_containers", label))
        self._check("list_managed_containers")
        key, _, value = label.partition("=")
        return [
            details for details in self.containers.values()
            if details["Config"].get("Labels", {}).get(key) == value
        ]

    def called(self, method):
        return [call for call in self.calls if call[0] == method]


@pytest.fixture
def runtime():
    return FakeRuntime()


@pytest.fixture
def pg_spec():
    return ContainerSpec(
        name="pg",
        image="postgres",
        tag="",
        variables={"POSTGRES_PASSWORD": "x", "UNUSED": ""},
        volumes={"data": "/var/lib/postgresql/data"},
    )


@pytest.fixture
def gate():
    return threading.Event()
