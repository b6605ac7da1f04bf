"""
Unit tests for the Docker-backed runtime client.
"""
from unittest.mock import MagicMock

import pytest
from docker.errors import APIError, DockerException, NotFound

from db_manager.core.errors import ContainerRuntimeError
from db_manager.core.models import PullProgress
from db_manager.core.runtime import RuntimeClient


@pytest.fixture
def docker_client():
    return MagicMock()


@pytest.fixture
def client(docker_client):
    return RuntimeClient(docker_client)


class TestInspect:
    """Tests for inspect calls."""

    def test_not_found_is_none(self, client, docker_client):
        docker_client.api.inspect_container.side_effect = NotFound("No such container")
        assert client.inspect_container("db-mgr__pg") is None

    def test_found_returns_document(self, client, docker_client):
        docker_client.api.inspect_volume.return_value = {"Name": "v"}
        assert client.inspect_volume("v") == {"Name": "v"}

    def test_other_errors_raise(self, client, docker_client):
        docker_client.api.inspect_volume.side_effect = APIError("server error")
        with pytest.raises(ContainerRuntimeError) as exc_info:
            client.inspect_volume("v")
        assert isinstance(exc_info.value.cause, APIError)


class TestPull:
    """Tests for pull_image."""

    def test_streams_progress(self, client, docker_client):
        docker_client.api.pull.return_value = iter([
            {"status": "Pulling from library/postgres", "id": "latest"},
            {"status": "Downloading", "id": "a1", "progressDetail": {"current": 1, "total": 2}},
        ])

        progress = list(client.pull_image("postgres", "latest"))

        docker_client.api.pull.assert_called_once_with("postgres", tag="latest", stream=True, decode=True)
        assert progress[1] == PullProgress("Downloading", "a1", 1, 2)

    def test_error_line_raises(self, client, docker_client):
        docker_client.api.pull.return_value = iter([
            {"status": "Pulling from library/postgres", "id": "latest"},
            {"error": "manifest unknown", "errorDetail": {"message": "manifest unknown"}},
        ])
        with pytest.raises(ContainerRuntimeError, match="manifest unknown"):
            list(client.pull_image("postgres", "nope"))

    def test_api_error_raises(self, client, docker_client):
        docker_client.api.pull.side_effect = APIError("denied")
        with pytest.raises(ContainerRuntimeError):
            list(client.pull_image("postgres", "latest"))


class TestCreate:
    """Tests for volume and container creation."""

    def test_create_volume(self, client, docker_client):
        client.create_volume("db-mgr__pg__data", {"db-mgr-resource": "volume"})
        docker_client.api.create_volume.assert_called_once_with(
            name="db-mgr__pg__data", labels={"db-mgr-resource": "volume"}
        )

    def test_create_container(self, client, docker_client):
        docker_client.api.create_container.return_value = {"Id": "abc", "Warnings": []}

        container_id = client.create_container(
            name="db-mgr__pg",
            image="postgres:latest",
            environment=['POSTGRES_PASSWORD="x"'],
            mounts={"db-mgr__pg__data": "/var/lib/postgresql/data"},
            labels={"db-mgr-resource": "container"},
        )

        assert container_id == "abc"
        (mount,) = docker_client.api.create_host_config.call_args.kwargs["mounts"]
        assert mount["Source"] == "db-mgr__pg__data"
        assert mount["Target"] == "/var/lib/postgresql/data"
        assert mount["Type"] == "volume"
        assert mount["ReadOnly"] is False

        kwargs = docker_client.api.create_container.call_args.kwargs
        assert kwargs["name"] == "db-mgr__pg"
        assert kwargs["image"] == "postgres:latest"
        assert kwargs["environment"] == ['POSTGRES_PASSWORD="x"']
        assert kwargs["labels"] == {"db-mgr-resource": "container"}

    def test_create_container_conflict(self, client, docker_client):
        docker_client.api.create_container.side_effect = APIError("Conflict")
        with pytest.raises(ContainerRuntimeError):
            client.create_container("db-mgr__pg", "postgres:latest", [], {}, {})

    def test_start_failure(self, client, docker_client):
        docker_client.api.start.side_effect = APIError("port is already allocated")
        with pytest.raises(ContainerRuntimeError, match="port is already allocated"):
            client.start_container("abc")


class TestListing:
    """Tests for list_managed_containers."""

    def test_inspects_each_and_skips_failures(self, client, docker_client):
        docker_client.api.containers.return_value = [{"Id": "a"}, {"Id": "b"}, {}]
        docker_client.api.inspect_container.side_effect = [
            {"Id": "a"},
            NotFound("gone"),
        ]

        details = client.list_managed_containers("db-mgr-resource=container")

        docker_client.api.containers.assert_called_once_with(
            all=True, filters={"label": ["db-mgr-resource=container"]}
        )
        assert details == [{"Id": "a"}]

    def test_listing_failure_raises(self, client, docker_client):
        docker_client.api.containers.side_effect = DockerException("daemon down")
        with pytest.raises(ContainerRuntimeError):
            client.list_managed_containers("db-mgr-resource=container")


class TestLifecycle:
    """Tests for connection handling."""

    def test_ping_failure(self, client, docker_client):
        docker_client.ping.side_effect = DockerException("down")
        assert client.ping() is False

    def test_close(self, client, docker_client):
        client.close()
        docker_client.close.assert_called_once_with()
