"""
Unit tests for container listing and start/stop.
"""
import pytest

from db_manager.core.containers import (
    CONTAINER_FILTER, ContainerService, parse_environment, parse_mounts, project_container
)
from db_manager.core.errors import ContainerRuntimeError
from db_manager.core.provisioning import ProvisioningOrchestrator


def inspect_doc(**overrides):
    doc = {
        "Id": "f" * 64,
        "Name": "/db-mgr__pg",
        "Config": {"Image": "postgres:latest", "Env": ['POSTGRES_PASSWORD="x"', "PATH=/usr/bin"]},
        "State": {"Status": "running"},
        "Mounts": [{"Type": "volume", "Name": "db-mgr__pg__data", "Destination": "/var/lib/postgresql/data"}],
    }
    doc.update(overrides)
    return doc


class TestParsing:
    """Tests for inspect document parsing."""

    def test_environment_split_at_first_equals(self):
        assert parse_environment(["A=1", "B=x=y", "FLAG"]) == {"A": "1", "B": "x=y", "FLAG": ""}

    def test_environment_missing(self):
        assert parse_environment(None) == {}

    def test_mounts_prefer_name_over_source(self):
        mounts = [
            {"Name": "vol", "Source": "/var/lib/docker/volumes/vol/_data", "Destination": "/data"},
            {"Source": "/home/me/conf", "Destination": "/etc/conf"},
            {"Name": "orphan"},
        ]
        assert parse_mounts(mounts) == {"vol": "/data", "/home/me/conf": "/etc/conf"}


class TestProjectContainer:
    """Tests for project_container."""

    def test_complete_document(self):
        container = project_container(inspect_doc())
        assert container.id == "f" * 64
        assert container.name == "/db-mgr__pg"
        assert container.state == "running"
        assert container.image == "postgres:latest"
        assert container.variables == {"POSTGRES_PASSWORD": '"x"', "PATH": "/usr/bin"}
        assert container.volumes == {"db-mgr__pg__data": "/var/lib/postgresql/data"}

    @pytest.mark.parametrize("override", [
        {"Id": None},
        {"Name": ""},
        {"Config": None},
        {"State": {}},
    ])
    def test_incomplete_document_dropped(self, override):
        assert project_container(inspect_doc(**override)) is None


class TestContainerService:
    """Tests for ContainerService."""

    def test_lists_only_managed_containers(self, runtime, pg_spec):
        list(ProvisioningOrchestrator(runtime).provision(pg_spec))
        runtime.containers["unrelated"] = inspect_doc(Id="1" * 64, Config={"Image": "nginx", "Labels": {}})

        containers = ContainerService(runtime).list_containers()

        assert [c.display_name for c in containers] == ["pg"]
        assert containers[0].is_running
        assert runtime.called("list_managed_containers") == [("list_managed_containers", CONTAINER_FILTER)]

    def test_listing_is_idempotent(self, runtime, pg_spec):
        list(ProvisioningOrchestrator(runtime).provision(pg_spec))
        service = ContainerService(runtime)
        assert service.list_containers() == service.list_containers()

    def test_partial_entries_omitted(self, runtime, pg_spec):
        list(ProvisioningOrchestrator(runtime).provision(pg_spec))
        runtime.containers["broken"] = inspect_doc(
            Id="2" * 64, State=None,
            Config={"Image": "redis", "Labels": {"db-mgr-resource": "container"}},
        )
        assert len(ContainerService(runtime).list_containers()) == 1

    def test_stop_and_start(self, runtime, pg_spec):
        run = ProvisioningOrchestrator(runtime).provision(pg_spec)
        list(run)
        service = ContainerService(runtime)

        service.stop(run.container_id)
        assert service.list_containers()[0].state == "exited"

        service.start(run.container_id)
        assert service.list_containers()[0].state == "running"

    def test_failure_is_reported(self, runtime):
        runtime.fail["stop_container"] = "container not running"
        with pytest.raises(ContainerRuntimeError):
            ContainerService(runtime).stop("abc")
