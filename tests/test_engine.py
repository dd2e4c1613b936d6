"""
Tests for the install orchestrator — end-to-end runs on mock hosts.
"""

from pathlib import Path

from docker_install.adapters.mock import mock_host
from docker_install.core.data.recipes import ENGINE_PACKAGES
from docker_install.core.engine.orchestrator import RunState, run_install
from docker_install.core.models.distribution import Family
from docker_install.core.models.identity import UserIdentity

from tests.distros import (
    ARCH,
    DEBIAN_BOOKWORM,
    FEDORA_39,
    PREREQUISITES_DEB,
    RHEL_9,
    UBUNTU_BIONIC,
    UBUNTU_JAMMY,
)

INSTALL_STATES = [
    "START",
    "PRIVILEGE_CHECK",
    "DETECT",
    "VERSION_GATE",
    "INSTALL_PATH",
    "SERVICE_RECONCILE",
    "POST_INSTALL_ADJUST",
    "VERIFY",
    "DONE",
]


class TestFreshInstall:
    """Scenario A: fresh Ubuntu 22.04, no engine present."""

    def test_installs_and_starts(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN)

        outcome = run_install(config, host)

        assert outcome.success
        assert outcome.final_state == RunState.DONE
        assert outcome.states == INSTALL_STATES
        assert outcome.distribution == "ubuntu 22.04"
        assert int(outcome.installed_version.split(".")[0]) >= 23
        assert host.services.is_active("docker")
        assert host.services.is_enabled("docker")
        assert Path(config.paths.docker_apt_list).is_file()

    def test_step_order(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN)

        outcome = run_install(config, host)

        labels = [m.split(" ", 1)[0] for m in outcome.mutations]
        # prerequisites, keyring dir, key, list, engine, service
        assert labels[0] == "install"
        assert labels.index("import_key") < labels.index("write")
        assert outcome.mutations[-2:] == ["enable docker", "start docker"]
        engine_install = next(m for m in outcome.mutations if "docker-ce" in m)
        assert engine_install == "install " + " ".join(ENGINE_PACKAGES)

    def test_cleanup_runs_last(self, config, write_os_release, caplog):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN)
        with caplog.at_level("INFO"):
            run_install(config, host)
        assert "Cleaning up temporary files..." in caplog.text
        assert caplog.text.index("Cleaning up") > caplog.text.index("Docker installation completed")

    def test_debian(self, config, write_os_release):
        write_os_release(DEBIAN_BOOKWORM)
        host = mock_host(Family.DEBIAN)
        outcome = run_install(config, host)
        assert outcome.success
        assert "linux/debian bookworm stable" in Path(config.paths.docker_apt_list).read_text()


class TestIdempotence:
    def test_second_run_makes_no_changes(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN)

        first = run_install(config, host)
        second = run_install(config, host)

        assert first.success and first.mutations
        assert second.success
        assert second.mutations == []
        assert second.states[-2:] == ["ALREADY_SATISFIED", "DONE"]

    def test_already_installed_short_circuits(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN, installed={p: "27.3.1" for p in ENGINE_PACKAGES})

        outcome = run_install(config, host)

        assert outcome.success
        assert "INSTALL_PATH" not in outcome.states
        assert outcome.mutations == []
        assert host.package_manager(Family.DEBIAN).calls("refresh") == []

    def test_install_path_on_satisfied_host_is_noop(self, config, write_os_release):
        # Only the compose plugin is missing; every other step is in place
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN, installed=PREREQUISITES_DEB)
        run_install(config, host)

        host.package_manager(Family.DEBIAN).installed.pop("docker-compose-plugin")
        outcome = run_install(config, host)

        assert outcome.success
        assert outcome.mutations == ["install " + " ".join(ENGINE_PACKAGES)]


class TestOutdatedEngine:
    """Scenario B: engine present at an unsupported major."""

    def test_distro_package_replaced(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(
            Family.DEBIAN, installed={"docker.io": "20.10.24", "docker-compose-v2": "2.20.2"},
        )

        outcome = run_install(config, host)

        assert outcome.success
        pm = host.package_manager(Family.DEBIAN)
        assert "docker.io" not in pm.installed
        assert pm.calls("remove")
        assert Path(config.paths.docker_apt_list).is_file()
        assert int(outcome.installed_version.split(".")[0]) >= 23

    def test_vendor_packages_upgraded(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN, installed={p: "20.10.24" for p in ENGINE_PACKAGES})

        outcome = run_install(config, host)

        assert outcome.success
        assert host.package_manager(Family.DEBIAN).calls("upgrade")
        assert outcome.installed_version == "27.3.1"


class TestFailures:
    def test_unprivileged_exits_before_mutation(self, config, write_os_release):
        """Scenario C."""
        write_os_release(UBUNTU_JAMMY)
        nobody = UserIdentity(euid=1000, user="nobody", invoking_user="nobody", groups=["users"])
        host = mock_host(Family.DEBIAN, identity=nobody)

        outcome = run_install(config, host)

        assert not outcome.success
        assert outcome.failed_step == "PRIVILEGE_CHECK"
        assert outcome.final_state == RunState.FAILED
        assert outcome.mutations == []

    def test_unsupported_distribution(self, config, write_os_release, caplog):
        """Scenario D."""
        write_os_release(ARCH)
        host = mock_host(Family.DEBIAN)

        with caplog.at_level("INFO"):
            outcome = run_install(config, host)

        assert not outcome.success
        assert outcome.failed_step == "INSTALL_PATH"
        assert "arch" in outcome.error
        assert outcome.mutations == []
        assert "Error in step INSTALL_PATH: Unsupported distribution: arch" in caplog.text

    def test_undetectable_distribution(self, config):
        host = mock_host(Family.DEBIAN)
        outcome = run_install(config, host)
        assert outcome.failed_step == "DETECT"
        assert outcome.error == "Unable to detect distribution"

    def test_old_release_rejected(self, config, write_os_release):
        write_os_release(UBUNTU_BIONIC)
        host = mock_host(Family.DEBIAN)
        outcome = run_install(config, host)
        assert outcome.failed_step == "VERSION_GATE"
        assert "Minimum required version is 20.04" in outcome.error
        assert outcome.mutations == []

    def test_service_failure(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN)
        host.services.set_failure("enable")
        outcome = run_install(config, host)
        assert outcome.failed_step == "SERVICE_RECONCILE"

    def test_verification_failure(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN)
        host.engine.broken = True
        outcome = run_install(config, host)
        assert outcome.failed_step == "VERIFY"
        assert outcome.states[-2:] == ["VERIFY", "FAILED"]

    def test_cleanup_runs_on_failure(self, config, write_os_release, caplog):
        write_os_release(UBUNTU_JAMMY)
        host = mock_host(Family.DEBIAN)
        host.package_manager(Family.DEBIAN).set_failure("install")
        with caplog.at_level("INFO"):
            outcome = run_install(config, host)
        assert outcome.failed_step == "INSTALL_PATH"
        assert "Cleaning up temporary files..." in caplog.text


class TestRpmPaths:
    def test_fedora(self, config, write_os_release):
        write_os_release(FEDORA_39)
        host = mock_host(Family.RPM)

        outcome = run_install(config, host)

        assert outcome.success
        assert outcome.states == INSTALL_STATES
        assert "linux/fedora" in Path(config.paths.yum_repo_file).read_text()
        pm = host.package_manager(Family.RPM)
        assert pm.calls("install")[0] == ("dnf-plugins-core",)

    def test_rhel_with_podman(self, config, write_os_release):
        write_os_release(RHEL_9)
        host = mock_host(
            Family.RPM, installed={"podman": "4.6.1"}, repo_file=config.paths.yum_repo_file,
        )

        outcome = run_install(config, host)

        assert outcome.success
        pm = host.package_manager(Family.RPM)
        assert "podman" not in pm.installed
        assert pm.calls("add_repository")


class TestPostInstall:
    def test_sudo_user_added_to_group(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        alice = UserIdentity(euid=1000, user="alice", invoking_user="alice", groups=["sudo"])
        host = mock_host(Family.DEBIAN, identity=alice)

        outcome = run_install(config, host)

        assert outcome.success
        assert "add_to_group alice docker" in outcome.mutations

    def test_group_failure_does_not_fail_run(self, config, write_os_release):
        write_os_release(UBUNTU_JAMMY)
        alice = UserIdentity(euid=1000, user="alice", invoking_user="alice", groups=["wheel"])
        host = mock_host(Family.DEBIAN, identity=alice)
        host.accounts.set_failure("add_to_group")

        outcome = run_install(config, host)

        assert outcome.success
