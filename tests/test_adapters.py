"""
Tests for adapter protocol, registry, mock, and shell adapters.
"""

import subprocess
from pathlib import Path

import pytest

from docker_install.adapters.containers.docker import (
    DockerEngineProbe,
    parse_compose_version,
    parse_engine_version,
)
from docker_install.adapters.mock import MockPackageManager, mock_host
from docker_install.adapters.packages.native import AptPackageManager, DnfPackageManager
from docker_install.adapters.registry import build_host
from docker_install.adapters.services.systemd import SystemdServiceManager
from docker_install.adapters.shell.accounts import SystemAccountManager
from docker_install.adapters.shell.command import ShellCommandAdapter
from docker_install.adapters.shell.filesystem import FilesystemAdapter
from docker_install.adapters.shell.gpg import GpgKeyManager
from docker_install.core.models.distribution import Family
from docker_install.core.models.receipt import Receipt


class RecordingShell(ShellCommandAdapter):
    """Shell that records argv instead of executing, with canned outputs."""

    def __init__(self, outputs: dict[str, Receipt] | None = None, use_sudo: bool = False):
        super().__init__(use_sudo=use_sudo)
        self.commands: list[list[str]] = []
        self.outputs = outputs or {}

    def which(self, binary: str) -> str | None:
        return f"/usr/bin/{binary}"

    def run(self, cmd, *, timeout=120, privileged=False, mutating=False,
            input_text=None, env_overrides=None) -> Receipt:
        argv = ["sudo", *cmd] if privileged and self.use_sudo else list(cmd)
        self.commands.append(argv)
        if mutating:
            self.record(" ".join(cmd))
        return self.outputs.get(" ".join(cmd), Receipt.success(command=argv))


# ── Shell adapter ───────────────────────────────────────────────────


class TestShellCommandAdapter:
    def test_success(self):
        r = ShellCommandAdapter().run(["echo", "hello"])
        assert r.ok
        assert r.output == "hello"
        assert r.return_code == 0

    def test_failure_exit_code(self):
        r = ShellCommandAdapter().run(["sh", "-c", "echo oops >&2; exit 3"])
        assert r.failed
        assert r.return_code == 3
        assert r.error == "oops"
        assert r.retriable

    def test_missing_binary_not_retriable(self):
        r = ShellCommandAdapter().run(["definitely-not-a-real-binary-xyz"])
        assert r.failed
        assert not r.retriable
        assert "Command not found" in r.error

    def test_timeout(self):
        r = ShellCommandAdapter().run(["sleep", "5"], timeout=0.2)
        assert r.failed
        assert "timed out" in r.error
        assert r.retriable

    def test_stdin(self):
        r = ShellCommandAdapter().run(["cat"], input_text="piped")
        assert r.output == "piped"

    def test_env_overrides(self):
        r = ShellCommandAdapter().run(["sh", "-c", "echo $DI_TEST"], env_overrides={"DI_TEST": "x"})
        assert r.output == "x"

    def test_mutating_commands_journaled(self):
        shell = ShellCommandAdapter()
        shell.run(["true"], mutating=True)
        shell.run(["true"])
        assert shell.journal == ["true"]

    def test_sudo_prefix_only_for_privileged(self, monkeypatch):
        seen: list[list[str]] = []

        def fake_run(argv, **kwargs):
            seen.append(argv)
            return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        shell = ShellCommandAdapter(use_sudo=True)
        shell.run(["apt-get", "update"], privileged=True)
        shell.run(["dpkg-query", "-W", "curl"])
        assert seen == [["sudo", "apt-get", "update"], ["dpkg-query", "-W", "curl"]]

    def test_env_overrides_survive_sudo(self, monkeypatch):
        seen: list[list[str]] = []

        def fake_run(argv, **kwargs):
            seen.append(argv)
            return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        shell = ShellCommandAdapter(use_sudo=True)
        shell.run(["apt-get", "update"], privileged=True, env_overrides={"DEBIAN_FRONTEND": "noninteractive"})
        shell.run(["true"], env_overrides={"DI_TEST": "x"})
        assert seen == [
            ["sudo", "DEBIAN_FRONTEND=noninteractive", "apt-get", "update"],
            ["true"],
        ]


# ── Filesystem adapter ──────────────────────────────────────────────


class TestFilesystemAdapter:
    def test_write_read_and_mode(self, tmp_path: Path):
        files = FilesystemAdapter(ShellCommandAdapter())
        target = tmp_path / "sub" / "docker.list"
        assert files.write(str(target), "deb x\n").ok
        assert files.read_text(str(target)) == "deb x\n"
        assert target.stat().st_mode & 0o777 == 0o644

    def test_read_missing_is_none(self, tmp_path: Path):
        files = FilesystemAdapter(ShellCommandAdapter())
        assert files.read_text(str(tmp_path / "missing")) is None
        assert not files.is_nonempty(str(tmp_path / "missing"))

    def test_writes_are_journaled(self, tmp_path: Path):
        shell = ShellCommandAdapter()
        files = FilesystemAdapter(shell)
        files.mkdir(str(tmp_path / "keyrings"))
        files.write(str(tmp_path / "keyrings" / "k"), "x")
        assert shell.journal == [
            f"mkdir {tmp_path / 'keyrings'}",
            f"write {tmp_path / 'keyrings' / 'k'}",
        ]

    def test_mkdir_existing_is_noop(self, tmp_path: Path):
        shell = ShellCommandAdapter()
        assert FilesystemAdapter(shell).mkdir(str(tmp_path)).ok
        assert shell.journal == []

    def test_rename_and_list(self, tmp_path: Path):
        files = FilesystemAdapter(ShellCommandAdapter())
        (tmp_path / "a.list").write_text("a")
        (tmp_path / "b.conf").write_text("b")
        assert files.list_files(str(tmp_path), "*.list") == [str(tmp_path / "a.list")]
        assert files.rename(str(tmp_path / "a.list"), str(tmp_path / "a.list.disabled")).ok
        assert files.list_files(str(tmp_path), "*.list") == []

    def test_clear_directory(self, tmp_path: Path):
        (tmp_path / "lists" / "partial").mkdir(parents=True)
        (tmp_path / "lists" / "lock").write_text("")
        files = FilesystemAdapter(ShellCommandAdapter())
        assert files.clear_directory(str(tmp_path / "lists")).ok
        assert (tmp_path / "lists").is_dir()
        assert list((tmp_path / "lists").iterdir()) == []

    def test_backup(self, tmp_path: Path):
        (tmp_path / "sources.list").write_text("deb x\n")
        files = FilesystemAdapter(ShellCommandAdapter())
        created = files.backup(
            [str(tmp_path / "sources.list"), str(tmp_path / "missing")], str(tmp_path / "bk"),
        )
        assert created == [str(tmp_path / "bk" / "sources.list")]
        assert (tmp_path / "bk" / "sources.list").read_text() == "deb x\n"

    def test_sudo_write_goes_through_tee(self):
        shell = RecordingShell(use_sudo=True)
        files = FilesystemAdapter(shell)
        files.write("/etc/apt/sources.list.d/docker.list", "deb x\n")
        assert shell.commands == [
            ["sudo", "tee", "/etc/apt/sources.list.d/docker.list"],
            ["sudo", "chmod", "0644", "/etc/apt/sources.list.d/docker.list"],
        ]


# ── Native package managers ─────────────────────────────────────────


class TestAptPackageManager:
    def test_is_installed_parses_status(self):
        shell = RecordingShell({
            "dpkg-query -W -f=${Status} curl": Receipt.success(output="install ok installed"),
            "dpkg-query -W -f=${Status} gone": Receipt.success(output="deinstall ok config-files"),
        })
        apt = AptPackageManager(shell)
        assert apt.is_installed("curl")
        assert not apt.is_installed("gone")

    def test_install_is_batched_and_journaled(self):
        shell = RecordingShell(use_sudo=True)
        AptPackageManager(shell).install(["docker-ce", "docker-ce-cli"])
        assert shell.commands == [["sudo", "apt-get", "install", "-y", "docker-ce", "docker-ce-cli"]]
        assert shell.journal == ["apt-get install -y docker-ce docker-ce-cli"]

    def test_noninteractive_under_sudo(self, monkeypatch):
        seen: list[list[str]] = []

        def fake_run(argv, **kwargs):
            seen.append(argv)
            return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        AptPackageManager(ShellCommandAdapter(use_sudo=True)).install(["docker-ce"])
        assert seen == [["sudo", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y", "docker-ce"]]

    def test_refresh_not_journaled(self):
        shell = RecordingShell()
        AptPackageManager(shell).refresh()
        assert shell.commands == [["apt-get", "update"]]
        assert shell.journal == []

    def test_architecture(self):
        shell = RecordingShell({"dpkg --print-architecture": Receipt.success(output="arm64\n")})
        assert AptPackageManager(shell).architecture() == "arm64"

    def test_add_repository_unsupported(self):
        r = AptPackageManager(RecordingShell()).add_repository("https://x/docker-ce.repo")
        assert r.failed and not r.retriable


class TestDnfPackageManager:
    def test_commands(self):
        shell = RecordingShell()
        dnf = DnfPackageManager(shell)
        dnf.remove(["podman", "runc"])
        dnf.add_repository("https://download.docker.com/linux/centos/docker-ce.repo")
        assert shell.commands == [
            ["dnf", "-y", "remove", "podman", "runc"],
            ["dnf", "config-manager", "--add-repo",
             "https://download.docker.com/linux/centos/docker-ce.repo"],
        ]

    def test_is_installed_uses_rpm(self):
        shell = RecordingShell({"rpm -q podman": Receipt.failure(error="not installed")})
        assert not DnfPackageManager(shell).is_installed("podman")
        assert DnfPackageManager(shell).is_installed("dnf-plugins-core")


# ── Service, key and account adapters ──────────────────────────────


class TestSystemAdapters:
    def test_systemd_commands(self):
        shell = RecordingShell(use_sudo=True)
        systemd = SystemdServiceManager(shell)
        assert systemd.is_active("docker")
        systemd.enable("docker")
        assert shell.commands == [
            ["systemctl", "is-active", "--quiet", "docker"],
            ["sudo", "systemctl", "enable", "docker"],
        ]

    def test_gpg_import_downloads_then_dearmors(self):
        shell = RecordingShell()
        GpgKeyManager(shell).import_key(
            "https://download.docker.com/linux/ubuntu/gpg", "/etc/apt/keyrings/docker.gpg",
            scratch="/tmp/k.asc", timeout=30,
        )
        assert shell.commands[0][:2] == ["curl", "-fsSL"]
        assert shell.commands[1] == [
            "gpg", "--batch", "--yes", "--dearmor", "-o", "/etc/apt/keyrings/docker.gpg", "/tmp/k.asc",
        ]

    def test_gpg_stops_on_download_failure(self):
        url = "https://download.docker.com/linux/ubuntu/gpg"
        shell = RecordingShell({
            f"curl -fsSL --max-time 30 -o /tmp/k.asc {url}": Receipt.failure(error="404"),
        })
        r = GpgKeyManager(shell).import_key(url, "/k.gpg", scratch="/tmp/k.asc", timeout=30)
        assert r.failed
        assert len(shell.commands) == 1

    def test_current_identity_prefers_sudo_user(self, monkeypatch):
        monkeypatch.setenv("SUDO_USER", "alice")
        identity = SystemAccountManager(RecordingShell()).current_identity()
        assert identity.invoking_user == "alice"

    def test_usermod(self):
        shell = RecordingShell(use_sudo=True)
        SystemAccountManager(shell).add_to_group("alice", "docker")
        assert shell.commands == [["sudo", "usermod", "-aG", "docker", "alice"]]


# ── Docker CLI probe ────────────────────────────────────────────────


class TestEngineProbe:
    @pytest.mark.parametrize("text, version, major", [
        ("Docker version 24.0.7, build afdd53b", "24.0.7", 24),
        ("Docker version 20.10.24+dfsg1, build 297e128", "20.10.24", 20),
        ("Docker version 27.3.1, build ce12230", "27.3.1", 27),
        ("command not found", "", None),
    ])
    def test_parse_engine_version(self, text, version, major):
        assert parse_engine_version(text) == (version, major)

    def test_parse_compose_version(self):
        assert parse_compose_version("Docker Compose version v2.29.7") == "2.29.7"
        assert parse_compose_version("") == ""

    def test_status(self):
        shell = RecordingShell({
            "docker --version": Receipt.success(output="Docker version 26.1.4, build 5650f9b"),
            "docker compose version": Receipt.success(output="Docker Compose version v2.27.1"),
        })
        status = DockerEngineProbe(shell).status()
        assert status.installed
        assert status.major == 26
        assert status.compose_version == "2.27.1"
        assert status.at_least(23)

    def test_status_broken_binary(self):
        shell = RecordingShell({"docker --version": Receipt.failure(error="segfault")})
        assert not DockerEngineProbe(shell).status().installed


# ── Registry and mocks ──────────────────────────────────────────────


class TestRegistry:
    def test_build_host_wires_both_families(self):
        host = build_host()
        assert host.package_manager(Family.DEBIAN).name == "apt"
        assert host.package_manager(Family.RPM).name == "dnf"
        assert host.package_manager(Family.UNKNOWN) is None

    def test_enable_sudo(self):
        host = build_host()
        host.enable_sudo()
        assert host.shell.use_sudo

    def test_mock_host_never_escalates(self):
        host = mock_host()
        host.enable_sudo()
        assert not host.shell.use_sudo

    def test_adapter_status(self):
        status = mock_host().adapter_status()
        assert status["mock-apt"]["available"] is True
        assert status["mock-systemd"]["type"] == "MockServiceManager"


class TestMockPackageManager:
    def test_scripted_failure_count(self):
        pm = MockPackageManager()
        pm.set_failure("install", times=1)
        assert pm.install(["curl"]).failed
        assert pm.install(["curl"]).ok
        assert pm.is_installed("curl")

    def test_shared_journal(self):
        host = mock_host()
        host.package_manager(Family.DEBIAN).install(["curl"])
        host.services.start("docker")
        assert host.journal == ["install curl", "start docker"]
