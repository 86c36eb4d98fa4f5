from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for `import settings_store` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class FakeApp:
    def __init__(self, user_data: Path, version: str = "1.0.0", ready: bool = True):
        self.user_data = user_data
        self.version = version
        self.ready = ready

    def get_path(self, name: str) -> str:
        if name == "userData":
            return str(self.user_data)
        return str(self.user_data / name)

    def is_ready(self) -> bool:
        return self.ready

    def get_version(self) -> str:
        return self.version


class FakeShell:
    def __init__(self, result: str = ""):
        self.result = result
        self.opened: list[str] = []

    async def open_path(self, path: str) -> str:
        self.opened.append(path)
        return self.result


@pytest.fixture
def user_data(tmp_path: Path) -> Path:
    p = tmp_path / "userData"
    p.mkdir(parents=True, exist_ok=True)
    return p


@pytest.fixture
def channel():
    from settings_store.host import InProcessChannel

    return InProcessChannel()


@pytest.fixture
def shell() -> FakeShell:
    return FakeShell()


@pytest.fixture
def main_host(user_data: Path, channel, shell: FakeShell):
    """
    Install a sandboxed main-process host so tests never touch the real home directory.
    """
    from settings_store import bridge, host as host_module

    h = host_module.Host(
        process_type="main",
        app=FakeApp(user_data),
        ipc_main=channel,
        ipc_renderer=channel,
        shell=shell,
    )
    previous = host_module.set_host(h)
    yield h
    bridge.cleanup_main()
    if previous is None:
        host_module.reset_host()
    else:
        host_module.set_host(previous)


@pytest.fixture
def renderer_host(main_host, channel):
    """A renderer host sharing the main host's channel, with no direct app handle."""
    from settings_store.host import Host

    return Host(process_type="renderer", app=None, ipc_main=None, ipc_renderer=channel, shell=main_host.shell)


@pytest.fixture
def store_dir(tmp_path: Path, main_host) -> Path:
    d = tmp_path / "store"
    d.mkdir(parents=True, exist_ok=True)
    return d
