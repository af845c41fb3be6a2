import asyncio

import pytest

from gitconfig_server.errors import GitOperationError, GitStage
from gitconfig_server.registry import Environment
from gitconfig_server.services.mirror import GitMirrorManager, effective_interval

from .conftest import FakeBackend


@pytest.mark.parametrize("configured,expected", [(0, 30), (1, 1), (45, 45)])
def test_effective_interval(configured, expected):
    assert effective_interval(configured) == expected


@pytest.mark.asyncio
async def test_sync_all_visits_every_environment(fake_git_config):
    backend = FakeBackend()
    envs = [
        Environment(name="a", git=fake_git_config.model_copy(update={"repo_url": "repo-a"}), env_vars={}),
        Environment(name="b", git=fake_git_config.model_copy(update={"repo_url": "repo-b"}), env_vars={}),
    ]
    await GitMirrorManager(backend).sync_all(envs)
    assert backend.synced == ["repo-a", "repo-b"]


@pytest.mark.asyncio
async def test_sync_all_propagates_failures(fake_env):
    backend = FakeBackend(sync_errors=[GitOperationError(GitStage.CLONE, "repository not found")])
    with pytest.raises(GitOperationError):
        await GitMirrorManager(backend).sync_all([fake_env])


@pytest.mark.asyncio
async def test_refresh_loop_survives_failures(fake_env, caplog):
    backend = FakeBackend(sync_errors=[GitOperationError(GitStage.FETCH, "network down")])
    manager = GitMirrorManager(backend)

    task = asyncio.create_task(manager.refresh_loop(fake_env, interval=0.01))
    for _ in range(200):
        if len(backend.synced) >= 3:
            break
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(backend.synced) >= 3
    assert "network down" in caplog.text


@pytest.mark.asyncio
async def test_syncs_of_one_environment_do_not_overlap(fake_env):
    active = 0
    peak = 0

    class SlowBackend(FakeBackend):
        async def sync(self, git):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

    manager = GitMirrorManager(SlowBackend())
    await asyncio.gather(*(manager.ensure_synced(fake_env) for _ in range(5)))
    assert peak == 1


@pytest.mark.asyncio
async def test_start_and_stop(fake_env):
    manager = GitMirrorManager(FakeBackend())
    manager.start([fake_env])
    assert manager.running == 1
    await manager.stop()
    assert manager.running == 0
