from __future__ import annotations

import threading
from pathlib import Path

import pytest

from fakes import FakeProvider, RecordingNotifier, RecordingTracker, ScriptedEnvironment, session
from vcs_update.core.config import load_config
from vcs_update.core.errors import ChainAlreadyRunning
from vcs_update.core.types import OperationKind, Outcome, ScopeMode
from vcs_update.orchestrator import Availability, UpdateAction
from vcs_update.providers import ProviderRegistry


@pytest.fixture()
def repo(tmp_path: Path) -> Path:
    r = tmp_path / "repo"
    (r / "src").mkdir(parents=True)
    return r


def test_nothing_updatable_is_a_no_op(repo: Path, tmp_path: Path) -> None:
    tracker = RecordingTracker()
    registry = ProviderRegistry()
    registry.register(FakeProvider("git", ScriptedEnvironment("git")), repo)
    action = UpdateAction(registry=registry, tracker=tracker)

    result = action.perform([tmp_path / "not-versioned"])

    assert result.started is False
    assert result.roots == []
    assert result.validation_error is None
    assert tracker.suspends == 0


def test_validation_rejection_runs_no_provider(repo: Path, tmp_path: Path) -> None:
    other = tmp_path / "other"
    other.mkdir()
    good = ScriptedEnvironment("hg")
    bad = ScriptedEnvironment("git", valid=False)
    registry = ProviderRegistry()
    registry.register(FakeProvider("git", bad), repo)
    registry.register(FakeProvider("hg", good), other)
    tracker = RecordingTracker()

    result = UpdateAction(registry=registry, tracker=tracker).perform([other, repo])

    assert result.started is False
    assert result.validation_error is not None
    assert result.validation_error.provider_id == "git"
    assert good.calls == [] and bad.calls == []
    assert tracker.suspends == 0


def test_perform_runs_the_chain(repo: Path) -> None:
    env = ScriptedEnvironment("git", [session("git", updated=[str(repo / "src" / "a.py")])])
    registry = ProviderRegistry()
    registry.register(FakeProvider("git", env), repo)
    notifier = RecordingNotifier()

    result = UpdateAction(registry=registry, notifier=notifier, name="Update Project").perform([repo / "src", repo])

    assert result.started
    assert [r.path for r in result.roots] == [repo]
    assert env.calls[0].roots == [repo]
    assert result.report is not None
    assert result.report.outcome is Outcome.COMPLETED
    assert result.report.title == "Update Project"
    assert notifier.reports == [result.report]


def test_perform_in_background_hands_off_after_the_chain(repo: Path) -> None:
    worker_threads: list[str] = []

    def record_thread(roots, continuation, cancel):
        worker_threads.append(threading.current_thread().name)
        return session("git")

    registry = ProviderRegistry()
    registry.register(FakeProvider("git", ScriptedEnvironment("git", [record_thread])), repo)
    action = UpdateAction(registry=registry)

    try:
        result = action.perform_in_background([repo]).result(timeout=30)
    finally:
        action.shutdown()

    assert result.report is not None
    assert result.report.outcome is Outcome.ALL_UP_TO_DATE
    assert worker_threads and worker_threads[0].startswith("vcs-update")


def test_second_chain_is_refused_while_one_runs(repo: Path) -> None:
    registry = ProviderRegistry()
    action_holder: list[UpdateAction] = []
    nested: list[BaseException] = []

    def start_another(roots, continuation, cancel):
        with pytest.raises(ChainAlreadyRunning) as ei:
            action_holder[0].perform([repo])
        nested.append(ei.value)
        return session("git")

    registry.register(FakeProvider("git", ScriptedEnvironment("git", [start_another])), repo)
    action = UpdateAction(registry=registry)
    action_holder.append(action)

    action.perform([repo])

    assert len(nested) == 1


def test_availability(repo: Path, tmp_path: Path) -> None:
    registry = ProviderRegistry()
    registry.register(FakeProvider("git", ScriptedEnvironment("git")), repo)
    action = UpdateAction(registry=registry, scope=ScopeMode.ANY)

    assert action.availability([repo]) is Availability.ENABLED
    assert action.availability([tmp_path / "nowhere"]) is Availability.HIDDEN

    assert registry.try_start_background_operation()
    try:
        assert action.availability([repo]) is Availability.DISABLED
    finally:
        registry.stop_background_operation()


def test_availability_hidden_without_supporting_provider(repo: Path) -> None:
    registry = ProviderRegistry()
    registry.register(FakeProvider("git", ScriptedEnvironment("git"), operations=[OperationKind.UPDATE]), repo)
    action = UpdateAction(registry=registry, operation=OperationKind.INTEGRATE)

    assert action.availability([repo]) is Availability.HIDDEN


def test_from_config_applies_operation_and_scope(repo: Path, tmp_path: Path) -> None:
    cfg_path = tmp_path / "update.yaml"
    cfg_path.write_text("update:\n  operation: status\n  scope: any\n  name: Refresh\n", encoding="utf-8")
    tracker = RecordingTracker()
    env = ScriptedEnvironment("git", [session("git", updated=[str(repo / "src" / "x")])])
    registry = ProviderRegistry()
    registry.register(FakeProvider("git", env, tracked=lambda p: False, operations=[OperationKind.STATUS]), repo)

    action = UpdateAction.from_config(load_config(cfg_path), registry=registry, tracker=tracker)
    result = action.perform([repo])

    assert action.name == "Refresh"
    assert result.report is not None
    assert result.report.title == "Refresh"
    assert tracker.suspends == 0
    assert tracker.dirty == [repo / "src" / "x"]


def test_no_provider_plans_is_a_no_op(repo: Path) -> None:
    tracker = RecordingTracker()
    notifier = RecordingNotifier()
    env = ScriptedEnvironment("git", collapse_to=[])
    registry = ProviderRegistry()
    registry.register(FakeProvider("git", env), repo)

    result = UpdateAction(registry=registry, tracker=tracker, notifier=notifier).perform([repo])

    assert result.started is False
    assert [r.path for r in result.roots] == [repo]
    assert env.calls == []
    assert tracker.suspends == 0
    assert notifier.reports == []
