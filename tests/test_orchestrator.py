from __future__ import annotations

import pytest

from conftest import FakeHost, ScriptedPrompter
from submodule_builder.git import GitError, read_gitmodules
from submodule_builder.orchestrator import (
    SubmoduleError,
    SubmoduleOrchestrator,
    show_status,
    sync_submodules,
    validate_child_name,
)


def _orchestrator(project, world, host=None, answers=None):
    prompter = ScriptedPrompter(answers)
    orch = SubmoduleOrchestrator(project, host or FakeHost(), prompter, open_repo=world.open)
    return orch, prompter


def _snapshot(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


def test_create_submodule_adds_exactly_one_link(project, world):
    orch, _ = _orchestrator(project, world, answers={"Enter template type": "python"})

    link = orch.create_submodule("billing")

    links = read_gitmodules(project.root)
    assert [l.path for l in links] == ["services/billing"]
    assert link.path == "services/billing"
    assert link.url == "https://github.com/acme/business-services-billing.git"
    assert link.branch == "main"
    assert (project.root / "services" / "billing" / "main.py").is_file()


def test_create_submodule_commits_and_pushes_when_remote_created(project, world):
    host = FakeHost()
    orch, _ = _orchestrator(project, world, host, answers={"Make billing repository private?": True})

    orch.create_submodule("billing")

    assert host.created == [("acme/business-services-billing", "billing service module", True)]
    commits = world.commands("commit")
    assert commits[0][2] == "Initial commit for billing service"
    pushes = world.commands("push")
    assert len(pushes) == 1 and pushes[0][2:] == ("origin", "main")


def test_remote_failure_keeps_child_local_and_still_links(project, world, capsys):
    host = FakeHost(failing={"acme/business-services-billing"})
    orch, _ = _orchestrator(project, world, host)

    link = orch.create_submodule("billing")

    assert world.commands("push") == []
    assert link.url == "https://github.com/acme/business-services-billing.git"
    assert "stays local-only" in capsys.readouterr().out


def test_hosting_unavailable_skips_remote(project, world):
    host = FakeHost(available=False)
    orch, prompter = _orchestrator(project, world, host)

    orch.create_submodule("billing")

    assert host.created == []
    assert world.commands("push") == []
    assert not any(p.startswith("Make billing") for p in prompter.asked)
    assert [l.path for l in read_gitmodules(project.root)] == ["services/billing"]


def test_unknown_template_falls_back_to_empty(project, world, capsys):
    orch, _ = _orchestrator(project, world, answers={"Enter template type": "cobol"})

    orch.create_submodule("billing")

    child = project.root / "services" / "billing"
    assert (child / ".gitkeep").is_file()
    assert (child / "README.md").is_file()
    assert "using empty" in capsys.readouterr().out


def test_add_submodule_rejects_existing_path_without_mutation(project, world, capsys):
    (project.root / "services" / "billing").mkdir()
    before = _snapshot(project.root)
    orch, _ = _orchestrator(project, world, answers={"Enter submodule name": "billing"})

    with pytest.raises(SubmoduleError, match="already exists"):
        orch.add_submodule()

    assert _snapshot(project.root) == before
    assert world.log == []


def test_create_submodule_rejects_registered_link(project, world):
    (project.root / ".gitmodules").write_text(
        '[submodule "services/billing"]\n\tpath = services/billing\n\turl = https://example.invalid/b.git\n',
        encoding="utf-8",
    )
    orch, _ = _orchestrator(project, world)

    with pytest.raises(SubmoduleError):
        orch.create_submodule("billing")


def test_add_submodule_commits_link_in_parent(project, world):
    orch, _ = _orchestrator(project, world, answers={"Enter submodule name": "billing"})
    parent = world.open(project.root)
    parent.set_remote("origin", "https://github.com/acme/business-services.git")

    orch.add_submodule()

    assert parent.commits == ["Add billing submodule"]
    assert (str(project.root.resolve()), "add", ".gitmodules", "services/billing") in world.log
    assert (str(project.root.resolve()), "push", "origin", "main") in world.log


@pytest.mark.parametrize("name", ["", "  ", "a/b", "..", "-x"])
def test_validate_child_name_rejects_bad_names(name):
    with pytest.raises(SubmoduleError):
        validate_child_name(name)


def test_default_submodules_is_idempotent(project, world):
    orch, _ = _orchestrator(project, world)

    first = orch.create_default_submodules()
    after_first = read_gitmodules(project.root)
    second = orch.create_default_submodules()
    after_second = read_gitmodules(project.root)

    assert [l.path for l in first] == ["services/website", "services/apps", "services/ai"]
    assert second == []
    assert after_first == after_second
    assert world.open(project.root).commits == ["Add default submodules: website apps ai"]


def test_default_submodules_skips_existing_and_continues_after_failure(project, world, capsys):
    (project.root / "services" / "website").mkdir()
    world.failing_clones.add("apps")
    orch, _ = _orchestrator(project, world)

    created = orch.create_default_submodules()

    assert [l.path for l in created] == ["services/ai"]
    out = capsys.readouterr().out
    assert "Submodule website already exists" in out
    assert "Failed to create submodule apps" in out


def test_default_submodules_nothing_to_commit(project, world, capsys):
    for name in project.default_submodules:
        (project.root / "services" / name).mkdir()
    orch, _ = _orchestrator(project, world)

    assert orch.create_default_submodules() == []
    assert world.open(project.root).commits == []
    assert "No new submodules to commit" in capsys.readouterr().out


def _with_links(project, world):
    orch, _ = _orchestrator(project, world)
    orch.create_default_submodules()
    return world.open(project.root)


def test_sync_collects_failures_by_default(project, world):
    parent = _with_links(project, world)
    world.failing_pulls.add("apps")

    report = sync_submodules(parent)

    assert world.commands("submodule-update")
    assert report.updated == ["services/website", "services/ai"]
    assert list(report.failed) == ["services/apps"]
    assert not report.ok


def test_sync_fail_fast_stops_at_first_failure(project, world):
    parent = _with_links(project, world)
    world.failing_pulls.add("website")

    with pytest.raises(GitError):
        sync_submodules(parent, fail_fast=True)

    assert world.commands("pull") == []


def test_show_status_without_submodules(project, world, capsys):
    show_status(world.open(project.root))

    out = capsys.readouterr().out
    assert "Git Status:" in out
    assert "No submodules found" in out


def test_show_status_outside_repository(tmp_path, world, capsys):
    show_status(world.open(tmp_path))

    assert "Not a Git repository" in capsys.readouterr().out
