from __future__ import annotations

from pathlib import Path

import pytest

from submodule_builder.config import (
    DEFAULT_SETTINGS_FILE,
    NotConfiguredError,
    ProjectConfig,
    Session,
    Settings,
    SettingsError,
    load_settings,
)


def test_defaults_without_file(tmp_path):
    assert load_settings(cwd=tmp_path) == Settings()


def test_loads_default_file_from_cwd(tmp_path):
    (tmp_path / DEFAULT_SETTINGS_FILE).write_text(
        "services_dir: modules/\n"
        "default_submodules: [web, api, web]\n"
        "hosting: NONE\n"
        "sync_fail_fast: true\n"
        "unknown_key: ignored\n",
        encoding="utf-8",
    )

    settings = load_settings(cwd=tmp_path)

    assert settings.services_dir == "modules"
    assert settings.default_submodules == ("web", "api")
    assert settings.hosting == "none"
    assert settings.sync_fail_fast is True
    assert settings.parent_name == "business-services"


def test_explicit_missing_file(tmp_path):
    with pytest.raises(SettingsError):
        load_settings(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "body",
    [
        "- just\n- a list\n",
        "hosting: gitlab\n",
        "default_submodules: website\n",
        "deterministic_git: 'yes'\n",
        "services_dir: ''\n",
        "parent_name: [1, 2\n",
    ],
)
def test_invalid_settings(tmp_path, body):
    path = tmp_path / "settings.yaml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(SettingsError):
        load_settings(path)


def test_project_and_child_names():
    project = ProjectConfig(root=Path("/work"), parent_name="shop", owner="acme")
    child = project.child("ai", description="AI")

    assert project.remote_url == "https://github.com/acme/shop.git"
    assert project.submodule_path("ai") == "services/ai"
    assert project.services_path == Path("/work/services")
    assert child.repo_name == "shop-ai"
    assert child.full_name == "acme/shop-ai"


def test_session_requires_setup():
    session = Session()

    with pytest.raises(NotConfiguredError, match="Parent repository must be set up first"):
        session.require_project()

    project = ProjectConfig(root=Path("."), parent_name="shop", owner="acme")
    session.project = project
    assert session.require_project() is project
