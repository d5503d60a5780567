"""
Tests for the create, destroy and set-remotes use cases.
"""

import pytest

from conftest import FakePackagist, ddev_project_receipt
from eddev.adapters.registry import AdapterRegistry
from eddev.core.config.settings import EddevSettings
from eddev.core.errors import InvalidEnvironment
from eddev.core.models.action import Receipt
from eddev.core.models.environment import DdevProject
from eddev.core.use_cases.create import CreateRequest, check_root_path, create_environment, plan_create
from eddev.core.use_cases.destroy import destroy_project, select_project
from eddev.core.use_cases.remotes import fork_url, set_remotes


def _create(request, settings, registry, packagist, github=None, prompt=None):
    events = []
    result = create_environment(
        request, settings, registry,
        packagist=packagist, github=github, prompt=prompt,
        on_event=lambda kind, message: events.append((kind, message)),
    )
    return result, events


# ── create ──────────────────────────────────────────────────────────


class TestCreate:
    def test_success(self, settings, registry, mock_adapter, packagist, projects_dir):
        result, _ = _create(CreateRequest(env_name="my-env"), settings, registry, packagist)
        assert result.error is None
        assert result.exit_code == 0
        env = result.plan.environment
        assert env.name == "my-env"
        assert env.root_path == projects_dir.resolve() / "my-env"
        assert env.runtime_version == "8.1"
        assert result.plan.recipe.name == "silverstripe/installer"
        assert mock_adapter.call_ids[0] == "ddev:describe:my-env"
        assert "ddev:build" in mock_adapter.call_ids

    def test_explicit_php_version(self, settings, registry, packagist):
        result, _ = _create(CreateRequest(env_name="my-env", php_version="8.3"), settings, registry, packagist)
        assert result.plan.environment.runtime_version == "8.3"

    def test_projects_path_required(self, registry, packagist):
        result, _ = _create(CreateRequest(env_name="my-env"), EddevSettings(), registry, packagist)
        assert "EDDEV_DEFAULT_PROJECTS_PATH" in result.error
        assert result.exit_code == 1
        assert packagist.queries == []

    def test_unknown_recipe_touches_nothing(self, settings, registry, mock_adapter):
        result, _ = _create(CreateRequest(env_name="my-env", recipe="silverstripe/nope"), settings, registry, FakePackagist())
        assert result.error == "The recipe 'silverstripe/nope' doesn't exist in packagist"
        assert mock_adapter.call_ids == []

    def test_no_matching_version(self, settings, registry, mock_adapter, packagist):
        result, _ = _create(CreateRequest(env_name="my-env", recipe="cms", constraint="^9"), settings, registry, packagist)
        assert "no versions compatible" in result.error
        assert result.to_dict() == {"error": result.error}
        assert mock_adapter.call_ids == []

    def test_invalid_database(self, settings, registry, packagist):
        result, _ = _create(CreateRequest(env_name="my-env", db="postgres"), settings, registry, packagist)
        assert result.error.startswith("--db must be one of")

    def test_non_empty_root(self, settings, registry, mock_adapter, packagist, projects_dir):
        (projects_dir / "my-env").mkdir()
        (projects_dir / "my-env" / "file.txt").write_text("x")
        result, _ = _create(CreateRequest(env_name="my-env"), settings, registry, packagist)
        assert "must be empty" in result.error
        assert "fs:mkdir-root" not in mock_adapter.call_ids

    def test_name_collision_without_prompt(self, settings, registry, mock_adapter, packagist):
        mock_adapter.set_response("ddev:describe:my-env", ddev_project_receipt("my-env"))
        result, _ = _create(CreateRequest(env_name="my-env"), settings, registry, packagist)
        assert "already exists" in result.error

    def test_missing_name_prompted(self, settings, registry, packagist):
        asked = []

        def prompt(question, default):
            asked.append(default)
            return "from-prompt"

        result, _ = _create(CreateRequest(recipe="cms", constraint="~5.2"), settings, registry, packagist, prompt=prompt)
        assert asked == ["recipe-cms_5.2"]
        assert result.plan.environment.name == "from-prompt"

    def test_prs_resolved(self, settings, registry, packagist, github):
        request = CreateRequest(env_name="my-env", prs=["silverstripe/silverstripe-framework#123"])
        result, _ = _create(request, settings, registry, packagist, github=github)
        assert sorted(result.plan.prs) == ["silverstripe/framework"]
        assert result.to_dict()["prs"] == ["silverstripe/framework"]

    def test_prs_need_token(self, projects_dir, registry, packagist):
        settings = EddevSettings(default_projects_path=projects_dir)
        request = CreateRequest(env_name="my-env", prs=["silverstripe/silverstripe-framework#123"])
        result, _ = _create(request, settings, registry, packagist)
        assert "EDDEV_GITHUB_TOKEN" in result.error

    def test_unresolvable_pr_aborts_before_provisioning(self, settings, registry, mock_adapter, packagist, github):
        request = CreateRequest(env_name="my-env", prs=["silverstripe/silverstripe-framework#999"])
        result, _ = _create(request, settings, registry, packagist, github=github)
        assert "Could not resolve pull request" in result.error
        assert "ddev:config" not in mock_adapter.call_ids

    def test_no_install_drops_prs(self, settings, registry, mock_adapter, packagist, github):
        request = CreateRequest(
            env_name="my-env",
            prs=["silverstripe/silverstripe-framework#123"],
            composer_options=["--no-install"],
        )
        result, events = _create(request, settings, registry, packagist, github=github)
        assert result.plan.prs == {}
        assert ("warning", "Composer --no-install has been set. Cannot checkout PRs.") in events
        assert not any(i.startswith("git:") for i in mock_adapter.call_ids)

    def test_missing_ddev(self, settings, packagist):
        result, _ = _create(CreateRequest(env_name="my-env"), settings, AdapterRegistry(), packagist)
        assert result.error == "Required tool(s) not installed: ddev"

    def test_fatal_stage_exit_code(self, settings, registry, mock_adapter, packagist):
        mock_adapter.set_failure("composer:create")
        result, _ = _create(CreateRequest(env_name="my-env"), settings, registry, packagist)
        assert result.error is None
        assert result.exit_code == 1
        assert result.to_dict()["report"]["status"] == "fatal"

    def test_plan_only(self, settings, registry, mock_adapter, packagist):
        plan = plan_create(CreateRequest(env_name="my-env", db="mariadb", db_version="10.11"), settings, registry, packagist=packagist)
        assert plan.environment.database_flag == "--database=mariadb:10.11"
        assert mock_adapter.call_ids == ["ddev:describe:my-env"]


class TestCheckRootPath:
    def test_absent_or_empty(self, tmp_path):
        check_root_path(tmp_path / "absent")
        check_root_path(tmp_path)

    def test_file(self, tmp_path):
        (tmp_path / "f").write_text("x")
        with pytest.raises(InvalidEnvironment, match="must not be a file"):
            check_root_path(tmp_path / "f")


# ── destroy ─────────────────────────────────────────────────────────


def _list_receipt(*projects: tuple[str, str]) -> Receipt:
    raw = [{"name": name, "approot": approot, "status": "running"} for name, approot in projects]
    return Receipt.success(adapter="mock", action_id="ddev:list", metadata={"raw": raw})


class TestDestroy:
    def test_named_project(self, registry, mock_adapter):
        mock_adapter.set_response("ddev:list", _list_receipt(("first", "/p/first"), ("second", "/p/second")))
        result = destroy_project("second", registry)
        assert result.ok
        assert result.project.name == "second"
        assert mock_adapter.call_ids == ["ddev:list", "ddev:delete", "fs:remove-root"]

        delete, remove = mock_adapter.call_log[1:]
        assert delete.params["args"] == ["-O", "-y", "second"]
        assert delete.project_root == "/p/second"
        assert remove.params["path"] == "/p/second"

    def test_prompt_until_known(self, registry, mock_adapter):
        mock_adapter.set_response("ddev:list", _list_receipt(("first", "/p/first")))
        answers = iter(["nope", "first"])
        result = destroy_project(None, registry, prompt=lambda question: next(answers))
        assert result.ok
        assert result.project.name == "first"

    def test_no_projects(self, registry, mock_adapter):
        mock_adapter.set_response("ddev:list", _list_receipt())
        result = destroy_project("x", registry)
        assert result.error == "There are no current DDEV projects to destroy"

    def test_delete_failure_keeps_directory(self, registry, mock_adapter):
        mock_adapter.set_response("ddev:list", _list_receipt(("first", "/p/first")))
        mock_adapter.set_failure("ddev:delete", "containers busy")
        result = destroy_project("first", registry)
        assert "containers busy" in result.error
        assert "fs:remove-root" not in mock_adapter.call_ids

    def test_select_attempts_exhausted(self):
        projects = [DdevProject(name="a", approot="/p/a")]
        with pytest.raises(InvalidEnvironment):
            select_project(None, projects, prompt=lambda question: "b", max_attempts=2)


# ── set-remotes ─────────────────────────────────────────────────────


class TestForkUrl:
    def test_ssh(self):
        assert fork_url("git@github.com:silverstripe/silverstripe-admin.git") == (
            "git@github.com:creative-commoners/silverstripe-admin.git"
        )

    def test_https_security(self):
        assert fork_url("https://github.com/silverstripe/silverstripe-admin.git", security=True) == (
            "git@github.com:silverstripe-security/silverstripe-admin.git"
        )

    def test_not_github(self):
        with pytest.raises(ValueError, match="does not appear to be valid"):
            fork_url("https://gitlab.com/silverstripe/silverstripe-admin.git")


class TestSetRemotes:
    @pytest.fixture
    def origin(self, mock_adapter):
        mock_adapter.set_response(
            "git:remote-get-url:origin",
            Receipt.success(adapter="mock", action_id="git:remote-get-url:origin",
                            output="git@github.com:silverstripe/silverstripe-admin.git\n"),
        )

    def test_default(self, registry, mock_adapter, origin):
        result = set_remotes("/src/admin", registry)
        assert result.ok
        assert result.added == {"cc": "git@github.com:creative-commoners/silverstripe-admin.git"}
        assert result.renamed_origin
        assert mock_adapter.call_ids == [
            "git:remote-get-url:origin", "git:remote-add:cc", "git:remote-rename:origin",
        ]
        assert {ctx.project_root for ctx in mock_adapter.call_log} == {"/src/admin"}
        rename = mock_adapter.calls_for("git:remote-rename:origin")[0]
        assert rename.params["new_name"] == "orig"

    def test_security_with_fetch(self, registry, mock_adapter, origin):
        result = set_remotes("/src/admin", registry, security=True, rename_origin=False, fetch=True)
        assert result.added == {"security": "git@github.com:silverstripe-security/silverstripe-admin.git"}
        assert result.fetched
        assert mock_adapter.call_ids == ["git:remote-get-url:origin", "git:remote-add:security", "git:fetch-all"]

    def test_unreadable_origin(self, registry, mock_adapter):
        mock_adapter.set_failure("git:remote-get-url:origin", "No such remote 'origin'")
        result = set_remotes("/src/admin", registry)
        assert "No such remote" in result.error
        assert mock_adapter.call_ids == ["git:remote-get-url:origin"]

    def test_non_github_origin(self, registry, mock_adapter):
        result = set_remotes("/src/admin", registry)
        # the mock's default output is not a URL
        assert "does not appear to be valid" in result.error
