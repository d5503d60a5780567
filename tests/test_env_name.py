"""
Tests for environment name validation, defaults and prompting.
"""

import pytest

from conftest import ddev_project_receipt
from eddev.core.errors import InvalidEnvironment
from eddev.core.services.ddev_projects import DdevProjects
from eddev.core.services.env_name import (
    EnvironmentNameResolver,
    derive_default_name,
    has_forbidden_chars,
)


class ScriptedPrompt:
    """Answers prompts from a fixed list and records what was asked."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.asked: list[tuple[str, str]] = []

    def __call__(self, question: str, default: str) -> str:
        self.asked.append((question, default))
        return self.answers.pop(0)


def _never_exists(name: str) -> bool:
    return False


class TestForbiddenChars:
    @pytest.mark.parametrize("name", ["my env", "a.b", "a/b", "a:b", "a@b", "a'b", 'a"b', "a\\b", "a;b", "a?b"])
    def test_rejected(self, name):
        assert has_forbidden_chars(name)

    @pytest.mark.parametrize("name", ["my-env", "my_env", "env5", "CMS-5-2"])
    def test_accepted(self, name):
        assert not has_forbidden_chars(name)


class TestDefaultName:
    def test_recipe_and_version(self):
        assert derive_default_name("silverstripe/recipe-cms", "~5.2") == "recipe-cms_5.2"

    def test_dev_branch(self):
        assert derive_default_name("silverstripe/installer", "5.x-dev") == "installer_5.x"

    def test_named_branch(self):
        assert derive_default_name("silverstripe/installer", "dev-main") == "installer_main"

    def test_with_prs(self):
        assert derive_default_name("silverstripe/installer", "5.x-dev", has_prs=True) == "installer_5.x_with-prs"

    def test_caret(self):
        assert derive_default_name("silverstripe/recipe-core", "^5") == "recipe-core_5"


class TestResolve:
    def test_valid_name_returned(self):
        resolver = EnvironmentNameResolver(_never_exists)
        assert resolver.resolve("my-env", "silverstripe/installer", "5.x-dev") == "my-env"

    def test_invalid_name_without_prompt(self):
        resolver = EnvironmentNameResolver(_never_exists)
        with pytest.raises(InvalidEnvironment, match="must not contain"):
            resolver.resolve("my env", "silverstripe/installer", "5.x-dev")

    def test_missing_name_without_prompt(self):
        resolver = EnvironmentNameResolver(_never_exists)
        with pytest.raises(InvalidEnvironment, match="must not be empty"):
            resolver.resolve(None, "silverstripe/installer", "5.x-dev")

    def test_missing_name_prompts_with_default(self):
        prompt = ScriptedPrompt("chosen")
        resolver = EnvironmentNameResolver(_never_exists, prompt)
        assert resolver.resolve(None, "silverstripe/recipe-cms", "~5.2") == "chosen"
        assert prompt.asked == [("Name this environment", "recipe-cms_5.2")]

    def test_dotted_default_is_rejected_when_accepted(self):
        prompt = ScriptedPrompt("recipe-cms_5.2", "recipe-cms_5-2")
        resolver = EnvironmentNameResolver(_never_exists, prompt)
        assert resolver.resolve(None, "silverstripe/recipe-cms", "~5.2") == "recipe-cms_5-2"
        assert len(prompt.asked) == 2

    def test_dotted_default_rejection_says_to_replace_dots(self, caplog):
        prompt = ScriptedPrompt("installer_5.x")
        resolver = EnvironmentNameResolver(_never_exists, prompt, max_attempts=1)
        with pytest.raises(InvalidEnvironment, match="replace the dots in the suggested name"):
            resolver.resolve(None, "silverstripe/installer", "5.x-dev")
        assert prompt.asked == [("Name this environment", "installer_5.x")]
        assert "replace the dots" in caplog.text

    def test_other_dotted_answer_has_plain_message(self):
        resolver = EnvironmentNameResolver(_never_exists, ScriptedPrompt("my.env"), max_attempts=1)
        with pytest.raises(InvalidEnvironment) as exc_info:
            resolver.resolve(None, "silverstripe/installer", "5.x-dev")
        assert "suggested name" not in str(exc_info.value)

    def test_collision_prompts_again(self):
        taken = {"my-env"}
        prompt = ScriptedPrompt("my-env", "my-env-2")
        resolver = EnvironmentNameResolver(taken.__contains__, prompt)
        assert resolver.resolve("my-env", "silverstripe/installer", "5.x-dev") == "my-env-2"
        assert len(prompt.asked) == 2

    def test_attempts_exhausted(self):
        prompt = ScriptedPrompt("bad name", "", "still.bad")
        resolver = EnvironmentNameResolver(_never_exists, prompt, max_attempts=3)
        with pytest.raises(InvalidEnvironment, match="after 3 attempt"):
            resolver.resolve(None, "silverstripe/installer", "5.x-dev")

    def test_answer_is_stripped(self):
        resolver = EnvironmentNameResolver(_never_exists, ScriptedPrompt("  padded  "))
        assert resolver.resolve(None, "silverstripe/installer", "5.x-dev") == "padded"


class TestDdevCollision:
    def test_unknown_project_is_free(self, registry):
        assert not DdevProjects(registry).exists("my-env")

    def test_existing_project_collides(self, registry, mock_adapter):
        mock_adapter.set_response("ddev:describe:my-env", ddev_project_receipt("my-env"))
        resolver = EnvironmentNameResolver(DdevProjects(registry).exists)
        assert resolver.problem("my-env") == "A DDEV project named 'my-env' already exists"
        assert resolver.validate("other-env")
