"""
Tests for recipe expansion, version selection and PHP version derivation.
"""

import pytest

from conftest import FakePackagist
from eddev.core.errors import InvalidOption, NoMatchingVersion, RecipeNotFound, UndeterminedRuntimeVersion
from eddev.core.models.recipe import RECIPE_SHORTCUTS, Recipe
from eddev.core.services.recipe_resolver import (
    expand_recipe,
    resolve_recipe,
    select_runtime_version,
    select_version,
)


def _recipe(php: str | None) -> Recipe:
    return Recipe(
        name="silverstripe/installer",
        version_constraint="5.x-dev",
        resolved_version="5.x-dev",
        runtime_dependency_constraint=php,
    )


class TestExpandRecipe:
    @pytest.mark.parametrize(("alias", "canonical"), sorted(RECIPE_SHORTCUTS.items()))
    def test_shortcuts_expand_once(self, alias, canonical):
        assert expand_recipe(alias) == canonical
        assert expand_recipe(expand_recipe(alias)) == canonical

    def test_unknown_name_untouched(self):
        assert expand_recipe("vendor/custom-recipe") == "vendor/custom-recipe"


class TestSelectVersion:
    def test_exact_key_wins(self):
        versions = {"5.x-dev": {}, "5.2.0": {}}
        assert select_version(versions, "5.x-dev") == "5.x-dev"

    def test_highest_satisfying(self):
        versions = {"5.1.0": {}, "5.2.3": {}, "5.2.0": {}, "6.0.0": {}}
        assert select_version(versions, "~5.1") == "5.2.3"

    def test_no_match(self):
        assert select_version({"4.0.0": {}}, "^5") is None

    def test_malformed_constraint(self):
        with pytest.raises(ValueError):
            select_version({"4.0.0": {}}, "^^5")


class TestResolveRecipe:
    def test_installer_dev_branch(self, packagist):
        recipe = resolve_recipe("installer", "5.x-dev", packagist)
        assert recipe.name == "silverstripe/installer"
        assert recipe.resolved_version == "5.x-dev"
        assert recipe.runtime_dependency_constraint == "^8.1"
        assert packagist.queries == ["silverstripe/installer"]

    def test_highest_match_selected(self, packagist):
        recipe = resolve_recipe("cms", "~5.2", packagist)
        # 5.3.0-beta1 also satisfies ~5.2 and sorts highest
        assert recipe.resolved_version == "5.3.0-beta1"

    def test_caret_excludes_next_major(self, packagist):
        recipe = resolve_recipe("silverstripe/recipe-cms", "5.2.*", packagist)
        assert recipe.resolved_version == "5.2.3"

    def test_unknown_recipe(self, packagist):
        with pytest.raises(RecipeNotFound):
            resolve_recipe("silverstripe/does-not-exist", "^5", packagist)

    def test_no_matching_version(self, packagist):
        with pytest.raises(NoMatchingVersion) as exc:
            resolve_recipe("cms", "^9", packagist)
        assert "silverstripe/recipe-cms" in str(exc.value)

    def test_invalid_package_name_never_queries(self):
        source = FakePackagist()
        with pytest.raises(InvalidOption):
            resolve_recipe("Not A Package", "^5", source)
        assert source.queries == []

    def test_malformed_constraint(self, packagist):
        with pytest.raises(InvalidOption):
            resolve_recipe("installer", "^^5", packagist)


class TestSelectRuntimeVersion:
    def test_explicit_version_wins(self):
        assert select_runtime_version(_recipe("^8.1"), "8.3") == "8.3"

    def test_caret_lower_bound(self):
        assert select_runtime_version(_recipe("^8.1")) == "8.1"

    def test_lowest_or_branch(self):
        assert select_runtime_version(_recipe("^7.4 || ^8.0")) == "7.4"

    def test_never_upper_bound(self):
        assert select_runtime_version(_recipe(">=8.1 <8.4")) == "8.1"

    def test_two_digit_minor(self):
        assert select_runtime_version(_recipe("^8.10")) == "8.10"

    def test_missing_php_requirement(self):
        with pytest.raises(UndeterminedRuntimeVersion):
            select_runtime_version(_recipe(None))

    @pytest.mark.parametrize("constraint", ["*", "<8"])
    def test_no_lower_bound(self, constraint):
        with pytest.raises(UndeterminedRuntimeVersion):
            select_runtime_version(_recipe(constraint))

    def test_scenario_installer(self, packagist):
        recipe = resolve_recipe("installer", "5.x-dev", packagist)
        assert select_runtime_version(recipe) == "8.1"
