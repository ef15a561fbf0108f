"""Unit tests for the query.py command line runner."""

from unittest.mock import AsyncMock, patch

import pytest

import query
from pocket_chef.errors import GenerationFailure, ValidationError


class TestBuildRequest:
    def test_json_object(self):
        assert query.build_request("filter-recipes", '{"recipes": ["Paella"], "dietaryRestrictions": "vegan"}') == {
            "recipes": ["Paella"],
            "dietaryRestrictions": "vegan",
        }

    def test_plain_text_wrapped(self):
        assert query.build_request("generate-recipes", "tomato, rice") == {"ingredients": "tomato, rice"}
        assert query.build_request("get-specific-recipe", "Paella") == {"recipeName": "Paella"}
        assert query.build_request("generate-recipe-images", "Cerdo") == {"recipeName": "Cerdo"}

    def test_json_scalar_treated_as_text(self):
        assert query.build_request("get-specific-recipe", "42") == {"recipeName": "42"}

    def test_plain_text_needs_json_flow(self):
        with pytest.raises(ValueError, match="JSON object"):
            query.build_request("generate-event-recipes", "birthday")


class TestRenderResult:
    def test_instructions_to_markdown(self):
        assert query.instructions_to_markdown("<b>1.</b> Mix.<br/>") == "**1.** Mix.  \n"

    def test_image(self):
        assert query.render_result({"imageUrl": "https://x"}) == "🖼️ [https://x](https://x)"

    def test_filtered(self):
        assert query.render_result({"filteredRecipes": ["Gazpacho", "Salad"]}) == "- Gazpacho\n- Salad"

    def test_filtered_empty(self):
        assert "No recipe" in query.render_result({"filteredRecipes": []})

    def test_recipe_list(self):
        markdown = query.render_result(
            {
                "recipes": [
                    {
                        "name": "Tomato Rice",
                        "ingredientsRequired": ["rice"],
                        "instructions": "<b>1.</b> Cook.<br/>",
                        "difficulty": "easy",
                        "estimatedTime": 20,
                    }
                ]
            }
        )
        assert "## Tomato Rice" in markdown
        assert "Difficulty: easy · Time: 20" in markdown
        assert "- rice" in markdown
        assert "**1.** Cook." in markdown

    def test_single_recipe(self):
        assert query.render_result({"name": "Paella", "instructions": ""}).startswith("## Paella")

    def test_no_recipes(self):
        assert query.render_result({"recipes": []}) == "_No recipes returned._"


class TestRunQuery:
    def test_prints_result(self):
        with patch.object(query, "run_flow", new=AsyncMock(return_value={"imageUrl": "https://x"})) as mock_run, \
                patch.object(query, "console") as mock_console:
            query.run_query("generate-recipe-images", "Cerdo")

        mock_run.assert_awaited_once_with("generate-recipe-images", {"recipeName": "Cerdo"})
        assert mock_console.print.called

    def test_validation_error_exit_code(self):
        with patch.object(query, "run_flow", new=AsyncMock(side_effect=ValidationError("bad input"))), \
                patch.object(query, "console"):
            with pytest.raises(SystemExit) as exc:
                query.run_query("generate-recipes", "1, 2")
        assert exc.value.code == 2

    def test_generation_failure_exit_code(self):
        with patch.object(query, "run_flow", new=AsyncMock(side_effect=GenerationFailure("boom"))), \
                patch.object(query, "console"):
            with pytest.raises(SystemExit) as exc:
                query.run_query("generate-recipes", "tomato")
        assert exc.value.code == 1
