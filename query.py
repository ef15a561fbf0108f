#!/usr/bin/env python3
"""Ad hoc runner for the recipe generation flows.

Run a single flow directly, without any server in front of it.

Usage:
    python query.py generate-recipes '{"ingredients": "tomato, rice, chicken"}'
    python query.py generate-event-recipes '{"eventType": "Birthday Party", "numberOfGuests": 12, "mealType": "main"}'
    python query.py get-specific-recipe "Paella Valenciana"
    python query.py filter-recipes '{"recipes": ["Paella", "Gazpacho"], "dietaryRestrictions": "vegetarian"}'
    python query.py generate-recipe-images "Pollo al Curry"
    python query.py --debug generate-recipes "tomato, rice"   # Show full JSON result

Plain text (not JSON) is wrapped into the flow's main field: ingredients for
generate-recipes, recipeName for the recipe and image flows.
"""

import asyncio
import json
import re
import sys

from rich.console import Console
from rich.markdown import Markdown

from pocket_chef.errors import GenerationFailure, ValidationError
from pocket_chef.flows.flows import FLOWS, run_flow
from pocket_chef.utils.logger import logger

console = Console()

PLAIN_TEXT_FIELDS = {
    "generate-recipes": "ingredients",
    "get-specific-recipe": "recipeName",
    "generate-recipe-images": "recipeName",
}


def build_request(flow_name: str, query: str) -> dict:
    """Parse ``query`` as JSON, or wrap plain text into the flow's main field.

    Raises:
        ValueError: Plain text given to a flow that needs a JSON object.
    """
    try:
        request_data = json.loads(query)
        if isinstance(request_data, dict):
            return request_data
    except json.JSONDecodeError:
        pass

    field = PLAIN_TEXT_FIELDS.get(flow_name)
    if field is None:
        raise ValueError(f"Flow '{flow_name}' needs a JSON object as input")
    return {field: query}


def instructions_to_markdown(instructions: str) -> str:
    """Convert display markup (``<b>``, ``<br/>``) back to markdown for the terminal."""
    text = re.sub(r"<b>(.*?)</b>", r"**\1**", instructions)
    return text.replace("<br/>", "  \n")


def render_result(result: dict) -> str:
    """Render a flow result as markdown."""
    if "imageUrl" in result:
        return f"🖼️ [{result['imageUrl']}]({result['imageUrl']})"

    if "filteredRecipes" in result:
        if not result["filteredRecipes"]:
            return "_No recipe matches the dietary restrictions._"
        return "\n".join(f"- {name}" for name in result["filteredRecipes"])

    recipes = result.get("recipes", [result] if "name" in result else [])
    sections = []
    for recipe in recipes:
        lines = [f"## {recipe['name']}"]
        if recipe.get("description"):
            lines.append(recipe["description"])
        meta = [
            f"{label}: {recipe[key]}"
            for label, key in (
                ("Difficulty", "difficulty"),
                ("Time", "estimatedTime"),
                ("Preparation", "preparationTime"),
                ("Cooking", "cookingTime"),
                ("Servings", "servings"),
            )
            if recipe.get(key)
        ]
        if meta:
            lines.append(" · ".join(str(item) for item in meta))
        if recipe.get("ingredientsRequired"):
            lines.append("### Ingredients")
            lines.extend(f"- {ingredient}" for ingredient in recipe["ingredientsRequired"])
        if recipe.get("instructions"):
            lines.append("### Instructions")
            lines.append(instructions_to_markdown(recipe["instructions"]))
        sections.append("\n\n".join(lines))
    return "\n\n---\n\n".join(sections) or "_No recipes returned._"


def run_query(flow_name: str, query: str, debug: bool = False) -> None:
    """Execute a single flow and print its result.

    Args:
        flow_name: Public flow name (see FLOWS).
        query: JSON request, or plain text for single-field flows.
        debug: If True, also display the full JSON result.
    """
    try:
        request_data = build_request(flow_name, query)
        logger.info(f"Running flow '{flow_name}' with: {request_data}")

        result = asyncio.run(run_flow(flow_name, request_data))

        console.print()
        if debug:
            console.print("[bold cyan]Debug Mode: Full Result[/bold cyan]")
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print_json(data=result)
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print()

        console.print(Markdown(render_result(result)))

    except ValidationError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(2)
    except GenerationFailure as e:
        logger.error(f"Generation failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    debug_mode = False
    args = sys.argv[1:]
    while args and args[0].startswith("--"):
        if args[0] == "--debug":
            debug_mode = True
            args = args[1:]
        else:
            print(f"Unknown flag: {args[0]}")
            sys.exit(1)

    if len(args) < 2 or args[0] not in FLOWS:
        print("Usage: python query.py [--debug] <flow> \"<json or text>\"")
        print("")
        print("Flows:")
        for name in FLOWS:
            print(f"  {name}")
        sys.exit(1)

    # Join all arguments after the flow name (handles unquoted text with spaces)
    run_query(args[0], " ".join(args[1:]), debug=debug_mode)
