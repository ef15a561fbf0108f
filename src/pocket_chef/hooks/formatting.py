"""Post-hooks that turn model instructions into display-ready markup.

The model is asked for numbered steps but cannot be trusted to mark them up,
so step numbers are wrapped in ``<b>`` and line breaks become ``<br/>`` here.

``format_instructions`` is NOT idempotent: a second pass appends another
line break. Apply it exactly once per raw model output (``post_process_recipe``
does this for whole recipes).
"""

import re
from typing import TypeVar

from pydantic import BaseModel

from pocket_chef.models.models import ERROR_PREFIX

RecipeT = TypeVar("RecipeT", bound=BaseModel)

LINE_BREAK = "<br/>"

# "<digits>. " with the number and period captured
_STEP_MARKER = re.compile(r"(\d+\.) ")


def normalize_escaped_newlines(text: str) -> str:
    """Turn literal ``\\n`` sequences and CRLF line endings into plain newlines."""
    return text.replace("\\r\\n", "\n").replace("\\n", "\n").replace("\r\n", "\n")


def format_instructions(text: str) -> str:
    """Bold every step marker and convert newlines to ``<br/>``.

    Example:
        >>> format_instructions("1. Mix. 2. Bake.")
        '<b>1.</b> Mix. <b>2.</b> Bake.<br/>'
    """
    parts = _STEP_MARKER.split(text)
    # split() with a capture group puts the markers at odd indexes
    formatted = "".join(f"<b>{part}</b> " if index % 2 == 1 else part for index, part in enumerate(parts))
    return (formatted + LINE_BREAK).replace("\n", LINE_BREAK)


def post_process_recipe(recipe: RecipeT) -> RecipeT:
    """Return a copy of ``recipe`` with display-ready instructions.

    Error sentinels and recipes without instructions are returned unchanged.
    """
    name = getattr(recipe, "name", "")
    instructions = getattr(recipe, "instructions", "")
    if name.startswith(ERROR_PREFIX) or not instructions.strip():
        return recipe
    formatted = format_instructions(normalize_escaped_newlines(instructions))
    return recipe.model_copy(update={"instructions": formatted})
