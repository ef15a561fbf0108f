"""Input validation pre-hooks for the generation flows.

Runs before any prompt is rendered or any backend call is made:
1. parse_request - coerce the caller's JSON-shaped dict into the flow's request contract
2. validate_ingredient_request / validate_event_request - domain rules, raise ValidationError
3. check_recipe_name - returns an error sentinel instead of raising

Filter and image requests only go through parse_request.
"""

import re
from typing import Any, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pocket_chef.errors import ValidationError
from pocket_chef.models.models import EventRequest, IngredientRequest, NamedRecipeRequest, SpecificRecipe

RequestT = TypeVar("RequestT", bound=BaseModel)

INGREDIENTS_ERROR_MESSAGE = "Please enter only comma-separated food ingredients. Example: tomato, rice, chicken"
EVENT_TYPE_ERROR_MESSAGE = "Please specify the event type."
GUESTS_ERROR_MESSAGE = "The number of guests must be greater than zero."
SHORT_NAME_ERROR_MESSAGE = "Error: Recipe name must be at least 3 characters long."

MIN_RECIPE_NAME_LENGTH = 3

# Unicode letters (accented included) and whitespace only
_PLAUSIBLE_INGREDIENT = re.compile(r"^(?:[^\W\d_]|\s)+$")


def parse_request(model: type[RequestT], data: Any) -> RequestT:
    """Coerce ``data`` into ``model``, reporting shape errors as ValidationError.

    Args:
        model: Request contract class.
        data: JSON-shaped dict, or an existing instance of ``model``.

    Returns:
        Validated, frozen request instance.

    Raises:
        ValidationError: If ``data`` does not match the contract. The message
            names the first offending field.
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "request"
        raise ValidationError(f"Invalid request field '{field}': {first['msg']}") from e


def is_valid_ingredient_input(text: Optional[str]) -> bool:
    """Check that ``text`` plausibly lists food ingredients.

    Splits on commas, trims each item and drops empty ones. The input is
    plausible when at least one item is made only of letters and spaces and
    is longer than 2 characters.

    Examples:
        >>> is_valid_ingredient_input("tomate, arroz, pollo")
        True
        >>> is_valid_ingredient_input("1, 2, ?")
        False
    """
    if not text:
        return False
    items = [item.strip() for item in text.split(",")]
    plausible = [item for item in items if len(item) > 2 and _PLAUSIBLE_INGREDIENT.match(item)]
    return len(plausible) > 0


def validate_ingredient_request(request: IngredientRequest) -> IngredientRequest:
    """Raises:
    ValidationError: If the ingredient list does not look like food.
    """
    if not is_valid_ingredient_input(request.ingredients):
        raise ValidationError(INGREDIENTS_ERROR_MESSAGE)
    return request


def validate_event_request(request: EventRequest) -> EventRequest:
    """Reject blank event types and non-positive guest counts.

    Raises:
        ValidationError: With a message suitable for direct display.
    """
    if not request.event_type or not request.event_type.strip():
        raise ValidationError(EVENT_TYPE_ERROR_MESSAGE)
    if request.number_of_guests <= 0:
        raise ValidationError(GUESTS_ERROR_MESSAGE)
    return request


def check_recipe_name(request: NamedRecipeRequest) -> Optional[SpecificRecipe]:
    """Return the error sentinel for names shorter than 3 characters, else None."""
    if len(request.recipe_name.strip()) < MIN_RECIPE_NAME_LENGTH:
        return SpecificRecipe.error(SHORT_NAME_ERROR_MESSAGE)
    return None
