"""Recipe generation flows.

Every flow has the same shape:

    parse_request → validate → build prompt → invoke model → post-process

Flows:
- generate_recipes(): recipes from the ingredients a user has on hand
- generate_event_recipes(): recipes for an event, scaled to its guests
- get_specific_recipe(): one recipe by name; never raises, errors come back in-band
- filter_recipes(): keep the recipes that satisfy dietary restrictions
- generate_recipe_image(): image URL for a recipe, built locally (no model call)

Flows are stateless; concurrent calls share nothing but the lazily built
Gemini backend. Pass ``backend=`` to use another ModelBackend (tests do).

run_flow() dispatches by public flow name and returns the JSON-shaped result
for a boundary layer (HTTP handler, CLI).
"""

from typing import Any, Awaitable, Callable, NamedTuple, Optional

from pydantic import BaseModel

from pocket_chef.errors import GenerationFailure, ValidationError
from pocket_chef.hooks.formatting import post_process_recipe
from pocket_chef.hooks.validation import (
    check_recipe_name,
    parse_request,
    validate_event_request,
    validate_ingredient_request,
)
from pocket_chef.llm.invoker import ModelBackend, get_default_backend, invoke
from pocket_chef.models.models import (
    EventRecipes,
    EventRequest,
    FilteredRecipes,
    FilterRequest,
    ImageRequest,
    IngredientRequest,
    NamedRecipeRequest,
    RecipeImage,
    RecipeSuggestions,
    SpecificRecipe,
)
from pocket_chef.prompts.prompts import (
    build_event_prompt,
    build_filter_prompt,
    build_image_url,
    build_ingredient_prompt,
    build_named_recipe_prompt,
)
from pocket_chef.utils.config import config
from pocket_chef.utils.logger import logger

# Favor determinism when looking up a known recipe
NAMED_RECIPE_TEMPERATURE = 0.3


async def generate_recipes(data: Any, backend: Optional[ModelBackend] = None) -> RecipeSuggestions:
    """Suggest recipes that can be made from the available ingredients.

    Args:
        data: ``{"ingredients": str, "dietaryRestrictions"?: str}`` or an IngredientRequest.
        backend: Model backend. Default: shared Gemini backend.

    Returns:
        RecipeSuggestions with display-ready instructions.

    Raises:
        ValidationError: The ingredients do not look like food (checked
            locally before the model is called, and again if the model
            refuses the input).
        GenerationFailure: The model failed or returned non-conforming output.
    """
    flow = {"flow": "generate-recipes"}
    request = validate_ingredient_request(parse_request(IngredientRequest, data))

    logger.info(f"Generating recipes for ingredients: {request.ingredients}", extra=flow)
    result = await invoke(backend or get_default_backend(), build_ingredient_prompt(request), RecipeSuggestions)

    if result.error and not result.recipes:
        logger.warning(f"Model rejected ingredient input: {result.error}", extra=flow)
        raise ValidationError(result.error)

    logger.info(f"Generated {len(result.recipes)} recipe(s)", extra=flow)
    return RecipeSuggestions(recipes=[post_process_recipe(recipe) for recipe in result.recipes])


async def generate_event_recipes(data: Any, backend: Optional[ModelBackend] = None) -> EventRecipes:
    """Suggest recipes for an event, with quantities scaled to the guests.

    Args:
        data: ``{"eventType", "numberOfGuests", "mealType", "dietaryRestrictions"?}``
            or an EventRequest.
        backend: Model backend. Default: shared Gemini backend.

    Raises:
        ValidationError: Blank event type or fewer than one guest. Raised
            before the model is called.
        GenerationFailure: The model failed or returned non-conforming output.
    """
    flow = {"flow": "generate-event-recipes"}
    request = validate_event_request(parse_request(EventRequest, data))

    logger.info(
        f"Planning {request.meal_type} recipes for '{request.event_type}' ({request.number_of_guests} guests)",
        extra=flow,
    )
    result = await invoke(backend or get_default_backend(), build_event_prompt(request), EventRecipes)

    logger.info(f"Generated {len(result.recipes)} event recipe(s)", extra=flow)
    return EventRecipes(recipes=[post_process_recipe(recipe) for recipe in result.recipes])


async def get_specific_recipe(data: Any, backend: Optional[ModelBackend] = None) -> SpecificRecipe:
    """Look up one recipe by name.

    Never raises: invalid input, short names, and model failures all come
    back as an error sentinel (``name`` starts with "Error:", every other
    field empty).

    Args:
        data: ``{"recipeName": str}`` or a NamedRecipeRequest.
        backend: Model backend. Default: shared Gemini backend.
    """
    flow = {"flow": "get-specific-recipe"}
    try:
        request = parse_request(NamedRecipeRequest, data)
    except ValidationError as e:
        logger.warning(f"Invalid named-recipe request: {e}", extra=flow)
        return SpecificRecipe.error(str(e))

    short_name_error = check_recipe_name(request)
    if short_name_error is not None:
        return short_name_error

    logger.info(f"Looking up recipe '{request.recipe_name}'", extra=flow)
    try:
        result = await invoke(
            backend or get_default_backend(),
            build_named_recipe_prompt(request),
            SpecificRecipe,
            temperature=NAMED_RECIPE_TEMPERATURE,
        )
    except GenerationFailure as e:
        if e.reason == GenerationFailure.NO_OUTPUT:
            logger.error(f"LLM response output was empty for '{request.recipe_name}'", extra=flow)
            return SpecificRecipe.error(f"No valid output from LLM for '{request.recipe_name}'.")
        logger.error(f"Error calling model for '{request.recipe_name}': {e}", extra=flow)
        return SpecificRecipe.error(
            f"Could not generate recipe for '{request.recipe_name}' due to an internal error."
        )
    except Exception as e:
        logger.error(f"Unexpected error looking up '{request.recipe_name}': {e}", exc_info=True, extra=flow)
        return SpecificRecipe.error(
            f"Could not generate recipe for '{request.recipe_name}' due to an internal error."
        )

    if result.is_error:
        logger.warning(f"Model reported: {result.name}", extra=flow)
    return post_process_recipe(result)


async def filter_recipes(data: Any, backend: Optional[ModelBackend] = None) -> FilteredRecipes:
    """Keep the recipes that satisfy the dietary restrictions.

    The answer is restricted to names from the input list, in the model's
    order and without duplicates, so the result is always a subset of
    ``recipes``.

    Raises:
        ValidationError: The request does not match FilterRequest.
        GenerationFailure: The model failed or returned non-conforming output.
    """
    flow = {"flow": "filter-recipes"}
    request = parse_request(FilterRequest, data)
    if not request.recipes:
        return FilteredRecipes(filtered_recipes=[])

    logger.info(
        f"Filtering {len(request.recipes)} recipe(s) for: {request.dietary_restrictions}",
        extra=flow,
    )
    result = await invoke(backend or get_default_backend(), build_filter_prompt(request), FilteredRecipes)

    allowed = set(request.recipes)
    kept = list(dict.fromkeys(name for name in result.filtered_recipes if name in allowed))
    dropped = len(result.filtered_recipes) - len(kept)
    if dropped:
        logger.warning(f"Dropped {dropped} recipe(s) not present in the input list", extra=flow)
    return FilteredRecipes(filtered_recipes=kept)


async def generate_recipe_image(data: Any) -> RecipeImage:
    """Build the image-service URL for a recipe name.

    Deterministic and local: no model is called.

    Raises:
        ValidationError: The request does not match ImageRequest.
    """
    request = parse_request(ImageRequest, data)
    image_url = build_image_url(request.recipe_name, config.IMAGE_BASE_URL)
    logger.debug(f"Image URL for '{request.recipe_name}': {image_url}", extra={"flow": "generate-recipe-images"})
    return RecipeImage(image_url=image_url)


# ============================================================================
# Dispatch by public flow name
# ============================================================================


class FlowEntry(NamedTuple):
    run: Callable[..., Awaitable[BaseModel]]
    uses_backend: bool


FLOWS: dict[str, FlowEntry] = {
    "generate-recipes": FlowEntry(generate_recipes, True),
    "generate-event-recipes": FlowEntry(generate_event_recipes, True),
    "get-specific-recipe": FlowEntry(get_specific_recipe, True),
    "filter-recipes": FlowEntry(filter_recipes, True),
    "generate-recipe-images": FlowEntry(generate_recipe_image, False),
}


async def run_flow(name: str, data: Any, backend: Optional[ModelBackend] = None) -> dict[str, Any]:
    """Run the flow registered under ``name`` and return its JSON-shaped result.

    Raises:
        ValueError: Unknown flow name.
        ValidationError, GenerationFailure: As raised by the flow.
    """
    entry = FLOWS.get(name)
    if entry is None:
        raise ValueError(f"Unknown flow '{name}'. Available flows: {', '.join(FLOWS)}")

    if entry.uses_backend:
        result = await entry.run(data, backend=backend)
    else:
        result = await entry.run(data)
    return result.model_dump(by_alias=True, exclude_none=True)
