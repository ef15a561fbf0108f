"""Prompt templates for the recipe generation flows.

One builder per flow, each taking a validated request and returning the
prompt text. Builders never call the model. Optional sections (dietary
restrictions) are rendered only when the request carries them, so an absent
field leaves no empty header behind.

The image flow does not prompt a model at all: its phrase and URL are built
locally by build_image_phrase / build_image_url.
"""

from urllib.parse import quote

from pocket_chef.models.models import EventRequest, FilterRequest, IngredientRequest, NamedRecipeRequest

# Shown verbatim in recipe prompts so the post-processor can find step markers
STEP_FORMAT_EXAMPLE = """1. First step instruction
2. Second step instruction
3. Third step instruction"""

NOT_FOOD_ERROR = "Input must be a list of food ingredients separated by commas."

IMAGE_STYLE_SUFFIX = "fotografía de comida realista, primer plano"

# Bare animal names render as raw animals, so they are rewritten to their meat
MEAT_ANIMALS = frozenset(
    {
        "buey",
        "cabra",
        "cabrito",
        "cerdo",
        "chancho",
        "ciervo",
        "codorniz",
        "conejo",
        "cordero",
        "gallina",
        "ganso",
        "jabalí",
        "oveja",
        "pato",
        "pavo",
        "pollo",
        "puerco",
        "res",
        "ternera",
        "vaca",
        "venado",
    }
)

# Same unreserved set as JavaScript's encodeURIComponent
_URL_SAFE_CHARS = "!~*'()"


def _dietary_restrictions_section(restrictions) -> str:
    """Render the restrictions block, or an empty string when there are none.

    Args:
        restrictions: A free-text string or a list of restriction names.

    Returns:
        str: "Dietary Restrictions:" header followed by one restriction per line.
    """
    if not restrictions:
        return ""
    if isinstance(restrictions, str):
        body = restrictions.strip()
    else:
        body = "\n".join(f"- {item}" for item in restrictions)
    if not body:
        return ""
    return f"\nDietary Restrictions:\n{body}\n"


def build_ingredient_prompt(request: IngredientRequest) -> str:
    """Prompt for suggesting recipes from the ingredients a user has on hand."""
    restrictions = _dietary_restrictions_section(request.dietary_restrictions)
    return f"""You are a recipe suggestion AI. ONLY respond to requests that contain a list of food ingredients separated by commas. If the input does not look like a list of food ingredients (for example, if it contains objects, requests for jokes, poems, or anything not related to food), respond with the following JSON and nothing else:

{{"recipes": [], "error": "{NOT_FOOD_ERROR}"}}

Given the ingredients a user has on hand, suggest recipes they can make.

Ingredients:
{request.ingredients}
{restrictions}
Return a JSON object with a "recipes" array of recipes that can be made using the available ingredients, highlighting which of the provided ingredients are used in each recipe. Each recipe in the array should have:
- name
- ingredientsRequired: a list of ingredients required
- instructions: step-by-step instructions
- availableIngredientsUsed: a list of available ingredients that were used from the input
- difficulty: difficulty level (easy, medium or advanced)
- estimatedTime: estimated elaboration time in minutes (a whole number)

Important: For the step-by-step instructions, follow this format precisely:
{STEP_FORMAT_EXAMPLE}

Put each step on its own line. This format is essential for proper display."""


def build_event_prompt(request: EventRequest) -> str:
    """Prompt for planning recipes for an event and number of guests."""
    guests = request.number_of_guests
    restrictions = _dietary_restrictions_section(request.dietary_restrictions)
    adherence = (
        "\nAll suggested recipes MUST adhere strictly to the dietary restrictions above."
        if restrictions
        else ""
    )
    return f"""You are an expert event culinary planner AI. Given the event details, suggest suitable recipes.

Event Type: {request.event_type}
Number of Guests: {guests}
Meal Type: {request.meal_type}
{restrictions}
Return a JSON object with a "recipes" array of recipes suitable for this event. Each recipe in the array should have:
- name: The name of the recipe.
- description: A brief description of why this recipe is suitable for the event and number of guests.
- ingredientsRequired: A list of all ingredients required, including quantity and unit (e.g., "200g flour", "1 unit onion"). Ensure quantities are appropriately scaled for the {guests} guests.
- instructions: Step-by-step instructions for preparing the recipe, with numbered steps.
- preparationTime: Estimated preparation time (e.g., "30 minutes").
- cookingTime: Estimated cooking time (e.g., "1 hour").
- servings: The number of servings this recipe yields (should match or be easily scalable to {guests}).
- difficulty: The difficulty level (easy, medium, or advanced).

Important: For the step-by-step instructions, follow this format precisely:
{STEP_FORMAT_EXAMPLE}

Ensure the recipes are creative and appropriate for the specified event type and meal type.{adherence}"""


def build_named_recipe_prompt(request: NamedRecipeRequest) -> str:
    """Prompt for the details of one specific recipe, looked up by name."""
    name = request.recipe_name
    return f"""You are a recipe providing AI. You will be given the name of a specific recipe. Your task is to provide the details for that exact recipe.

Recipe Name:
{name}

Return a JSON object for the recipe with the following details:
- name: The name of the recipe (should match the input Recipe Name).
- ingredientsRequired: A list of ingredients required for the recipe, where each ingredient specifies its name, quantity, and unit (e.g., "Tomatoes: 2 units", "Flour: 100 grams"). Use unit counts for countable items (e.g., eggs, whole fruits) and grams for ingredients like flour or sugar.
- instructions: Step-by-step instructions for the recipe.
- availableIngredientsUsed: This field MUST be an empty array [].
- difficulty: Difficulty level (easy, medium, or advanced).
- estimatedTime: Estimated elaboration minutes (e.g., "30 minutes").

Important: For the step-by-step instructions, follow this format precisely, with a blank line between steps:
1. First step instruction

2. Second step instruction

3. Third step instruction

If you cannot find the specific recipe '{name}', respond with a JSON object where the 'name' field indicates the error, for example: {{"name": "Error: Recipe '{name}' not found", "ingredientsRequired": [], "instructions": "", "availableIngredientsUsed": [], "difficulty": "", "estimatedTime": ""}}"""


def build_filter_prompt(request: FilterRequest) -> str:
    """Prompt for keeping only the recipes that satisfy the dietary restrictions."""
    recipes = "\n".join(request.recipes)
    return f"""You are a recipe filtering expert. You will receive a list of recipes and a set of dietary restrictions.

You will return a filtered list of recipes that adhere to the dietary restrictions. Only return recipe names exactly as they appear in the list below; never invent or rename recipes.

Dietary Restrictions: {request.dietary_restrictions}
Recipes:
{recipes}

Return a JSON object with a "filteredRecipes" array."""


def build_image_phrase(recipe_name: str) -> str:
    """Describe the photo to generate for ``recipe_name``.

    A bare animal name becomes "carne de <animal>"; anything else is kept
    as given. The photographic style suffix is always appended.

    Examples:
        >>> build_image_phrase("Cerdo")
        'carne de cerdo fotografía de comida realista, primer plano'
        >>> build_image_phrase("Pollo al Curry")
        'Pollo al Curry fotografía de comida realista, primer plano'
    """
    subject = recipe_name.strip()
    if subject.lower() in MEAT_ANIMALS:
        subject = f"carne de {subject.lower()}"
    return f"{subject} {IMAGE_STYLE_SUFFIX}"


def build_image_url(recipe_name: str, base_url: str) -> str:
    """Percent-encode the image phrase (UTF-8) and append it to ``base_url``."""
    return f"{base_url}{quote(build_image_phrase(recipe_name), safe=_URL_SAFE_CHARS)}"
