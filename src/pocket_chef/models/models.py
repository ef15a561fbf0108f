"""Schema contracts for the recipe generation flows.

Each flow owns one request model and one response model. Requests are
validated at the boundary and frozen; responses are what the model backend
must produce (the same classes are handed to Gemini as ``response_schema``).

Wire names are camelCase (``ingredientsRequired``); Python attributes are
snake_case (``ingredients_required``). Both are accepted on input.
"""

import re
from typing import Annotated, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Difficulty = Literal["easy", "medium", "advanced"]
MealType = Literal["starter", "main", "dessert"]

ERROR_PREFIX = "Error:"


class _RequestContract(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )


class _ResponseContract(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Gemini occasionally echoes the misspelt key from older prompts.
_DIFFICULTY_ALIASES = AliasChoices("difficulty", "dificulty")


# ============================================================================
# Requests
# ============================================================================


class IngredientRequest(_RequestContract):
    """Ingredients the user has on hand, as free comma-separated text."""

    ingredients: Annotated[str, Field(description="A comma-separated list of ingredients available in the fridge.")]
    dietary_restrictions: Annotated[
        Optional[str],
        Field(None, description="Optional dietary restrictions or preferences (e.g., vegetarian, gluten-free)."),
    ]


class EventRequest(_RequestContract):
    """Details of a special occasion to cook for."""

    event_type: Annotated[
        str,
        Field(description="The type of event (e.g., Birthday Party, Anniversary Dinner, Holiday Gathering)."),
    ]
    number_of_guests: Annotated[int, Field(description="The number of guests attending the event (must be > 0).")]
    meal_type: Annotated[MealType, Field(description="The course to plan: starter, main or dessert.")]
    dietary_restrictions: Annotated[
        Optional[List[str]],
        Field(None, description="Optional list of dietary restrictions (e.g., vegetarian, gluten-free, nut-free)."),
    ]

    @field_validator("meal_type", mode="before")
    @classmethod
    def normalize_meal_type(cls, value):
        """Accept any casing and the long form "main course"."""
        if isinstance(value, str):
            value = value.strip().lower()
            if value == "main course":
                return "main"
        return value

    @field_validator("dietary_restrictions", mode="before")
    @classmethod
    def drop_blank_restrictions(cls, value):
        """Strip entries and drop blank ones; an empty list becomes None."""
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            cleaned = [item.strip() for item in value if isinstance(item, str) and item.strip()]
            return cleaned or None
        return value


class NamedRecipeRequest(_RequestContract):
    recipe_name: Annotated[str, Field("", description="The name of the recipe to find.")]

    @field_validator("recipe_name", mode="before")
    @classmethod
    def missing_name_is_empty(cls, value):
        """A missing or null name is checked like an empty one."""
        return "" if value is None else value


class ImageRequest(_RequestContract):
    recipe_name: Annotated[
        str, Field(min_length=1, description="Recipe name (or main ingredient) to build an image for.")
    ]


class FilterRequest(_RequestContract):
    recipes: Annotated[List[str], Field(description="A list of recipe suggestions.")]
    dietary_restrictions: Annotated[
        str,
        Field(
            min_length=1,
            description="Dietary restrictions or preferences (e.g., vegetarian, gluten-free, low carb).",
        ),
    ]


# ============================================================================
# Responses
# ============================================================================


class Recipe(_ResponseContract):
    """A recipe suggested from the user's available ingredients."""

    name: Annotated[str, Field(min_length=1, description="The name of the recipe.")]
    ingredients_required: Annotated[List[str], Field(description="A list of ingredients required for the recipe.")]
    instructions: Annotated[str, Field(min_length=1, description="Step-by-step instructions for the recipe.")]
    available_ingredients_used: Annotated[
        List[str], Field(description="Ingredients from the input that are used in this recipe.")
    ]
    difficulty: Annotated[
        Difficulty,
        Field(
            validation_alias=_DIFFICULTY_ALIASES,
            serialization_alias="difficulty",
            description="Difficulty level: easy, medium or advanced.",
        ),
    ]
    # Positivity is checked in require_positive_minutes: Gemini response schemas
    # reject exclusiveMinimum.
    estimated_time: Annotated[int, Field(description="Estimated elaboration time in minutes.")]

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("estimated_time", mode="before")
    @classmethod
    def parse_minutes(cls, value):
        """Accept "30 minutes" style strings by keeping the leading number."""
        if isinstance(value, str):
            match = re.match(r"\s*(\d+)", value)
            if match:
                return int(match.group(1))
        return value

    @field_validator("estimated_time")
    @classmethod
    def require_positive_minutes(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("estimated time must be greater than 0 minutes")
        return value


class RecipeSuggestions(_ResponseContract):
    """Output of the ingredient flow.

    ``error`` is set by the model instead of ``recipes`` when the input does
    not look like a list of food ingredients.
    """

    recipes: Annotated[
        List[Recipe],
        Field(default_factory=list, description="A list of recipe suggestions based on the input ingredients."),
    ]
    error: Annotated[
        Optional[str],
        Field(None, description="Set only when the input is not a list of food ingredients."),
    ]


class EventRecipe(_ResponseContract):
    """A recipe planned for an event, scaled to its guests."""

    name: Annotated[str, Field(min_length=1, description="The name of the recipe.")]
    description: Annotated[
        str, Field(description="A brief description of the recipe and why it fits the event.")
    ]
    ingredients_required: Annotated[
        List[str],
        Field(description="Ingredients with quantity and unit (e.g., '200g flour', '1 unit onion')."),
    ]
    instructions: Annotated[str, Field(min_length=1, description="Step-by-step instructions to prepare the recipe.")]
    preparation_time: Annotated[Optional[str], Field(None, description="Estimated preparation time.")]
    cooking_time: Annotated[Optional[str], Field(None, description="Estimated cooking time.")]
    servings: Annotated[
        Optional[int],
        Field(None, ge=1, description="Number of servings, ideally adjusted for the number of guests."),
    ]
    difficulty: Annotated[
        Optional[Difficulty],
        Field(
            None,
            validation_alias=_DIFFICULTY_ALIASES,
            serialization_alias="difficulty",
            description="Difficulty level: easy, medium, or advanced.",
        ),
    ]

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, value):
        """Lowercase, and treat a blank difficulty as not given."""
        if isinstance(value, str):
            return value.strip().lower() or None
        return value


class EventRecipes(_ResponseContract):
    recipes: Annotated[
        List[EventRecipe], Field(description="A list of recipes suitable for the specified event.")
    ]


class SpecificRecipe(_ResponseContract):
    """A recipe looked up by name.

    Looser than ``Recipe``: difficulty and time are free strings, and every
    field but ``name`` may be empty so the error sentinel fits the same shape.
    """

    name: Annotated[str, Field(min_length=1, description="The name of the recipe.")]
    ingredients_required: Annotated[
        List[str],
        Field(
            default_factory=list,
            description="Ingredients with name, quantity and unit (e.g., 'Tomatoes: 2 units', 'Flour: 100 grams').",
        ),
    ]
    instructions: Annotated[str, Field("", description="Step-by-step instructions for the recipe.")]
    available_ingredients_used: Annotated[
        List[str],
        Field(default_factory=list, description="Always an empty list: no available ingredients are given."),
    ]
    difficulty: Annotated[
        str,
        Field(
            "",
            validation_alias=_DIFFICULTY_ALIASES,
            serialization_alias="difficulty",
            description="Difficulty level: easy, medium, or advanced.",
        ),
    ]
    estimated_time: Annotated[str, Field("", description='Estimated elaboration minutes (e.g., "30 minutes").')]

    @field_validator("estimated_time", mode="before")
    @classmethod
    def stringify_time(cls, value):
        if isinstance(value, (int, float)):
            return f"{int(value)} minutes"
        return value

    @property
    def is_error(self) -> bool:
        """True for the in-band error sentinel."""
        return self.name.startswith(ERROR_PREFIX)

    @classmethod
    def error(cls, message: str) -> "SpecificRecipe":
        """Build the error sentinel: the message in ``name``, every other field empty."""
        if not message.startswith(ERROR_PREFIX):
            message = f"{ERROR_PREFIX} {message}"
        return cls(name=message)


class FilteredRecipes(_ResponseContract):
    filtered_recipes: Annotated[
        List[str], Field(description="The list of recipes filtered by the dietary restrictions.")
    ]


class RecipeImage(_ResponseContract):
    image_url: Annotated[str, Field(description="The URL of the generated image.")]
