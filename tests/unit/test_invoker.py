"""Unit tests for the model invoker and the Gemini backend."""

import json
from unittest.mock import MagicMock, patch

import pytest

from pocket_chef.errors import GenerationFailure
from pocket_chef.llm.invoker import GeminiBackend, invoke, parse_model_response
from pocket_chef.models.models import FilteredRecipes, RecipeImage, SpecificRecipe
from pocket_chef.utils.config import config


class TestParseModelResponse:
    def test_direct_json(self):
        assert parse_model_response('{"filteredRecipes": ["Gazpacho"]}') == {"filteredRecipes": ["Gazpacho"]}

    def test_json_wrapped_in_prose(self):
        text = 'Here you go:\n```json\n{"imageUrl": "https://x"}\n```\nEnjoy!'
        assert parse_model_response(text) == {"imageUrl": "https://x"}

    @pytest.mark.parametrize("text", [None, "", "   ", "no json here", "[1, 2, 3]", "{broken"])
    def test_unparseable(self, text):
        assert parse_model_response(text) is None


class TestInvoke:
    @pytest.mark.asyncio
    async def test_validates_json_text(self, fake_backend):
        backend = fake_backend(response='{"filteredRecipes": ["Gazpacho"]}')

        result = await invoke(backend, "prompt", FilteredRecipes)

        assert isinstance(result, FilteredRecipes)
        assert result.filtered_recipes == ["Gazpacho"]
        assert len(backend.calls) == 1
        assert backend.calls[0]["schema"] is FilteredRecipes
        assert backend.calls[0]["temperature"] is None

    @pytest.mark.asyncio
    async def test_passes_temperature(self, fake_backend):
        backend = fake_backend(response={"filteredRecipes": []})
        await invoke(backend, "prompt", FilteredRecipes, temperature=0.3)
        assert backend.calls[0]["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_accepts_dict(self, fake_backend):
        result = await invoke(fake_backend(response={"imageUrl": "https://x"}), "p", RecipeImage)
        assert result.image_url == "https://x"

    @pytest.mark.asyncio
    async def test_accepts_schema_instance(self, fake_backend):
        instance = RecipeImage(image_url="https://x")
        assert await invoke(fake_backend(response=instance), "p", RecipeImage) is instance

    @pytest.mark.asyncio
    async def test_accepts_other_model_by_dumping(self, fake_backend):
        other = FilteredRecipes(filtered_recipes=["Paella"])
        result = await invoke(fake_backend(response=other), "p", FilteredRecipes)
        assert result.filtered_recipes == ["Paella"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [None, "", "   ", {}])
    async def test_no_output(self, fake_backend, response):
        with pytest.raises(GenerationFailure) as exc:
            await invoke(fake_backend(response=response), "p", FilteredRecipes)
        assert exc.value.reason == GenerationFailure.NO_OUTPUT

    @pytest.mark.asyncio
    async def test_not_json(self, fake_backend):
        with pytest.raises(GenerationFailure) as exc:
            await invoke(fake_backend(response="I cannot help with that"), "p", FilteredRecipes)
        assert exc.value.reason == GenerationFailure.INVALID_OUTPUT
        assert exc.value.raw_output == "I cannot help with that"

    @pytest.mark.asyncio
    async def test_schema_mismatch(self, fake_backend):
        with pytest.raises(GenerationFailure) as exc:
            await invoke(fake_backend(response={"filteredRecipes": "Paella"}), "p", FilteredRecipes)
        assert exc.value.reason == GenerationFailure.INVALID_OUTPUT
        assert json.loads(exc.value.raw_output) == {"filteredRecipes": "Paella"}

    @pytest.mark.asyncio
    async def test_backend_error(self, fake_backend):
        backend = fake_backend(error=RuntimeError("quota exceeded"))
        with pytest.raises(GenerationFailure) as exc:
            await invoke(backend, "p", FilteredRecipes)
        assert exc.value.reason == GenerationFailure.BACKEND_ERROR
        assert "quota exceeded" in str(exc.value)
        assert isinstance(exc.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_backend_generation_failure_passes_through(self, fake_backend):
        failure = GenerationFailure("empty", reason=GenerationFailure.NO_OUTPUT)
        with pytest.raises(GenerationFailure) as exc:
            await invoke(fake_backend(error=failure), "p", FilteredRecipes)
        assert exc.value is failure

    @pytest.mark.asyncio
    async def test_called_once_without_retries(self, fake_backend):
        backend = fake_backend(response="not json")
        with pytest.raises(GenerationFailure):
            await invoke(backend, "p", SpecificRecipe)
        assert len(backend.calls) == 1


class TestGeminiBackend:
    def make_client(self, text):
        client = MagicMock()
        client.models.generate_content.return_value = MagicMock(text=text)
        return client

    @pytest.mark.asyncio
    async def test_generate_requests_json_schema(self):
        client = self.make_client('{"filteredRecipes": []}')
        backend = GeminiBackend(model="gemini-test", max_output_tokens=1024, client=client)

        text = await backend.generate("Filter these", FilteredRecipes, temperature=0.2)

        assert text == '{"filteredRecipes": []}'
        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == "Filter these"
        generation_config = kwargs["config"]
        assert generation_config.response_mime_type == "application/json"
        assert generation_config.response_schema is FilteredRecipes
        assert generation_config.temperature == 0.2
        assert generation_config.max_output_tokens == 1024

    @pytest.mark.asyncio
    async def test_generate_uses_default_temperature(self):
        client = self.make_client("{}")
        backend = GeminiBackend(client=client)

        await backend.generate("p", FilteredRecipes)

        generation_config = client.models.generate_content.call_args.kwargs["config"]
        assert generation_config.temperature == config.TEMPERATURE

    def test_defaults_from_config(self):
        backend = GeminiBackend(client=MagicMock())
        assert backend.model == config.GEMINI_MODEL
        assert backend.max_output_tokens == config.MAX_OUTPUT_TOKENS

    def test_requires_api_key(self):
        with patch.object(config, "GEMINI_API_KEY", None):
            with pytest.raises(ValueError, match="GEMINI_API_KEY"):
                GeminiBackend()

    def test_builds_client_from_key(self):
        with patch("pocket_chef.llm.invoker.genai.Client") as mock_client:
            backend = GeminiBackend(api_key="test-key")
        mock_client.assert_called_once_with(api_key="test-key")
        assert backend.client is mock_client.return_value

    @pytest.mark.asyncio
    async def test_invoke_through_gemini_backend(self):
        client = self.make_client('```json\n{"imageUrl": "https://x"}\n```')
        result = await invoke(GeminiBackend(client=client), "p", RecipeImage)
        assert result.image_url == "https://x"
