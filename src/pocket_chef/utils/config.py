"""Configuration management for Pocket Chef.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Gemini API key: only required once the Gemini backend is built
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Model used by every generation flow
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Default sampling temperature for flows without a fixed one.
        # The named-recipe lookup always runs at 0.3.
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # Max Output Tokens: a batch of full recipes with instructions fits in 4096
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "4096"))
        # Base URL of the image generation service (image flow only builds URLs)
        self.IMAGE_BASE_URL: str = os.getenv("IMAGE_BASE_URL", "https://image.pollinations.ai/prompt/")

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a value is out of range.
        """
        if not self.GEMINI_MODEL:
            raise ValueError("GEMINI_MODEL must not be empty")
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}")
        if self.MAX_OUTPUT_TOKENS < 512:
            raise ValueError(f"MAX_OUTPUT_TOKENS must be at least 512, got: {self.MAX_OUTPUT_TOKENS}")
        if not self.IMAGE_BASE_URL.startswith(("http://", "https://")):
            raise ValueError(f"IMAGE_BASE_URL must be an http(s) URL, got: {self.IMAGE_BASE_URL}")

    def validate_credentials(self) -> None:
        """Validate credentials needed to reach the Gemini API.

        Raises:
            ValueError: If GEMINI_API_KEY is missing.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
