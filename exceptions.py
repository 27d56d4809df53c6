class AIServiceError(Exception):
    """An external AI provider (Gemini, Perplexity) failed or is not configured."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class StructuredOutputError(AIServiceError):
    """The model answered, but not with JSON of the requested shape."""
