from typing import List

from pydantic import BaseModel, Field, ValidationError

from extensions import get_chat_model
from models.dream import Analysis
from services.errors import AnalysisError

ANALYSIS_PROMPT = (
    "Analyze the following dream entry. Provide a title, a brief summary, a psychological "
    "or symbolic interpretation, the dominant mood, a sentiment score from 0 (nightmare) to "
    "100 (blissful), relevant tags, and a hex color code that represents the feeling of the "
    "dream.\n\nDream: \"{content}\""
)


class DreamInterpretation(BaseModel):
    """Structured interpretation of a dream journal entry."""

    title: str
    summary: str
    interpretation: str
    mood: str
    sentimentScore: float = Field(description="0 (nightmare) to 100 (blissful)")
    tags: List[str]
    colorHex: str = Field(description="A valid hex color code (e.g. #FF5733)")


class DreamAnalyzer:
    """Interprets dream text with a Gemini chat model."""

    def __init__(self, api_key, model_name="gemini-2.5-flash"):
        self.api_key = api_key
        self.model_name = model_name

    def analyze(self, content):
        """
        Interpret ``content``.

        Args:
            content (str): The raw dream text

        Returns:
            Analysis: all interpretation fields

        Raises:
            AnalysisError: on any transport, parsing or validation problem
        """
        if not self.api_key:
            raise AnalysisError("API key missing")

        try:
            llm = get_chat_model(self.model_name, self.api_key, temperature=0.7)
            structured = llm.with_structured_output(DreamInterpretation)
            result = structured.invoke(ANALYSIS_PROMPT.format(content=content))
        except Exception as e:
            raise AnalysisError(f"Analysis request failed: {e}") from e

        if result is None:
            raise AnalysisError("No analysis returned")
        try:
            return Analysis.model_validate(result.model_dump())
        except ValidationError as e:
            raise AnalysisError(f"Incomplete analysis: {e}") from e
