from extensions import get_chat_model
from services.errors import IllustrationError

IMAGE_PROMPT = (
    "Create a dreamlike, artistic, and abstract digital painting representing this dream "
    "description: \"{content}\". The mood is {mood}. Style: ethereal, surreal, soft lighting, "
    "masterpiece."
)


def _first_image(content):
    if not isinstance(content, list):
        return None
    for block in content:
        if isinstance(block, dict) and block.get("image_url"):
            image = block["image_url"]
            url = image.get("url") if isinstance(image, dict) else image
            if url:
                return url
    return None


class DreamIllustrator:
    """Paints a dream with a Gemini image model. Returns a base64 ``data:`` URL."""

    def __init__(self, api_key, model_name="gemini-2.0-flash-preview-image-generation"):
        self.api_key = api_key
        self.model_name = model_name

    def illustrate(self, content, mood):
        if not self.api_key:
            raise IllustrationError("API key missing")

        try:
            llm = get_chat_model(self.model_name, self.api_key, temperature=1.0)
            response = llm.invoke(
                IMAGE_PROMPT.format(content=content, mood=mood),
                generation_config=dict(response_modalities=["TEXT", "IMAGE"]),
            )
        except Exception as e:
            raise IllustrationError(f"Image request failed: {e}") from e

        image_url = _first_image(response.content)
        if not image_url:
            raise IllustrationError("Failed to generate image")
        return image_url
