from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from extensions import get_chat_model
from services.errors import ChatError

ORACLE_INSTRUCTION = (
    "You are the Spirit of the Dream. You are a wise, mystical, and gentle companion. "
    "The user will discuss a specific dream they had. Your goal is to help them explore "
    "deeper meanings, ask thought-provoking questions, and provide comforting insights.\n\n"
    "Context of the dream: \"{context}\""
)


def _text(content):
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class OracleSession:
    """Conversation state for one open dream."""

    def __init__(self, context):
        self.instruction = SystemMessage(content=ORACLE_INSTRUCTION.format(context=context))
        self.history = []

    def messages(self):
        return [self.instruction] + self.history


class Oracle:
    def __init__(self, api_key, model_name="gemini-2.5-flash"):
        self.api_key = api_key
        self.model_name = model_name

    def open_session(self, context):
        return OracleSession(context)

    def send_turn(self, session, text):
        """
        Yield the oracle's reply to ``text`` fragment by fragment.

        The exchange is added to the session history once the reply is
        complete. Failures raise ``ChatError`` and leave the history as it
        was, so the session can be used for the next turn.
        """
        if not self.api_key:
            raise ChatError("API key missing")

        prompt = session.messages() + [HumanMessage(content=text)]
        reply = ""
        try:
            llm = get_chat_model(self.model_name, self.api_key, temperature=0.7)
            for chunk in llm.stream(prompt):
                fragment = _text(chunk.content)
                if fragment:
                    reply += fragment
                    yield fragment
        except Exception as e:
            raise ChatError(f"Oracle turn failed: {e}") from e

        session.history.extend([HumanMessage(content=text), AIMessage(content=reply)])
