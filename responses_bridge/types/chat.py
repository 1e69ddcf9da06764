"""Types for the chat-completion representation sent to the model backend.

These follow the OpenAI-compatible chat completions format, which is what
the model-serving collaborator accepts and returns.
"""

from typing import Any, Literal, Union
from typing_extensions import TypedDict


class ChatMessage(TypedDict, total=False):
    """A message in a chat conversation.

    Attributes:
        role: Role of the message sender ("system", "user", "assistant").
        content: Text content of the message. Results may carry a list of
            content parts instead of a string, or None.
    """
    role: str
    content: str | list[dict[str, Any]] | None


class ChatFunction(TypedDict, total=False):
    """A function definition offered to the model.

    Attributes:
        name: Function name.
        description: Human-readable description.
        parameters: JSON Schema for the arguments, passed through untouched.
    """
    name: str
    description: str
    parameters: dict[str, Any]


class ChatTool(TypedDict):
    type: Literal["function"]
    function: ChatFunction


ChatToolChoice = Literal["auto", "none", "required"]


class ChatCompletionRequest(TypedDict, total=False):
    """Request body for the chat completions endpoint.

    Optional fields are omitted when unset so the backend applies its own
    defaults.
    """
    model: str
    messages: list[ChatMessage]
    tools: list[ChatTool]
    tool_choice: ChatToolChoice
    temperature: float
    top_p: float
    stream: bool
    max_completion_tokens: int
    user: str


class Usage(TypedDict, total=False):
    """Token usage statistics for a completion.

    Attributes:
        prompt_tokens: Number of tokens in the prompt.
        completion_tokens: Number of tokens in the generated completion.
        total_tokens: Total tokens used (prompt + completion).
    """
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class Choice(TypedDict, total=False):
    """A completion choice.

    Attributes:
        index: Position of this choice in the choices list.
        message: The generated message.
        finish_reason: Why generation stopped ("stop", "length", ...).
    """
    index: int
    message: ChatMessage
    finish_reason: str | None


class ChatCompletionResponse(TypedDict, total=False):
    """A non-streaming chat completion result."""
    id: str
    object: str
    created: int
    model: str
    choices: list[Choice]
    usage: Usage


ChatContent = Union[str, list[dict[str, Any]], None]
