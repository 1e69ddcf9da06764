"""Types for the Responses API.

These types define the request/response format accepted and produced by the
bridge. Requests are translated to chat completions, so several fields are
accepted here but only partly honoured (see ``responses.translator``).
"""

from typing import Any, Literal, Union
from typing_extensions import TypedDict


# =============================================================================
# Status Types
# =============================================================================

ItemStatus = Literal["in_progress", "completed", "incomplete"]
"""Status lifecycle for output items."""

ResponseStatus = Literal["in_progress", "completed", "failed", "incomplete"]
"""Status lifecycle for the overall response.

- in_progress: Model call outstanding
- completed: Finished successfully
- failed: Error occurred
- incomplete: Token budget exhausted
"""

RESPONSE_STATUSES: tuple[str, ...] = ("in_progress", "completed", "failed", "incomplete")


# =============================================================================
# Input Content Types (wire form)
# =============================================================================

class InputText(TypedDict, total=False):
    """Plain text input content."""
    type: Literal["input_text"]
    role: str
    text: str


class InputImage(TypedDict, total=False):
    """Image input content."""
    type: Literal["input_image"]
    image_url: Union[str, dict[str, Any]]  # URL, base64, or {"url": ...}
    detail: Literal["low", "high", "auto"]


class InputFile(TypedDict, total=False):
    """File input content."""
    type: Literal["input_file"]
    file_id: str
    filename: str
    file_data: str  # base64
    purpose: str


class InputMessage(TypedDict, total=False):
    """A message item whose content is a string, a part list, or flattened fields."""
    id: str
    type: Literal["message"]
    role: str
    content: Union[str, list[dict[str, Any]]]
    text: str


InputItem = Union[InputText, InputImage, InputFile, InputMessage]
"""Union of all input item shapes accepted in an input array."""


# =============================================================================
# Input Content Types (classified form)
# =============================================================================
# Every wire item resolves to exactly one of these tagged variants. ``kind`` is
# the discriminant; the translator never infers a variant from field presence
# once classification is done.

class TextContent(TypedDict, total=False):
    kind: Literal["text"]
    role: str
    text: str


class ImageContent(TypedDict, total=False):
    kind: Literal["image"]
    image_url: str
    detail: str


class FileContent(TypedDict, total=False):
    kind: Literal["file"]
    file_id: str
    purpose: str


InputContent = Union[TextContent, ImageContent, FileContent]


# =============================================================================
# Output Content Types
# =============================================================================

class OutputText(TypedDict, total=False):
    """Text output content."""
    type: Literal["output_text"]
    text: str
    annotations: list[dict[str, Any]]


class MessageItem(TypedDict, total=False):
    """An assistant message in a response's output."""
    id: str
    type: Literal["message"]
    role: str
    status: ItemStatus
    content: list[OutputText]


OutputItem = MessageItem


# =============================================================================
# Tool Definitions
# =============================================================================

class FunctionDefinition(TypedDict, total=False):
    name: str
    description: str
    parameters: dict[str, Any]


class FunctionTool(TypedDict, total=False):
    """A function tool definition.

    Both the flat form (``name`` at top level) and the nested form
    (``function: {...}``) are accepted on input.
    """
    type: Literal["function"]
    name: str
    description: str
    parameters: dict[str, Any]
    function: FunctionDefinition


class BuiltinTool(TypedDict, total=False):
    """A hosted tool that the chat backend cannot run."""
    type: Literal["web_search", "file_search", "code_interpreter"]
    file_ids: list[str]


ResponseTool = Union[FunctionTool, BuiltinTool]


class FunctionToolChoice(TypedDict, total=False):
    """Explicit function tool choice."""
    type: Literal["function"]
    name: str
    function: dict[str, str]


ToolChoice = Union[Literal["none", "auto", "required"], FunctionToolChoice]
"""Tool choice options.

- "none": Block all tools
- "auto": Model decides (default)
- "required": Must use a tool
- FunctionToolChoice: Force specific function (downgraded to "auto")
"""


# =============================================================================
# Usage / Error Types
# =============================================================================

class ResponseUsage(TypedDict, total=False):
    """Token usage information for a response."""
    input_tokens: int
    output_tokens: int
    total_tokens: int


class ResponseError(TypedDict, total=False):
    """Structured error object."""
    type: str
    code: str
    message: str
    param: str


class IncompleteDetails(TypedDict, total=False):
    """Details about incomplete response."""
    type: str
    reason: str


# =============================================================================
# Request / Response Types
# =============================================================================

class ResponseRequest(TypedDict, total=False):
    """Request body for creating a response."""
    # Required
    model: str
    input: Union[str, list[InputItem]]

    # Context
    previous_response_id: str
    instructions: str

    # Tools
    tools: list[ResponseTool]
    tool_choice: ToolChoice
    parallel_tool_calls: bool

    # Generation parameters
    temperature: float
    top_p: float
    max_output_tokens: int

    # Streaming
    stream: bool

    # Storage
    store: bool
    metadata: dict[str, str]

    # Correlation
    user: str
    safety_identifier: str
    prompt_cache_key: str

    # Accepted, not translated
    include: list[str]
    background: bool
    verbosity: str
    truncation: str


class ResponseObject(TypedDict, total=False):
    """A response as returned to callers.

    Keys that the source data did not populate are omitted rather than set to
    None or an empty container.
    """
    id: str
    object: Literal["response"]
    created_at: int
    status: ResponseStatus
    model: str

    previous_response_id: str
    instructions: str
    max_output_tokens: int
    temperature: float
    top_p: float
    store: bool
    metadata: dict[str, str]
    user: str
    safety_identifier: str
    prompt_cache_key: str
    tools: list[ResponseTool]
    tool_choice: ToolChoice
    parallel_tool_calls: bool

    output: list[OutputItem]
    error: ResponseError
    incomplete_details: IncompleteDetails
    usage: ResponseUsage
    reasoning: dict[str, Any]
    truncation: str


class DeleteResponseResult(TypedDict):
    id: str
    object: Literal["response.deleted"]
    deleted: bool


class InputItemList(TypedDict):
    object: Literal["list"]
    data: list[dict[str, Any]]
    first_id: str | None
    last_id: str | None
    has_more: bool
