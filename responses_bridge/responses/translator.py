"""Bidirectional translation between Responses API and Chat Completions.

This module handles:
1. Converting Responses API requests (plus their reconstructed history) to
   a flat Chat Completions request
2. Converting Chat Completions results back to Responses API format
3. Tool and tool-choice translation
4. Usage statistics translation

The mapping is deliberately lossy. Image and file inputs, hosted tools
(web search, file search, code interpreter) and named-function tool choices
have no counterpart in the chat request and are dropped or downgraded.
Everything here is pure: no I/O, no clocks except when a result lacks a
``created`` timestamp.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from ..core.exceptions import TranslationError
from ..types.chat import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatContent,
    ChatMessage,
    ChatTool,
    ChatToolChoice,
)
from ..types.records import (
    InputItemRecord,
    OutputItemRecord,
    ResponseRecord,
    generate_message_id,
    generate_response_id,
    now_epoch,
)
from ..types.responses import (
    InputContent,
    MessageItem,
    ResponseObject,
    ResponseRequest,
    ResponseUsage,
)
from ..types.role import Role, RoleCoercionHandler, parse_role

logger = logging.getLogger("responses-bridge")

Transcript = tuple[Sequence[InputItemRecord], Sequence[OutputItemRecord]]

# Explicit content tags, checked before any field probing
_TEXT_TAGS = frozenset({"input_text", "text", "output_text"})
_IMAGE_TAGS = frozenset({"input_image", "image"})
_FILE_TAGS = frozenset({"input_file", "file"})

_DROPPED_TOOL_TYPES = frozenset({
    "web_search",
    "web_search_preview",
    "file_search",
    "code_interpreter",
})

_DIRECT_TOOL_CHOICES: frozenset[str] = frozenset({"auto", "none", "required"})


# =============================================================================
# Input classification
# =============================================================================


def classify_input_item(item: Any) -> InputContent:
    """Resolve one input item to a tagged content variant.

    Resolution order is fixed so that ambiguous payloads always land on the
    same variant:

    1. An explicit content tag in ``type`` (``input_text``, ``input_image``,
       ``input_file`` and their short forms).
    2. Field probing: ``text``, then ``image_url``, then ``file_id`` /
       ``file_data``, then ``content`` (a string, or a list of parts).

    Raises:
        TranslationError: If the item matches no variant.
    """
    if not isinstance(item, dict):
        raise TranslationError(
            f"Input item must be an object, got {type(item).__name__}",
            item_type=type(item).__name__,
        )

    item_type = item.get("type")
    item_id = item.get("id")
    role = item.get("role")

    if item_type in _TEXT_TAGS:
        text = item.get("text")
        if not isinstance(text, str):
            raise TranslationError(
                "Text item has no text", item_type=item_type, item_id=item_id
            )
        return _text_content(text, role)
    if item_type in _IMAGE_TAGS:
        return _image_content(item, item_type, item_id)
    if item_type in _FILE_TAGS:
        return _file_content(item, item_type, item_id)

    if isinstance(item.get("text"), str):
        return _text_content(item["text"], role)
    if "image_url" in item:
        return _image_content(item, item_type, item_id)
    if "file_id" in item or "file_data" in item:
        return _file_content(item, item_type, item_id)

    content = item.get("content")
    if isinstance(content, str):
        return _text_content(content, role)
    if isinstance(content, list) and content:
        return _classify_parts(content, role, item_type, item_id)

    raise TranslationError(
        f"Unrecognized input item of type '{item_type}'",
        item_type=item_type,
        item_id=item_id,
    )


def _classify_parts(
    parts: list[Any],
    role: Optional[str],
    item_type: Optional[str],
    item_id: Optional[str],
) -> InputContent:
    """Collapse a content-part list into one variant.

    Text parts are joined with newlines; other parts are dropped. A list with
    no text resolves to the variant of its first part.
    """
    classified: list[InputContent] = []
    for part in parts:
        try:
            classified.append(classify_input_item(part))
        except TranslationError as e:
            raise TranslationError(
                f"Unrecognized content part in item: {e.message}",
                item_type=e.item_type or item_type,
                item_id=item_id,
            ) from e

    texts = [c["text"] for c in classified if c["kind"] == "text"]
    if texts:
        return _text_content("\n".join(texts), role)
    return classified[0]


def _text_content(text: str, role: Optional[str]) -> InputContent:
    content: InputContent = {"kind": "text", "text": text}
    if role is not None:
        content["role"] = role
    return content


def _image_content(item: dict[str, Any], item_type: Any, item_id: Any) -> InputContent:
    image_url = item.get("image_url")
    if isinstance(image_url, dict):
        image_url = image_url.get("url")
    if not isinstance(image_url, str):
        raise TranslationError("Image item has no image_url", item_type=item_type, item_id=item_id)
    content: InputContent = {"kind": "image", "image_url": image_url}
    if item.get("detail") is not None:
        content["detail"] = item["detail"]
    return content


def _file_content(item: dict[str, Any], item_type: Any, item_id: Any) -> InputContent:
    file_id = item.get("file_id") or item.get("filename")
    if not isinstance(file_id, str) and not item.get("file_data"):
        raise TranslationError("File item has no file reference", item_type=item_type, item_id=item_id)
    content: InputContent = {"kind": "file", "file_id": file_id or ""}
    if item.get("purpose") is not None:
        content["purpose"] = item["purpose"]
    return content


# =============================================================================
# Responses API → Chat Completions
# =============================================================================


def to_chat_request(
    request: ResponseRequest,
    history: Sequence[ResponseRecord],
    transcripts: Optional[Mapping[str, Transcript]] = None,
    on_role_coercion: Optional[RoleCoercionHandler] = None,
) -> ChatCompletionRequest:
    """Convert a Responses API request to a Chat Completions request.

    Message order:
    1. One system message per ancestor with instructions, oldest first. When
       ``transcripts`` is given, each ancestor's stored input and output items
       follow its instructions.
    2. The request's own instructions as a trailing system message.
    3. The request's input.

    Args:
        request: The Responses API request body.
        history: Ancestor responses, oldest first (see ``reconstruct_chain``).
        transcripts: Optional stored items per ancestor id, for replaying
            prior turns.
        on_role_coercion: Called for each unknown role coerced to ``user``.

    Returns:
        Chat Completions request body. Unset optional fields are omitted.

    Raises:
        TranslationError: On input, tool or tool-choice payloads that match no
            recognized shape.
    """
    model = request.get("model")
    if not model:
        raise TranslationError("Request has no model", item_type="request")

    messages: list[ChatMessage] = []

    for record in history:
        if record.instructions:
            messages.append({"role": "system", "content": record.instructions})
        if transcripts is not None and record.id in transcripts:
            input_items, output_items = transcripts[record.id]
            messages.extend(_transcript_messages(input_items, output_items, on_role_coercion))

    instructions = request.get("instructions")
    if instructions:
        messages.append({"role": "system", "content": instructions})

    messages.extend(convert_input(request.get("input"), on_role_coercion))

    chat_request: ChatCompletionRequest = {
        "model": model,
        "messages": messages,
    }

    tools = request.get("tools")
    if tools is not None:
        converted = convert_tools(tools)
        if converted:
            chat_request["tools"] = converted

    tool_choice = request.get("tool_choice")
    if tool_choice is not None:
        chat_request["tool_choice"] = convert_tool_choice(tool_choice)

    if request.get("temperature") is not None:
        chat_request["temperature"] = request["temperature"]
    if request.get("top_p") is not None:
        chat_request["top_p"] = request["top_p"]
    if request.get("stream") is not None:
        chat_request["stream"] = request["stream"]
    if request.get("max_output_tokens") is not None:
        chat_request["max_completion_tokens"] = request["max_output_tokens"]
    if request.get("user") is not None:
        chat_request["user"] = request["user"]

    logger.debug(
        f"Translator: Built chat request with {len(messages)} messages "
        f"from {len(history)} ancestors"
    )
    return chat_request


def convert_input(
    input_: Any,
    on_role_coercion: Optional[RoleCoercionHandler] = None,
) -> list[ChatMessage]:
    """Convert a request's ``input`` to chat messages.

    A string is one user message. A list is translated item by item; image
    and file items are dropped.
    """
    if input_ is None:
        return []
    if isinstance(input_, str):
        return [{"role": "user", "content": input_}]
    if not isinstance(input_, list):
        raise TranslationError(
            f"Input must be a string or a list, got {type(input_).__name__}",
            item_type="input",
        )

    messages: list[ChatMessage] = []
    for item in input_:
        message = _content_to_message(classify_input_item(item), on_role_coercion)
        if message is not None:
            messages.append(message)
    return messages


def _content_to_message(
    content: InputContent,
    on_role_coercion: Optional[RoleCoercionHandler] = None,
    role_override: Optional[Role] = None,
) -> Optional[ChatMessage]:
    if content["kind"] != "text":
        logger.debug(f"Translator: Dropping unsupported {content['kind']} input")
        return None

    role = role_override or parse_role(content.get("role"), on_role_coercion)
    chat_role = "system" if role is Role.SYSTEM else "user"
    return {"role": chat_role, "content": content["text"]}


def _transcript_messages(
    input_items: Sequence[InputItemRecord],
    output_items: Sequence[OutputItemRecord],
    on_role_coercion: Optional[RoleCoercionHandler] = None,
) -> list[ChatMessage]:
    """Replay one stored turn as chat messages."""
    messages: list[ChatMessage] = []

    for item in input_items:
        content = item.content
        if isinstance(content, str):
            content = {"type": "input_text", "text": content}
        classified = classify_input_item(content)
        message = _content_to_message(classified, on_role_coercion, role_override=item.role)
        if message is not None:
            messages.append(message)

    for item in output_items:
        if item.item_type != "message":
            continue
        text = _output_text(item.content)
        if text:
            messages.append({"role": "assistant", "content": text})

    return messages


def _output_text(content: Any) -> str:
    """Join the text blocks of a stored output item."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    return "".join(
        block.get("text", "")
        for block in content
        if isinstance(block, dict) and block.get("type") in ("output_text", "text")
    )


def convert_tools(tools: Sequence[Any]) -> list[ChatTool]:
    """Convert Responses API tool definitions to Chat Completions format.

    Only function tools survive; hosted tools are dropped.

    Raises:
        TranslationError: For an unknown tool type or a nameless function.
    """
    converted: list[ChatTool] = []
    for tool in tools:
        if not isinstance(tool, dict):
            raise TranslationError("Tool must be an object", item_type="tool")

        tool_type = tool.get("type", "function")
        if tool_type in _DROPPED_TOOL_TYPES:
            logger.debug(f"Translator: Dropping unsupported {tool_type} tool")
            continue
        if tool_type != "function":
            raise TranslationError(f"Unrecognized tool type '{tool_type}'", item_type=tool_type)

        # Accept both {"type": "function", "name": ...} and {"function": {...}}
        definition = tool.get("function") if isinstance(tool.get("function"), dict) else tool
        name = definition.get("name")
        if not name:
            raise TranslationError("Function tool has no name", item_type="function")

        function: dict[str, Any] = {"name": name}
        if definition.get("description") is not None:
            function["description"] = definition["description"]
        if definition.get("parameters") is not None:
            function["parameters"] = definition["parameters"]
        converted.append({"type": "function", "function": function})  # type: ignore[typeddict-item]
    return converted


def convert_tool_choice(choice: Any) -> ChatToolChoice:
    """Map a Responses tool choice to a chat tool choice.

    ``auto``, ``none`` and ``required`` map directly (as strings or as
    ``{"type": ...}`` objects). A named function choice is downgraded to
    ``auto``.

    Raises:
        TranslationError: For any other shape.
    """
    if isinstance(choice, str) and choice in _DIRECT_TOOL_CHOICES:
        return choice  # type: ignore[return-value]
    if isinstance(choice, dict):
        choice_type = choice.get("type")
        if choice_type in _DIRECT_TOOL_CHOICES:
            return choice_type
        if choice_type == "function" or "function" in choice:
            logger.debug("Translator: Downgrading named function tool choice to 'auto'")
            return "auto"
    raise TranslationError(f"Unrecognized tool choice: {choice!r}", item_type="tool_choice")


# =============================================================================
# Chat Completions → Responses API
# =============================================================================


def from_chat_result(
    completion: ChatCompletionResponse,
    response_id: Optional[str] = None,
) -> ResponseObject:
    """Convert a Chat Completions result to Responses API format.

    Each choice becomes one completed assistant message. Fields the result
    did not populate (error, incomplete details, reasoning, truncation, and
    usage when the source has none) are left out of the returned object.

    Args:
        completion: The Chat Completions result.
        response_id: ID for the response; a fresh ``resp_`` id when None.

    Raises:
        TranslationError: If a choice carries no interpretable message.
    """
    output: list[MessageItem] = []

    for index, choice in enumerate(completion.get("choices") or []):
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise TranslationError(
                f"Choice {index} has no message", item_type="choice", item_id=str(index)
            )

        output.append({
            "id": generate_message_id(),
            "type": "message",
            "status": "completed",
            "role": Role.ASSISTANT.value,
            "content": [{
                "type": "output_text",
                "text": _message_text(message.get("content"), index),
            }],
        })

        if message.get("tool_calls"):
            logger.debug(f"Translator: Dropping tool calls from choice {index}")

    created = completion.get("created")
    response: ResponseObject = {
        "id": response_id or generate_response_id(),
        "object": "response",
        "created_at": int(created) if created is not None else now_epoch(),
        "model": completion.get("model", ""),
        "status": "completed",
        "store": True,
        "output": output,
    }

    usage = convert_usage(completion.get("usage"))
    if usage is not None:
        response["usage"] = usage

    return response


def _message_text(content: ChatContent, index: int) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part.get("text", "")
            for part in content
            if isinstance(part, dict) and part.get("type") in ("text", "output_text")
        )
    raise TranslationError(
        f"Choice {index} has unreadable content", item_type="choice", item_id=str(index)
    )


def convert_usage(usage: Optional[Mapping[str, Any]]) -> Optional[ResponseUsage]:
    """Convert Chat Completions usage to Responses API format.

    Counters are copied verbatim; returns None when there is no usage.
    """
    if not usage:
        return None

    result: ResponseUsage = {}
    if "prompt_tokens" in usage:
        result["input_tokens"] = usage["prompt_tokens"]
    if "completion_tokens" in usage:
        result["output_tokens"] = usage["completion_tokens"]
    if "total_tokens" in usage:
        result["total_tokens"] = usage["total_tokens"]
    return result
