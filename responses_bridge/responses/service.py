"""Responses API orchestration.

Sequences one request through store → chain reconstruction → translation →
model call → persistence. Retry policy, if any, belongs to callers of
``ResponsesService``; nothing here retries.
"""

import logging
from typing import Any, Optional, Protocol

from ..config_loader import BridgeSettings, ResponsesSettings
from ..core.exceptions import BridgeError, InvalidRequestError, NotFoundError, UpstreamError
from ..core.upstream import ChatCompletionClient
from ..database.factory import get_database
from ..logging.setup import setup_logging
from ..types.chat import ChatCompletionRequest, ChatCompletionResponse
from ..types.metadata import Metadata
from ..types.records import (
    InputItemRecord,
    OutputItemRecord,
    ResponseRecord,
    generate_item_id,
    generate_response_id,
    now_epoch,
)
from ..types.responses import (
    DeleteResponseResult,
    InputItemList,
    ResponseObject,
    ResponseRequest,
)
from ..types.role import Role, RoleCoercionHandler, parse_role
from .chain import reconstruct_chain
from .state_store import ConversationStore
from .translator import Transcript, from_chat_result, to_chat_request

logger = logging.getLogger("responses-bridge")

# Request fields echoed back on the response object when the caller set them
_ECHO_FIELDS = (
    "previous_response_id",
    "instructions",
    "max_output_tokens",
    "temperature",
    "top_p",
    "user",
    "safety_identifier",
    "prompt_cache_key",
    "tools",
    "tool_choice",
    "parallel_tool_calls",
)


class ChatBackend(Protocol):
    def create_chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse: ...


class ResponsesService:
    """Stateful Responses API on top of a stateless chat backend."""

    def __init__(
        self,
        store: ConversationStore,
        client: ChatBackend,
        settings: Optional[ResponsesSettings] = None,
    ) -> None:
        self._store = store
        self._client = client
        self._settings = settings or ResponsesSettings()

    @classmethod
    def from_settings(cls, settings: BridgeSettings) -> "ResponsesService":
        """Build a service wired to the configured database and backend."""
        setup_logging(settings.log_level)
        database = get_database(settings.database or None)
        store = ConversationStore(database)
        client = ChatCompletionClient(
            settings.upstream.base_url,
            api_key=settings.upstream.api_key,
            timeout=settings.upstream.timeout,
        )
        return cls(store, client, settings.responses)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(
        self,
        request: ResponseRequest,
        diagnostics: Optional[list[str]] = None,
    ) -> ResponseObject:
        """Run one Responses API request end to end.

        Unknown roles in this request are coerced to ``user``; pass a list as
        ``diagnostics`` to receive one note per coercion.

        Raises:
            InvalidRequestError: Missing model or a streaming request.
            MetadataError: Metadata breaks one of its bounds.
            NotFoundError: ``previous_response_id`` does not exist.
            TranslationError: Input, tools or result cannot be translated.
            UpstreamError: The model backend failed.
            StoreError: Storage failed.
        """
        model = request.get("model")
        if not model:
            raise InvalidRequestError("model is required", code="missing_model")
        if request.get("stream"):
            raise InvalidRequestError("Streaming is not supported", code="unsupported_stream")

        metadata = None
        if request.get("metadata") is not None:
            metadata = Metadata.from_map(request["metadata"])

        history: list[ResponseRecord] = []
        transcripts: Optional[dict[str, Transcript]] = None
        previous_id = request.get("previous_response_id")
        if previous_id:
            history = reconstruct_chain(
                self._store, previous_id, max_depth=self._settings.max_chain_depth
            )
            if not history:
                raise NotFoundError(f"Previous response {previous_id} not found")
            if self._settings.replay_history:
                transcripts = {
                    record.id: (
                        self._store.list_input_items(record.id),
                        self._store.list_output_items(record.id),
                    )
                    for record in history
                }

        on_role_coercion = _coercion_recorder(diagnostics)
        chat_request = to_chat_request(
            request, history, transcripts, on_role_coercion=on_role_coercion
        )

        response_id = generate_response_id()
        created_at = now_epoch()
        should_store = request.get("store", True) is not False

        if should_store:
            self._store.put(_build_record(response_id, created_at, request, metadata))

        # Once the row exists, any failure must leave it marked failed
        try:
            if should_store:
                for item in _input_records(response_id, created_at, request.get("input")):
                    self._store.put_input_item(item)

            completion = self._client.create_chat_completion(chat_request)
            result = from_chat_result(completion, response_id=response_id)

            result["created_at"] = created_at
            if not result.get("model"):
                result["model"] = model
            for key in _ECHO_FIELDS:
                if request.get(key) is not None:
                    result[key] = request[key]  # type: ignore[literal-required]
            if metadata is not None:
                result["metadata"] = metadata.to_dict()
            result["store"] = should_store

            if should_store:
                finished_at = now_epoch()
                for sequence, item in enumerate(result["output"]):
                    self._store.put_output_item(OutputItemRecord(
                        id=item["id"],
                        response_id=response_id,
                        item_type=item["type"],
                        role=Role.ASSISTANT,
                        content=item["content"],
                        status=item["status"],
                        created_at=finished_at,
                        sequence=sequence,
                    ))
                self._store.update_result(response_id, "completed", usage=result.get("usage"))
        except Exception as e:
            logger.error(f"Responses: Request {response_id} failed: {e}")
            if should_store:
                self._mark_failed(response_id, e)
            raise

        logger.info(
            f"Responses: Completed {response_id} with {len(result['output'])} output items "
            f"({len(history)} ancestors)"
        )
        return result

    def _mark_failed(self, response_id: str, exc: Exception) -> None:
        """Record ``exc`` on the stored response; never masks ``exc`` itself."""
        try:
            self._store.update_result(response_id, "failed", error=_error_payload(exc))
        except BridgeError as store_exc:
            logger.error(
                f"Responses: Could not mark {response_id} as failed: {store_exc.message}"
            )

    # ------------------------------------------------------------------
    # Read / delete
    # ------------------------------------------------------------------

    def retrieve(self, response_id: str) -> ResponseObject:
        """Rebuild a stored response.

        Raises:
            NotFoundError: If no response has this id.
        """
        record = self._store.get(response_id)
        if record is None:
            raise NotFoundError(f"Response {response_id} not found")
        return response_from_record(record, self._store.list_output_items(response_id))

    def delete(self, response_id: str) -> DeleteResponseResult:
        deleted = self._store.delete(response_id)
        return {"id": response_id, "object": "response.deleted", "deleted": deleted}

    def list_input_items(self, response_id: str) -> InputItemList:
        """List what was sent to the model for a response, oldest first.

        Raises:
            NotFoundError: If no response has this id.
        """
        if self._store.get(response_id) is None:
            raise NotFoundError(f"Response {response_id} not found")

        data: list[dict[str, Any]] = []
        for item in self._store.list_input_items(response_id):
            entry: dict[str, Any] = {"id": item.id, "type": item.item_type, "content": item.content}
            if item.role is not None:
                entry["role"] = item.role.value
            data.append(entry)

        return {
            "object": "list",
            "data": data,
            "first_id": data[0]["id"] if data else None,
            "last_id": data[-1]["id"] if data else None,
            "has_more": False,
        }


def _build_record(
    response_id: str,
    created_at: int,
    request: ResponseRequest,
    metadata: Optional[Metadata],
) -> ResponseRecord:
    return ResponseRecord(
        id=response_id,
        model=request["model"],
        created_at=created_at,
        status="in_progress",
        previous_response_id=request.get("previous_response_id"),
        instructions=request.get("instructions"),
        max_output_tokens=request.get("max_output_tokens"),
        temperature=request.get("temperature"),
        top_p=request.get("top_p"),
        store=True,
        metadata=metadata,
        user_id=request.get("user"),
        safety_identifier=request.get("safety_identifier"),
        prompt_cache_key=request.get("prompt_cache_key"),
    )


def _coercion_recorder(diagnostics: Optional[list[str]]) -> Optional[RoleCoercionHandler]:
    """Role-coercion callback that appends one note per coercion to ``diagnostics``."""
    if diagnostics is None:
        return None

    def record(value: str) -> None:
        diagnostics.append(f"Unknown role '{value}' coerced to 'user'")

    return record


def _input_records(response_id: str, created_at: int, input_: Any) -> list[InputItemRecord]:
    """Turn a request's input into storable items, in request order."""
    if input_ is None:
        return []
    if isinstance(input_, str):
        return [InputItemRecord(
            id=generate_item_id(),
            response_id=response_id,
            item_type="message",
            role=Role.USER,
            content={"type": "input_text", "text": input_},
            created_at=created_at,
        )]

    records = []
    for sequence, item in enumerate(input_):
        records.append(InputItemRecord(
            id=generate_item_id(),
            response_id=response_id,
            item_type=str(item.get("type") or "message"),
            role=parse_role(item["role"]) if item.get("role") is not None else None,
            content=item,
            created_at=created_at,
            sequence=sequence,
        ))
    return records


def _error_payload(exc: Exception) -> dict[str, Any]:
    if isinstance(exc, UpstreamError):
        code = f"http_{exc.status_code}" if exc.status_code else "upstream_unavailable"
        return {"type": "server_error", "code": code, "message": exc.message}
    return {
        "type": "server_error",
        "code": exc.__class__.__name__,
        "message": str(exc),
    }


def response_from_record(
    record: ResponseRecord,
    output_items: list[OutputItemRecord],
) -> ResponseObject:
    """Build a response object from stored data, omitting unset fields."""
    response: ResponseObject = {
        "id": record.id,
        "object": "response",
        "created_at": record.created_at,
        "status": record.status,  # type: ignore[typeddict-item]
        "model": record.model,
        "store": record.store,
        "output": [
            {
                "id": item.id,
                "type": item.item_type,  # type: ignore[typeddict-item]
                "status": item.status,  # type: ignore[typeddict-item]
                "role": (item.role or Role.ASSISTANT).value,
                "content": item.content,
            }
            for item in output_items
        ],
    }

    optional = {
        "previous_response_id": record.previous_response_id,
        "instructions": record.instructions,
        "max_output_tokens": record.max_output_tokens,
        "temperature": record.temperature,
        "top_p": record.top_p,
        "user": record.user_id,
        "safety_identifier": record.safety_identifier,
        "prompt_cache_key": record.prompt_cache_key,
        "error": record.error,
        "incomplete_details": record.incomplete_details,
    }
    for key, value in optional.items():
        if value is not None:
            response[key] = value  # type: ignore[literal-required]

    if record.metadata is not None:
        response["metadata"] = record.metadata.to_dict()

    usage = {
        "input_tokens": record.usage_input_tokens,
        "output_tokens": record.usage_output_tokens,
        "total_tokens": record.usage_total_tokens,
    }
    if any(value is not None for value in usage.values()):
        response["usage"] = {k: v for k, v in usage.items() if v is not None}  # type: ignore[typeddict-item]

    return response
