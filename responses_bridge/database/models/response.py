"""Response model for persisted conversational turns."""

from sqlalchemy import Boolean, Column, Float, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ...types.metadata import Metadata
from ...types.records import ResponseRecord
from ..base import Base
from .base import EpochTimestampMixin, json_column


class StoredResponse(Base, EpochTimestampMixin):
    """One row per response.

    ``previous_response_id`` links to the parent turn. It is indexed but not
    declared as a database foreign key: the store checks it on insert, and a
    deleted parent leaves its descendants with a dangling link rather than
    blocking the delete.
    """

    __tablename__ = "responses"

    id = Column(
        String(64),
        primary_key=True,
        comment="Unique response identifier (resp_xxx)"
    )

    object = Column(String(32), nullable=False, default="response")

    status = Column(
        String(32),
        nullable=False,
        default="in_progress",
        comment="in_progress, completed, failed or incomplete"
    )

    model = Column(String(255), nullable=False)

    previous_response_id = Column(
        String(64),
        nullable=True,
        comment="ID of the previous response in the conversation chain"
    )

    instructions = Column(Text, nullable=True)
    max_output_tokens = Column(Integer, nullable=True)
    temperature = Column(Float, nullable=True)
    top_p = Column(Float, nullable=True)
    store = Column(Boolean, nullable=False, default=True)

    response_metadata = json_column("metadata", nullable=True, comment="User-provided metadata")

    user_id = Column(String(255), nullable=True)
    safety_identifier = Column(String(255), nullable=True)
    prompt_cache_key = Column(String(255), nullable=True)

    usage_input_tokens = Column(Integer, nullable=True)
    usage_output_tokens = Column(Integer, nullable=True)
    usage_total_tokens = Column(Integer, nullable=True)

    error = json_column("error", nullable=True, comment="Error payload when the call failed")
    incomplete_details = json_column("incomplete_details", nullable=True)

    input_items = relationship(
        "StoredInputItem",
        back_populates="response",
        cascade="all, delete-orphan",
    )
    output_items = relationship(
        "StoredOutputItem",
        back_populates="response",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_responses_previous_id", "previous_response_id"),
        Index("idx_responses_user_id", "user_id"),
    )

    @classmethod
    def from_record(cls, record: ResponseRecord) -> "StoredResponse":
        return cls(
            id=record.id,
            object=record.object,
            created_at=record.created_at,
            status=record.status,
            model=record.model,
            previous_response_id=record.previous_response_id,
            instructions=record.instructions,
            max_output_tokens=record.max_output_tokens,
            temperature=record.temperature,
            top_p=record.top_p,
            store=record.store,
            response_metadata=(
                record.metadata.to_storage_form() if record.metadata is not None else None
            ),
            user_id=record.user_id,
            safety_identifier=record.safety_identifier,
            prompt_cache_key=record.prompt_cache_key,
            usage_input_tokens=record.usage_input_tokens,
            usage_output_tokens=record.usage_output_tokens,
            usage_total_tokens=record.usage_total_tokens,
            error=record.error,
            incomplete_details=record.incomplete_details,
        )

    def to_record(self) -> ResponseRecord:
        return ResponseRecord(
            id=self.id,
            object=self.object,
            created_at=self.created_at,
            status=self.status,
            model=self.model,
            previous_response_id=self.previous_response_id,
            instructions=self.instructions,
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
            top_p=self.top_p,
            store=bool(self.store),
            metadata=(
                Metadata.from_storage_form(self.response_metadata)
                if self.response_metadata is not None
                else None
            ),
            user_id=self.user_id,
            safety_identifier=self.safety_identifier,
            prompt_cache_key=self.prompt_cache_key,
            usage_input_tokens=self.usage_input_tokens,
            usage_output_tokens=self.usage_output_tokens,
            usage_total_tokens=self.usage_total_tokens,
            error=self.error,
            incomplete_details=self.incomplete_details,
        )
