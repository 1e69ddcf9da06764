"""Input and output item models, children of a stored response."""

from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ...types.records import InputItemRecord, OutputItemRecord
from ...types.role import Role, RoleCoercionHandler, parse_role
from ..base import Base
from .base import EpochTimestampMixin, json_column


def _role_from_column(value: Optional[str], on_unknown: Optional[RoleCoercionHandler]) -> Optional[Role]:
    if value is None:
        return None
    return parse_role(value, on_unknown)


class _ItemColumns(EpochTimestampMixin):
    """Columns shared by both item tables."""

    id = Column(String(64), primary_key=True)

    item_type = Column(
        String(64),
        nullable=False,
        comment="message, file, tool_call, ..."
    )

    role = Column(String(16), nullable=True)

    content = json_column("content", nullable=False, comment="Type-tagged content payload")

    sequence = Column(
        Integer,
        nullable=False,
        default=0,
        comment="Position within the response; orders items sharing a timestamp"
    )


class StoredInputItem(Base, _ItemColumns):
    """What was sent to the model for a response."""

    __tablename__ = "input_items"

    response_id = Column(
        String(64),
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    response = relationship("StoredResponse", back_populates="input_items")

    @classmethod
    def from_record(cls, item: InputItemRecord) -> "StoredInputItem":
        return cls(
            id=item.id,
            response_id=item.response_id,
            item_type=item.item_type,
            role=item.role.value if item.role is not None else None,
            content=item.content,
            created_at=item.created_at,
            sequence=item.sequence,
        )

    def to_record(self, on_role_coercion: Optional[RoleCoercionHandler] = None) -> InputItemRecord:
        return InputItemRecord(
            id=self.id,
            response_id=self.response_id,
            item_type=self.item_type,
            role=_role_from_column(self.role, on_role_coercion),
            content=self.content,
            created_at=self.created_at,
            sequence=self.sequence,
        )


class StoredOutputItem(Base, _ItemColumns):
    """What the model produced for a response."""

    __tablename__ = "output_items"

    response_id = Column(
        String(64),
        ForeignKey("responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status = Column(String(32), nullable=False, default="completed")

    response = relationship("StoredResponse", back_populates="output_items")

    @classmethod
    def from_record(cls, item: OutputItemRecord) -> "StoredOutputItem":
        return cls(
            id=item.id,
            response_id=item.response_id,
            item_type=item.item_type,
            role=item.role.value if item.role is not None else None,
            content=item.content,
            status=item.status,
            created_at=item.created_at,
            sequence=item.sequence,
        )

    def to_record(self, on_role_coercion: Optional[RoleCoercionHandler] = None) -> OutputItemRecord:
        return OutputItemRecord(
            id=self.id,
            response_id=self.response_id,
            item_type=self.item_type,
            role=_role_from_column(self.role, on_role_coercion),
            content=self.content,
            status=self.status,
            created_at=self.created_at,
            sequence=self.sequence,
        )
