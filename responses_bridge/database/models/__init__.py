"""Database models for the responses bridge.

Three related tables: ``responses`` and its children ``input_items`` and
``output_items`` (cascade-deleted with their response).
"""

from ..base import Base
from .items import StoredInputItem, StoredOutputItem
from .response import StoredResponse

__all__ = ["Base", "StoredInputItem", "StoredOutputItem", "StoredResponse"]
