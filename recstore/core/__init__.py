"""
recstore.core
=============

Building blocks under the store façade:

  • codec   — headered CBOR/msgpack value encoding and record snapshots
  • schema  — field kinds, normalization on add, validation on adjust
  • cell    — ValueCell, a single slot with default-on-miss reads
  • table   — RecordTable, an insertion-ordered record sequence
"""

from __future__ import annotations

from .cell import ValueCell
from .schema import FieldSpec, RecordSchema
from .table import Record, RecordTable

__all__ = ["ValueCell", "FieldSpec", "RecordSchema", "Record", "RecordTable"]
