"""Core exporter logic with no threading, network or rendering dependencies.

Key modules:

- interfaces: Protocols describing the host simulation's read surface
- wire_model: Immutable snapshot entities
- snapshot_builder: Live host state -> Snapshot
- serializer: Snapshot -> XML payload
- demo_colony: Synthetic host used by the demo command and tests

Design note: this module exposes a small, explicit public API via ``__all__``.
"""

from . import interfaces as interfaces
from . import serializer as serializer
from . import snapshot_builder as snapshot_builder
from . import wire_model as wire_model

__all__ = [
	"interfaces",
	"serializer",
	"snapshot_builder",
	"wire_model",
]
