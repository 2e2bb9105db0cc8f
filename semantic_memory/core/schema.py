"""
Typed records exchanged between the stores and the tool surface.
Embeddings and metadata stay native here; JSON only exists at the storage edge.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

LIST_FIELDS = ("tecnologias", "herramientas", "idiomas", "mascotas")
# Column order of the user_bio table
BIO_FIELDS = ("nombre", "ocupacion", "ubicacion", "tecnologias", "herramientas", "idiomas", "timezone", "mascotas")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(moment: datetime) -> str:
    """Render a timestamp as sortable ISO-8601 UTC with millisecond precision."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_utc(value: str) -> datetime:
    return datetime.strptime(value, "%Y-%m-%dT%H:%M:%S.%fZ").replace(tzinfo=timezone.utc)


def next_timestamp(moment: datetime, previous: Optional[str] = None) -> str:
    """Render `moment`, moved one millisecond past `previous` when it is not later.

    Two writes inside the same millisecond (or a clock that stepped back)
    would otherwise leave `updated_at` unchanged.
    """
    stamp = isoformat_utc(moment)
    if previous is None or stamp > previous:
        return stamp
    try:
        return isoformat_utc(parse_utc(previous) + timedelta(milliseconds=1))
    except ValueError:
        # Stored value is not in our format; the fresh reading is the best we have
        return stamp


@dataclass
class Memory:
    id: str
    text: str
    metadata: Dict[str, Any]
    created_at: str
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MemorySummary:
    """Listing entry: metadata plus a bounded preview of the text."""
    id: str
    metadata: Dict[str, Any]
    preview: str
    created_at: str
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SearchHit:
    id: str
    text: str
    metadata: Dict[str, Any]
    score: float
    created_at: str
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SearchOutcome:
    results: List[SearchHit] = field(default_factory=list)
    empty_store: bool = False
    """True when the store held no memories at all (no embedding was computed)."""


@dataclass
class SaveResult:
    id: str
    was_update: bool


@dataclass
class Biography:
    nombre: Optional[str] = None
    ocupacion: Optional[str] = None
    ubicacion: Optional[str] = None
    tecnologias: Optional[List[str]] = None
    herramientas: Optional[List[str]] = None
    idiomas: Optional[List[str]] = None
    timezone: Optional[str] = None
    mascotas: Optional[List[str]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class UpdateKind(Enum):
    UNSET = "unset"
    CLEAR = "clear"
    SET = "set"


@dataclass(frozen=True)
class FieldUpdate:
    """Per-field biography update: leave as is, clear, or replace."""

    kind: UpdateKind
    value: Any = None

    @classmethod
    def set_to(cls, value: Any) -> "FieldUpdate":
        return cls(UpdateKind.SET, value)

    @classmethod
    def from_argument(cls, arguments: Dict[str, Any], name: str) -> "FieldUpdate":
        """Read a field from a JSON argument object; a missing key is UNSET, null is CLEAR."""
        if name not in arguments:
            return UNSET
        if arguments[name] is None:
            return CLEAR
        return cls.set_to(arguments[name])

    def apply(self, current: Any) -> Any:
        if self.kind is UpdateKind.UNSET:
            return current
        if self.kind is UpdateKind.CLEAR:
            return None
        return self.value


UNSET = FieldUpdate(UpdateKind.UNSET)
CLEAR = FieldUpdate(UpdateKind.CLEAR)
