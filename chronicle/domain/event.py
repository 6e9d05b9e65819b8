from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, JsonValue, TypeAdapter, field_validator

PAYLOAD_ADAPTER: TypeAdapter[JsonValue] = TypeAdapter(JsonValue)


def serialize_payload(payload: JsonValue) -> str:
    """Serialize a payload to the JSON text stored in the events table."""
    return PAYLOAD_ADAPTER.dump_json(payload).decode()


def deserialize_payload(raw: str | bytes | JsonValue) -> JsonValue:
    """Parse a stored payload.

    Text is parsed as JSON. Values that are already structured (some
    drivers decode JSON columns themselves) are returned unchanged.
    """
    if isinstance(raw, (str, bytes)):
        return PAYLOAD_ADAPTER.validate_json(raw)
    return raw


class Event(BaseModel):
    """A fact to be appended to the log.

    Events carry no identity until they are persisted. The event type is
    a free-form identifier chosen by the application and the payload is
    any JSON-compatible value (nested mappings, sequences and scalars).

    Attributes:
        event_type: Identifier used for coarse filtering.
        payload: Semi-structured event data, matched structurally by
            payload predicates.

    Examples:
        >>> Event(event_type="CourseCreated", payload={"course_id": "c1", "capacity": 30})
    """

    model_config = ConfigDict(frozen=True)

    event_type: str = Field(min_length=1, description="Identifier of the kind of fact")
    payload: JsonValue = Field(description="Semi-structured event data")


class EventRecord(Event):
    """An event as persisted in the log.

    The storage engine assigns ``sequence_number`` and ``timestamp`` at
    insert time. Sequence numbers are unique, never reused and totally
    ordered consistently with append order.
    """

    sequence_number: int = Field(ge=1, description="Position in the global log")
    timestamp: datetime = Field(description="When the event was stored")

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQL engines commonly hand back naive UTC timestamps
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
