"""
Wire types for the Max bot API.

Only the fields the runtime needs are modeled; unknown fields are
ignored. Identifiers arrive as JSON strings or numbers and are kept
as str.

Responses that come in more than one shape go through an explicit
decode step (decode_updates, decode_upload) that names the shape it
recognised.
"""

import json
from enum import Enum
from typing import Annotated, Any, List, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)

from .errors import DecodeError


def _normalize_id(value: Any) -> str:
    """
    Render a wire identifier as str.

    JSON numbers are parsed before they get here, so the original text
    is gone: integral floats are rendered as integers (1.0 -> "1",
    1e20 -> "100000000000000000000"), anything else via repr().
    """
    if value is None:
        return ""
    # bool is an int subclass, but true/false is never an identifier
    if isinstance(value, bool):
        raise ValueError("identifier must be a string or a number")
    if isinstance(value, str):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    raise ValueError("identifier must be a string or a number")


ID = Annotated[str, BeforeValidator(_normalize_id)]


def id_as_int(value: str) -> int:
    """Numeric form of an identifier. Raises ValueError if not numeric."""
    return int(value)


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(WireModel):
    user_id: ID = ""
    username: str = ""
    name: str = ""


class Chat(WireModel):
    chat_id: ID = ""
    title: str = ""
    type: str = ""


class Message(WireModel):
    message_id: ID = ""
    chat: Chat = Field(default_factory=Chat)
    sender: Optional[User] = None
    text: str = ""

    def command(self) -> str:
        """
        Command name of this message, or "" if it is not a command.

        "/start" -> "start", " /START@MyBot arg" -> "start",
        "hello" -> "", "/" -> "".
        """
        return extract_command(self.text)


class CallbackQuery(WireModel):
    callback_id: str = ""
    from_user: Optional[User] = Field(default=None, alias="from")
    data: str = ""
    chat: Optional[Chat] = None
    message: Optional[Message] = None


class Update(WireModel):
    update_id: int = 0
    message: Optional[Message] = None
    callback_query: Optional[CallbackQuery] = None

    @model_validator(mode="after")
    def _single_payload(self) -> "Update":
        if self.message is not None and self.callback_query is not None:
            raise ValueError("update carries both message and callback_query")
        return self


def extract_command(text: Optional[str]) -> str:
    text = (text or "").strip()
    if not text.startswith("/"):
        return ""
    parts = text[1:].split()
    if not parts:
        return ""
    cmd = parts[0].split("@", 1)[0]
    return cmd.strip().lower()


def normalize_command(name: Optional[str]) -> str:
    """Registry key for a command name: lower-cased, no leading '/'."""
    name = (name or "").strip().lower()
    if name.startswith("/"):
        name = name[1:]
    return name


# =============================================================================
# REQUESTS / RESPONSES
# =============================================================================

class SendMessageRequest(WireModel):
    chat_id: ID
    text: str


class SendMediaRequest(WireModel):
    chat_id: ID
    media_id: ID
    caption: Optional[str] = None
    type: Optional[str] = None


class UploadMediaResponse(WireModel):
    media_id: ID = ""
    file_id: ID = ""
    url: str = ""


# =============================================================================
# TAGGED DECODE STEPS
# =============================================================================

class UpdatesShape(str, Enum):
    WRAPPED = "wrapped"  # {"updates": [...]}
    ARRAY = "array"      # [...]


class UploadShape(str, Enum):
    FLAT = "flat"        # {"media_id": ...}, {"file_id": ...}, {"url": ...}
    WRAPPED = "wrapped"  # {"media": {...}}


_update_list = TypeAdapter(List[Update])


def _load_json(body: Union[bytes, str], what: str) -> Any:
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(f"decode {what}: {e}") from e


def decode_update(body: Union[bytes, str]) -> Update:
    """Decode one update, as delivered to a webhook."""
    try:
        return Update.model_validate_json(body)
    except ValidationError as e:
        raise DecodeError(f"decode update: {e}") from e


def detect_updates_shape(payload: Any) -> Tuple[UpdatesShape, Any]:
    """Classify a parsed updates response, returning its shape and raw list."""
    if isinstance(payload, dict) and isinstance(payload.get("updates"), list):
        return UpdatesShape.WRAPPED, payload["updates"]
    if isinstance(payload, list):
        return UpdatesShape.ARRAY, payload
    raise DecodeError("decode updates response: expected a list or an object with 'updates'")


def decode_updates(body: Union[bytes, str]) -> List[Update]:
    """Decode a GET /updates response in either of its two shapes."""
    _, items = detect_updates_shape(_load_json(body, "updates response"))
    try:
        return _update_list.validate_python(items)
    except ValidationError as e:
        raise DecodeError(f"decode updates response: {e}") from e


def detect_upload_shape(payload: Any) -> Tuple[UploadShape, Any]:
    """Any object is an upload record; only a "media" object without flat fields is WRAPPED."""
    if not isinstance(payload, dict):
        raise DecodeError("decode upload media response: expected an object")
    flat = any(payload.get(key) is not None for key in ("media_id", "file_id", "url"))
    if not flat and isinstance(payload.get("media"), dict):
        return UploadShape.WRAPPED, payload["media"]
    return UploadShape.FLAT, payload


def decode_upload(body: Union[bytes, str]) -> UploadMediaResponse:
    """Decode a POST /media/upload response in either of its two shapes."""
    _, record = detect_upload_shape(_load_json(body, "upload media response"))
    try:
        return UploadMediaResponse.model_validate(record)
    except ValidationError as e:
        raise DecodeError(f"decode upload media response: {e}") from e
