"""Pydantic models and tolerant decoding for attachment uploads"""

from typing import Any

from pydantic import BaseModel


class AttachmentPresign(BaseModel):
    """Presign response: where to PUT the bytes"""

    upload_id: str
    upload_url: str
    key: str | None = None


class Attachment(BaseModel):
    """Committed attachment"""

    id: str
    name: str
    size_bytes: int
    content_type: str | None = None
    storage_key: str | None = None
    download_url: str | None = None


def _first_present(raw: dict, *names: str) -> Any:
    """Value under the first of names present in raw"""
    for name in names:
        if name in raw:
            return raw[name]
    return None


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _as_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def map_attachment_commit_response(
    commit_raw: Any,
    fallback_name: str,
    fallback_size: int,
    fallback_type: str,
    fallback_key: str | None,
) -> Attachment:
    """Decode a commit response whose shape varies between API versions

    Field precedence (the first key present is used; if its value has the
    wrong type the fallback applies, the alternate name is not consulted):
    - id: "id" -> "attachment"
    - name: "filename", "name" -> fallback_name
    - size_bytes: "size_bytes", "size" -> fallback_size
    - content_type: "content_type" -> fallback_type
    - storage_key: "storage_key", "key" -> fallback_key (from presign)
    - download_url: "download_url" -> None

    Args:
        commit_raw: Decoded JSON body of POST /attachments/commit
        fallback_name: Filename the client uploaded
        fallback_size: Byte count the client uploaded
        fallback_type: Content type the client uploaded
        fallback_key: Storage key from the presign step, if any

    Returns:
        Fully populated Attachment
    """
    raw = commit_raw if isinstance(commit_raw, dict) else {}

    attachment_id = _as_str(raw.get("id"))
    name = _as_str(_first_present(raw, "filename", "name"))
    size = _as_int(_first_present(raw, "size_bytes", "size"))
    content_type = _as_str(raw.get("content_type"))
    storage_key = _as_str(_first_present(raw, "storage_key", "key"))

    return Attachment(
        id=attachment_id if attachment_id is not None else "attachment",
        name=name if name is not None else fallback_name,
        size_bytes=size if size is not None else fallback_size,
        content_type=content_type if content_type is not None else fallback_type,
        storage_key=storage_key if storage_key is not None else fallback_key,
        download_url=_as_str(raw.get("download_url")),
    )
