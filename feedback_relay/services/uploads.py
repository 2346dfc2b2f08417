from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename


@dataclass(frozen=True)
class StoredFile:
    original_name: str
    stored_name: str
    path: str
    mimetype: str
    size: int


def upload_dir() -> str:
    path = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(path, exist_ok=True)
    return path


def file_size(storage: FileStorage) -> int:
    stream = storage.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def display_name(filename: str | None) -> str:
    """Original name as metadata only: drop any client-side directories."""
    return os.path.basename((filename or "").replace("\\", "/")).strip()


def incoming_files(files) -> list[FileStorage]:
    """All non-empty file parts regardless of field name (request.files is a MultiDict)."""
    out = []
    for _field, storage in files.items(multi=True):
        if storage and storage.filename:
            out.append(storage)
    return out


def save_uploads(files: Iterable[FileStorage]) -> list[StoredFile]:
    """
    Write each file under a random hex name (no extension, nothing guessable
    from the original name). Caller validates type/size first.
    """
    target = upload_dir()
    saved = []
    for storage in files:
        stored_name = secrets.token_hex(16)
        path = os.path.join(target, stored_name)
        size = file_size(storage)
        storage.save(path)
        saved.append(StoredFile(
            original_name=display_name(storage.filename) or stored_name,
            stored_name=stored_name,
            path=path,
            mimetype=storage.mimetype or "application/octet-stream",
            size=size,
        ))
    return saved


def file_info(filename: str, base_url: str) -> Optional[dict]:
    """Metadata for a stored upload, or None when it doesn't exist."""
    safe = secure_filename(filename)
    if not safe or safe != filename:
        return None
    path = os.path.join(upload_dir(), safe)
    if not os.path.isfile(path):
        return None
    st = os.stat(path)
    # st_birthtime only exists on some platforms
    created = getattr(st, "st_birthtime", st.st_ctime)
    return {
        "filename": safe,
        "size": st.st_size,
        "created": datetime.fromtimestamp(created, tz=timezone.utc).isoformat(),
        "modified": datetime.fromtimestamp(st.st_mtime, tz=timezone.utc).isoformat(),
        "url": f"{base_url.rstrip('/')}/uploads/{safe}",
    }
