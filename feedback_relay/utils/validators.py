import os

DEFAULT_MEDIA_EXTENSIONS = ("jpeg", "jpg", "png", "gif", "mp4", "avi", "mov", "wmv")
_MEDIA_MIME_PREFIXES = ("image/", "video/")

def clean_str(val: str | None, max_len: int | None = None) -> str | None:
    """
    Trim and optionally cap length. Returns None if empty after cleaning.
    Inner whitespace is kept; descriptions are free text.
    """
    if val is None:
        return None
    s = str(val).strip()
    if not s:
        return None
    return s[:max_len] if max_len else s

def file_extension(filename: str | None) -> str:
    return os.path.splitext(filename or "")[1].lstrip(".").lower()

def is_allowed_media(filename: str | None, mimetype: str | None, allowed_exts=None) -> bool:
    """
    Extension must be on the allow-list AND the declared type must be image/* or video/*.
    (.mov arrives as video/quicktime, .avi as video/x-msvideo.)
    """
    exts = allowed_exts if allowed_exts is not None else DEFAULT_MEDIA_EXTENSIONS
    ext = file_extension(filename)
    if not ext or ext not in exts:
        return False
    return (mimetype or "").lower().startswith(_MEDIA_MIME_PREFIXES)
