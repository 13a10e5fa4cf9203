"""Filename sanitizing and URL sanity checks."""

import re
from urllib.parse import urlparse

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_UNDERSCORES = re.compile(r"_+")

DEFAULT_STEM = "document"


def _tidy(name: str) -> str:
    return _UNDERSCORES.sub("_", name).strip("_")


def sanitize_filename(name: str, extension: str = ".pdf") -> str:
    """Turn a display name into a safe, lower-case filename.

    Anything outside [a-z0-9] becomes "_", runs of "_" collapse, and an
    extension that leaked into the middle of the name ("_pdf") is dropped
    before the real extension is appended. sanitize_filename(x) is a fixed
    point: running it again returns the same string.
    """
    extension = extension.lower()
    fragment = "_" + extension.lstrip(".")

    safe = _tidy(_NON_ALNUM.sub("_", name.lower()))
    # Removing one fragment can expose another ("a_p_pdfdf")
    while True:
        stripped = _tidy(safe.replace(fragment, ""))
        if stripped == safe:
            break
        safe = stripped

    if not safe:
        safe = DEFAULT_STEM
    if not safe.endswith(extension):
        safe += extension
    return safe


def is_valid_url(url: str) -> bool:
    """Absolute http(s) URL with a host."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
