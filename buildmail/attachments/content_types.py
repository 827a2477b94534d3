"""Static file extension to MIME type table.

A fixed table keeps content types identical across hosts, unlike the
platform's mimetypes registry which varies with installed packages.
"""

from typing import Dict

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: Dict[str, str] = {
    # Text
    ".txt": "text/plain",
    ".log": "text/plain",
    ".out": "text/plain",
    ".md": "text/markdown",
    ".csv": "text/csv",
    ".tsv": "text/tab-separated-values",
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".xml": "application/xml",
    ".json": "application/json",
    ".yaml": "application/yaml",
    ".yml": "application/yaml",
    ".diff": "text/x-diff",
    ".patch": "text/x-diff",
    # Images
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    # Documents
    ".pdf": "application/pdf",
    ".rtf": "application/rtf",
    # Archives
    ".zip": "application/zip",
    ".jar": "application/java-archive",
    ".war": "application/java-archive",
    ".gz": "application/gzip",
    ".tgz": "application/gzip",
    ".tar": "application/x-tar",
    ".bz2": "application/x-bzip2",
    ".xz": "application/x-xz",
    ".7z": "application/x-7z-compressed",
}


def content_type_for(filename: str) -> str:
    """Return the MIME type for a file name based on its last extension.

    Matching is case-insensitive. Names without an extension, dotfiles such
    as ``.gitignore`` and unknown extensions map to DEFAULT_CONTENT_TYPE.

    Examples:
        >>> content_type_for("junit-report.XML")
        'application/xml'
        >>> content_type_for("core")
        'application/octet-stream'
    """
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    dot = base.rfind(".")
    if dot <= 0:
        return DEFAULT_CONTENT_TYPE
    return CONTENT_TYPES.get(base[dot:].lower(), DEFAULT_CONTENT_TYPE)
