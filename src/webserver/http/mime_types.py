"""
=============================================================================
CONTENT TYPE DETECTION
=============================================================================

Maps file extensions to the MIME type sent in the Content-Type header.

Unlike a general purpose static server, this table is CLOSED: a file whose
extension is not listed is not served with a guessed type such as
application/octet-stream. The lookup fails instead and the request handler
turns the failure into 400 Bad Request.

    get_content_type("/index.html")   → "text/html"
    get_content_type("/LOGO.PNG")     → "image/png"   (case-insensitive)
    get_content_type("/notes.txt")    → UnsupportedContentTypeError

=============================================================================
"""

# Lowercase extension (no dot) → MIME type
CONTENT_TYPES = {
    # Web pages and assets
    "html": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "xml": "application/xml",

    # Images
    "jpg": "image/jpeg",
    "gif": "image/gif",
    "ico": "image/x-icon",
    "png": "image/png",

    # Documents
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",

    # Archives
    "zip": "application/zip",
}


class UnsupportedContentTypeError(ValueError):
    """Raised when a file extension has no entry in CONTENT_TYPES."""

    def __init__(self, extension: str):
        super().__init__(f"Unsupported content type: {extension!r}")
        self.extension = extension


def get_extension(uri: str) -> str:
    """
    Get the extension of a request URI: the text after the last ".".

    A URI without any "." has no extension and yields the whole URI, which
    never matches the table.

        >>> get_extension("/img/photo.JPG")
        'JPG'
    """
    return uri[uri.rfind(".") + 1:]


def get_content_type(uri: str) -> str:
    """
    Look up the MIME type for a URI by its extension.

    Args:
        uri: Request URI or file name.

    Returns:
        The MIME type string.

    Raises:
        UnsupportedContentTypeError: If the extension is not in the table.
    """
    extension = get_extension(uri)
    try:
        return CONTENT_TYPES[extension.lower()]
    except KeyError:
        raise UnsupportedContentTypeError(extension) from None
