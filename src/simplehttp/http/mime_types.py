"""
=============================================================================
CONTENT TYPE SNIFFING
=============================================================================

Infers the Content-Type of a served file from its BYTES, not its name.

=============================================================================
EXTENSIONS VS MAGIC NUMBERS
=============================================================================

Most static file servers map the file extension to a MIME type:

    logo.png   → image/png
    notes.txt  → text/plain

That trusts the filename. A PNG renamed to "logo.dat" is served as
application/octet-stream, and a text file renamed "photo.jpg" is handed
to the browser's image decoder.

Sniffing looks at the first bytes of the content instead. Most binary
formats start with a fixed signature, the "magic number":

    ┌──────────────────────────┬────────────────────────────────────────┐
    │ Leading bytes            │ Type                                    │
    ├──────────────────────────┼────────────────────────────────────────┤
    │ 89 50 4E 47              │ image/png                               │
    │ FF D8 FF                 │ image/jpeg                              │
    │ 47 49 46 ("GIF")         │ image/gif                               │
    │ 25 50 44 46 ("%PDF")     │ application/pdf                         │
    │ 50 4B 03 04 ("PK..")     │ application/zip                         │
    │ 1F 8B                    │ application/gzip                        │
    └──────────────────────────┴────────────────────────────────────────┘

The signature table lives in the `filetype` package. Plain text has no
signature, so anything the sniffer cannot identify is served as
text/plain.

=============================================================================
"""

import filetype


# Served when no signature matches (plain text, HTML, source code, ...)
DEFAULT_MIME_TYPE = "text/plain"


def sniff_mime_type(content: bytes, default: str = DEFAULT_MIME_TYPE) -> str:
    """
    Infer a MIME type from file content.

    Args:
        content: The file bytes (only the leading bytes are inspected).
        default: Type returned when the content has no known signature.

    Returns:
        MIME type string, e.g. "image/png".

    Example:
        sniff_mime_type(b"GIF89a...")     # "image/gif"
        sniff_mime_type(b"hello world")   # "text/plain"
    """
    if not content:
        return default
    return filetype.guess_mime(content) or default
