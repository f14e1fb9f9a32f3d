"""
Unit tests for content type sniffing.
"""

import pytest

from simplehttp.http.mime_types import sniff_mime_type, DEFAULT_MIME_TYPE


class TestSniffMimeType:

    @pytest.mark.parametrize("content, expected", [
        (b"\x89PNG\r\n\x1a\n" + b"\x00" * 16, "image/png"),
        (b"\xff\xd8\xff\xe0" + b"\x00" * 16, "image/jpeg"),
        (b"GIF89a" + b"\x00" * 16, "image/gif"),
        (b"%PDF-1.7\n" + b"\x00" * 16, "application/pdf"),
        (b"\x1f\x8b\x08" + b"\x00" * 16, "application/gzip"),
    ])
    def test_known_signatures(self, content, expected):
        assert sniff_mime_type(content) == expected

    def test_plain_text_falls_back(self):
        assert sniff_mime_type(b"hello world\n") == "text/plain"

    def test_html_falls_back(self):
        """Test that markup has no signature and is served as text."""
        assert sniff_mime_type(b"<!DOCTYPE html><html></html>") == DEFAULT_MIME_TYPE

    def test_empty_content(self):
        assert sniff_mime_type(b"") == "text/plain"

    def test_custom_default(self):
        assert sniff_mime_type(b"abc", default="application/octet-stream") == (
            "application/octet-stream"
        )
