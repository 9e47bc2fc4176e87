"""
Unit tests for content type classification.
"""

import pytest

from fileserver.http.mime_types import (
    DEFAULT_MIME_TYPE,
    ExtensionClassifier,
    SniffingClassifier,
    get_mime_type,
    sniff_mime_type,
)


PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PDF = b"%PDF-1.7\n" + b"\x00" * 16
GIF = b"GIF89a" + b"\x00" * 16


class TestExtensionTable:

    @pytest.mark.parametrize("name, expected", [
        ("index.html", "text/html"),
        ("index.htm", "text/html"),
        ("style.css", "text/css"),
        ("app.js", "application/javascript"),
        ("data.json", "application/json"),
        ("notes.txt", "text/plain"),
        ("logo.png", "image/png"),
        ("photo.jpg", "image/jpeg"),
        ("photo.jpeg", "image/jpeg"),
        ("anim.gif", "image/gif"),
        ("icon.svg", "image/svg+xml"),
        ("paper.pdf", "application/pdf"),
        ("clip.mp4", "video/mp4"),
        ("clip.webm", "video/webm"),
        ("clip.ogg", "video/ogg"),
    ])
    def test_known_extensions(self, name: str, expected: str):
        assert get_mime_type(name) == expected

    def test_extension_case_ignored(self):
        assert get_mime_type("STYLE.CSS") == "text/css"

    def test_unknown_extension(self):
        assert get_mime_type("archive.xyz") == DEFAULT_MIME_TYPE
        assert get_mime_type("Makefile") == "application/octet-stream"

    def test_custom_default(self):
        assert get_mime_type("archive.xyz", default="text/plain") == "text/plain"


class TestSniffing:

    def test_sniff_signatures(self):
        assert sniff_mime_type(PNG) == "image/png"
        assert sniff_mime_type(PDF) == "application/pdf"
        assert sniff_mime_type(GIF) == "image/gif"

    def test_sniff_text_is_unknown(self):
        assert sniff_mime_type(b"<html><body>hi</body></html>") is None

    def test_sniff_empty_is_unknown(self):
        assert sniff_mime_type(b"") is None


class TestClassifiers:

    def test_sniffing_first(self):
        assert SniffingClassifier().classify(PNG, "image.txt") == "image/png"

    def test_extension_fallback(self):
        assert SniffingClassifier()(b"body { }", "style.css") == "text/css"

    def test_octet_stream_last(self):
        assert SniffingClassifier()(b"plain words", "blob.bin") == DEFAULT_MIME_TYPE

    def test_extension_classifier_ignores_bytes(self):
        assert ExtensionClassifier()(PNG, "image.txt") == "text/plain"

    def test_custom_fallback(self):
        class Always(ExtensionClassifier):
            def classify(self, data, path):
                return "text/x-custom"

        assert SniffingClassifier(fallback=Always())(b"plain", "x.css") == "text/x-custom"
