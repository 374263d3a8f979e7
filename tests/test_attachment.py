"""
Attachment Classifier Tests

Tests for reference file content-type detection.
"""

import io

import pytest

from sora_cli.exceptions import UnsupportedAttachmentTypeError
from sora_cli.services.attachment import (
    SNIFF_LENGTH,
    SUPPORTED_CONTENT_TYPES,
    SeekableSource,
    canonicalize_content_type,
    classify_attachment,
    open_attachment,
)

from conftest import JPEG_BYTES, MP4_BYTES, PNG_BYTES, UNKNOWN_BYTES, WEBP_BYTES


# ============================================================================
# canonicalize_content_type() Tests
# ============================================================================

class TestCanonicalizeContentType:
    """Test MIME alias collapsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("image/jpeg", "image/jpeg"),
        ("image/jpg", "image/jpeg"),
        ("image/pjpeg", "image/jpeg"),
        ("image/png", "image/png"),
        ("image/x-png", "image/png"),
        ("image/webp", "image/webp"),
        ("video/mp4", "video/mp4"),
    ])
    def test_should_map_aliases_to_canonical_type(self, raw, expected):
        """Should collapse every known alias onto one canonical type."""
        assert canonicalize_content_type(raw) == expected

    def test_should_ignore_case_and_parameters(self):
        """Should strip parameters and compare case-insensitively."""
        assert canonicalize_content_type(" IMAGE/PNG; charset=binary ") == "image/png"

    @pytest.mark.parametrize("raw", ["", None, "image/gif", "text/plain", "video/quicktime"])
    def test_should_reject_unsupported_types(self, raw):
        """Should return None for types outside the table."""
        assert canonicalize_content_type(raw) is None


# ============================================================================
# classify_attachment() Tests
# ============================================================================

class TestClassifyAttachment:
    """Test magic-byte sniffing with extension fallback."""

    @pytest.mark.parametrize("data,expected", [
        (JPEG_BYTES, "image/jpeg"),
        (PNG_BYTES, "image/png"),
        (WEBP_BYTES, "image/webp"),
        (MP4_BYTES, "video/mp4"),
    ])
    def test_should_sniff_supported_signatures(self, data, expected):
        """Should detect the type from magic bytes regardless of the file name."""
        assert classify_attachment(io.BytesIO(data), "upload.bin") == expected

    def test_should_prefer_sniffed_type_over_extension(self):
        """Should trust the bytes when they disagree with the extension."""
        assert classify_attachment(io.BytesIO(PNG_BYTES), "photo.jpg") == "image/png"

    @pytest.mark.parametrize("name,expected", [
        ("reference.jpg", "image/jpeg"),
        ("reference.JPEG", "image/jpeg"),
        ("reference.png", "image/png"),
        ("clip.mp4", "video/mp4"),
    ])
    def test_should_fall_back_to_extension(self, name, expected):
        """Should use the extension when sniffing does not resolve."""
        assert classify_attachment(io.BytesIO(UNKNOWN_BYTES), name) == expected

    def test_should_fall_back_to_extension_for_empty_file(self):
        """An empty file is not an error; the extension decides."""
        assert classify_attachment(io.BytesIO(b""), "empty.png") == "image/png"

    def test_should_reject_unknown_bytes_and_extension(self):
        """Should raise with the supported list when nothing matches."""
        with pytest.raises(UnsupportedAttachmentTypeError) as exc_info:
            classify_attachment(io.BytesIO(UNKNOWN_BYTES), "notes.txt")

        assert exc_info.value.supported == list(SUPPORTED_CONTENT_TYPES)
        assert "image/jpeg, image/png, image/webp, video/mp4" in str(exc_info.value)

    def test_should_reject_without_filename(self):
        """Should raise when there is no extension to fall back on."""
        with pytest.raises(UnsupportedAttachmentTypeError):
            classify_attachment(io.BytesIO(UNKNOWN_BYTES))

    def test_should_read_at_most_sniff_length(self):
        """Should only look ahead SNIFF_LENGTH bytes."""
        source = io.BytesIO(JPEG_BYTES + b"\x00" * 4096)

        classify_attachment(source, "big.jpg")

        assert source.tell() <= SNIFF_LENGTH

    def test_bytesio_satisfies_seekable_protocol(self):
        """In-memory buffers qualify as seekable sources."""
        assert isinstance(io.BytesIO(b""), SeekableSource)


# ============================================================================
# open_attachment() Tests
# ============================================================================

class TestOpenAttachment:
    """Test classification plus rewind on real files."""

    def test_should_rewind_after_classification(self, tmp_path):
        """Reading after classification should yield the original bytes."""
        content = MP4_BYTES + bytes(range(256)) * 8
        path = tmp_path / "clip.mp4"
        path.write_bytes(content)

        with open_attachment(path) as attachment:
            assert attachment.content_type == "video/mp4"
            assert attachment.filename == "clip.mp4"
            assert attachment.stream.read() == content

    def test_should_close_stream_on_exit(self, tmp_path):
        """Should close the handle when the context exits."""
        path = tmp_path / "photo.jpg"
        path.write_bytes(JPEG_BYTES)

        with open_attachment(path) as attachment:
            stream = attachment.stream

        assert stream.closed

    def test_should_raise_for_missing_file(self, tmp_path):
        """Should surface the OS error for a missing file."""
        with pytest.raises(FileNotFoundError):
            with open_attachment(tmp_path / "missing.png"):
                pass

    def test_should_raise_for_unsupported_file(self, tmp_path):
        """Should raise before yielding for unsupported content."""
        path = tmp_path / "notes.txt"
        path.write_bytes(UNKNOWN_BYTES)

        with pytest.raises(UnsupportedAttachmentTypeError):
            with open_attachment(path):
                pass
