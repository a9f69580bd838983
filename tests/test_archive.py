"""Tests for slicemeta.archive — G-code extraction from .gcode.3mf archives."""

from __future__ import annotations

import io
import zipfile

import pytest

from slicemeta.archive import (
    ArchiveError,
    ArchiveFormatError,
    StreamNotFoundError,
    extract_from_archive,
    find_gcode_entries,
)

GCODE = "; Test G-code\nG28 ; home\n"


class TestExtractFromArchive:

    def test_default_plate(self, make_archive) -> None:
        data = make_archive({
            "[Content_Types].xml": '<?xml version="1.0"?>',
            "Metadata/plate_1.gcode": GCODE,
        })
        assert extract_from_archive(data) == GCODE

    def test_other_plate_when_no_plate_1(self, make_archive) -> None:
        data = make_archive({"Metadata/plate_2.gcode": GCODE})
        assert extract_from_archive(data) == GCODE

    def test_root_level_fallback(self, make_archive) -> None:
        data = make_archive({"test.gcode": GCODE})
        assert extract_from_archive(data) == GCODE

    def test_plate_1_beats_root_file(self, make_archive) -> None:
        data = make_archive({
            "test.gcode": "; Fallback G-code\n",
            "Metadata/plate_1.gcode": "; Preferred G-code\n",
        })
        assert extract_from_archive(data) == "; Preferred G-code\n"

    def test_plate_1_beats_other_plates(self, make_archive) -> None:
        data = make_archive({
            "Metadata/plate_3.gcode": "; plate 3\n",
            "Metadata/plate_2.gcode": "; plate 2\n",
            "Metadata/plate_1.gcode": "; plate 1\n",
        })
        assert extract_from_archive(data) == "; plate 1\n"

    def test_other_plate_beats_root_file(self, make_archive) -> None:
        data = make_archive({
            "legacy.gcode": "; root\n",
            "Metadata/plate_4.gcode": "; plate 4\n",
        })
        assert extract_from_archive(data) == "; plate 4\n"

    def test_nested_gcode_outside_metadata_ignored(self, make_archive) -> None:
        data = make_archive({"Auxiliaries/old/model.gcode": GCODE})
        with pytest.raises(StreamNotFoundError):
            extract_from_archive(data)

    def test_utf8_content_preserved(self, make_archive) -> None:
        text = "; Filament: Prusament PLA Galaxy Black – 1.75 mm\nG28\n"
        data = make_archive({"Metadata/plate_1.gcode": text.encode("utf-8")})
        assert extract_from_archive(data) == text

    def test_no_gcode_entry(self, make_archive) -> None:
        data = make_archive({"model.stl": "dummy", "3D/3dmodel.model": "<model/>"})
        with pytest.raises(StreamNotFoundError, match="No .gcode file found") as excinfo:
            extract_from_archive(data)
        assert "Metadata/plate_1.gcode" in str(excinfo.value)

    def test_not_a_zip(self) -> None:
        with pytest.raises(ArchiveFormatError):
            extract_from_archive(b"not a zip file")

    def test_empty_bytes(self) -> None:
        with pytest.raises(ArchiveFormatError):
            extract_from_archive(b"")

    def test_invalid_utf8_replaced(self, make_archive) -> None:
        data = make_archive({"Metadata/plate_1.gcode": b"; \xe9 latin1 comment\n;TIME:60\n"})
        text = extract_from_archive(data)
        assert text == "; \ufffd latin1 comment\n;TIME:60\n"

    def test_corrupt_deflate_data(self, make_archive) -> None:
        data = bytearray(make_archive({"Metadata/plate_1.gcode": GCODE * 50}))
        with zipfile.ZipFile(io.BytesIO(bytes(data))) as zf:
            offset = zf.getinfo("Metadata/plate_1.gcode").header_offset
        name_len = int.from_bytes(data[offset + 26:offset + 28], "little")
        extra_len = int.from_bytes(data[offset + 28:offset + 30], "little")
        start = offset + 30 + name_len + extra_len
        data[start:start + 8] = b"\xff" * 8

        with pytest.raises(ArchiveFormatError, match="Could not read"):
            extract_from_archive(bytes(data))

    def test_non_digit_plate_name_ignored(self, make_archive) -> None:
        data = make_archive({"Metadata/plate_extra.gcode": GCODE})
        with pytest.raises(StreamNotFoundError):
            extract_from_archive(data)

    def test_errors_share_base_class(self, make_archive) -> None:
        assert issubclass(ArchiveFormatError, ArchiveError)
        assert issubclass(StreamNotFoundError, ArchiveError)
        with pytest.raises(ArchiveError):
            extract_from_archive(make_archive({"readme.txt": "hi"}))


class TestFindGcodeEntries:

    def _open(self, make_archive, entries: dict[str, str]) -> zipfile.ZipFile:
        return zipfile.ZipFile(io.BytesIO(make_archive(entries)))

    def test_orders_by_priority(self, make_archive) -> None:
        with self._open(make_archive, {
            "root.gcode": "",
            "Metadata/plate_2.gcode": "",
            "Metadata/plate_1.gcode": "",
            "Metadata/plate_1.png": "",
        }) as zf:
            assert find_gcode_entries(zf) == [
                "Metadata/plate_1.gcode",
                "Metadata/plate_2.gcode",
                "root.gcode",
            ]

    def test_equal_priority_keeps_archive_order(self, make_archive) -> None:
        with self._open(make_archive, {
            "Metadata/plate_5.gcode": "",
            "Metadata/plate_2.gcode": "",
        }) as zf:
            assert find_gcode_entries(zf) == ["Metadata/plate_5.gcode", "Metadata/plate_2.gcode"]

    def test_empty_archive(self, make_archive) -> None:
        with self._open(make_archive, {}) as zf:
            assert find_gcode_entries(zf) == []
