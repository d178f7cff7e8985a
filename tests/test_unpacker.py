"""
Tests for format dispatch.
"""

import pytest

from conftest import build_rkaf, build_rkfw
from rkunpack.core.config import Config
from rkunpack.core.exceptions import UnrecognizedFormatError
from rkunpack.core.models import ImageFormat, PackageInfo, WrapperInfo
from rkunpack.core.unpacker import Unpacker, detect_format, inspect_file, unpack_file


class TestDetectFormat:

    def test_signatures(self):
        assert detect_format(b"RKFW....") == ImageFormat.RKFW
        assert detect_format(b"RKAF....") == ImageFormat.RKAF

    def test_unknown_signature(self):
        with pytest.raises(UnrecognizedFormatError) as exc_info:
            detect_format(b"ANDROID!")

        assert exc_info.value.signature == b"ANDR"

    def test_empty_input(self):
        with pytest.raises(UnrecognizedFormatError):
            detect_format(b"")


class TestUnpackFile:

    def test_rkaf_dispatch(self, rkaf_image, temp_dir):
        result = unpack_file(rkaf_image, temp_dir / "out")

        assert result.format == ImageFormat.RKAF
        assert isinstance(result.info, PackageInfo)
        assert result.package is result.info
        assert result.destination == str(temp_dir / "out")

    def test_rkfw_dispatch(self, rkfw_image, temp_dir):
        result = unpack_file(rkfw_image, temp_dir / "out")

        assert result.format == ImageFormat.RKFW
        assert isinstance(result.info, WrapperInfo)
        assert result.info.embedded is None
        assert (temp_dir / "out" / "BOOT").exists()
        assert not (temp_dir / "out" / "embedded").exists()

    def test_unrecognized_writes_nothing(self, make_image, temp_dir):
        path = make_image(b"\x7fELF" + b"\x00" * 64)
        dst = temp_dir / "out"

        with pytest.raises(UnrecognizedFormatError):
            unpack_file(path, dst)

        assert not dst.exists()

    def test_recursive(self, rkfw_image, temp_dir):
        dst = temp_dir / "out"
        result = unpack_file(rkfw_image, dst, recursive=True)

        nested = result.info.embedded
        assert nested is not None
        assert len(nested.partitions) == 4
        assert (dst / "embedded" / "partition-metadata.txt").exists()
        assert (dst / "embedded" / "Image" / "boot.img").exists()
        assert result.to_dict()["info"]["embedded"]["model"] == "TestBoard"

    def test_chunk_size_is_honoured(self, rkaf_image, temp_dir):
        dst = temp_dir / "out"
        result = unpack_file(rkaf_image, dst, chunk_size=7)

        boot = result.info.partitions[-1]
        assert (dst / boot.path).stat().st_size == boot.part_byte_count

    def test_missing_input(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            unpack_file(temp_dir / "absent.img", temp_dir / "out")


class TestInspect:

    def test_inspect_rkfw(self, rkfw_image, temp_dir):
        result = inspect_file(rkfw_image)

        assert result.format == ImageFormat.RKFW
        assert result.info.chip_family == "RK3566"
        assert sorted(p.name for p in temp_dir.iterdir()) == ["firmware.img"]

    def test_inspect_rkaf(self, make_image):
        result = inspect_file(make_image(build_rkaf(manufacturer="Acme")))

        assert result.info.manufacturer == "Acme"
        assert len(result.info.partitions) == 4


class TestUnpacker:

    def test_uses_config(self, make_image, temp_dir):
        config = Config(output_dir=str(temp_dir / "configured"))
        config.extractor.recursive = True
        path = make_image(build_rkfw(chip_code=0x41))

        result = Unpacker(config).unpack(path)

        assert result.info.chip_family == "RK3368"
        assert result.info.embedded is not None
        assert (temp_dir / "configured" / "embedded").is_dir()

    def test_explicit_destination_wins(self, config, rkaf_image, temp_dir):
        result = Unpacker(config).unpack(rkaf_image, temp_dir / "explicit")
        assert result.destination == str(temp_dir / "explicit")
