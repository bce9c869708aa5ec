# tests/services/test_pipeline.py
"""Tests for ziria/services/pipeline.py."""

from io import BytesIO

import pytest
from PIL import Image

from ziria.errors import CacheDecodeError, ScaleFactorError, TextureUnavailableError
from ziria.services.pipeline import (
    build_avatar,
    build_skin,
    composite_overlay,
    decode_cached,
    decode_texture,
    encode,
    extract_region,
    scale_nearest_neighbor,
)


def face_color(i: int, j: int) -> tuple[int, int, int]:
    return (10 * i, 20 + 10 * j, 200)


class TestDecodeTexture:
    def test_modern_texture(self, texture_png: bytes) -> None:
        texture = decode_texture(texture_png)
        assert texture.mode == "RGBA"
        assert texture.size == (64, 64)

    def test_legacy_texture_is_padded(self, legacy_texture_png: bytes) -> None:
        texture = decode_texture(legacy_texture_png)
        assert texture.size == (64, 64)
        assert texture.getpixel((8, 8)) == (*face_color(0, 0), 255)
        assert texture.getpixel((10, 50)) == (0, 0, 0, 0)

    def test_not_an_image(self) -> None:
        with pytest.raises(TextureUnavailableError, match="could not be decoded"):
            decode_texture(b"definitely not a png")

    def test_unsupported_size(self) -> None:
        buffer = BytesIO()
        Image.new("RGBA", (32, 32)).save(buffer, format="PNG")
        with pytest.raises(TextureUnavailableError, match="32x32"):
            decode_texture(buffer.getvalue())


class TestExtractRegion:
    def test_face(self, texture: Image.Image) -> None:
        face = extract_region(texture, 8, 8, 8, 8)
        assert face.size == (8, 8)
        assert face.getpixel((0, 0)) == (*face_color(0, 0), 255)
        assert face.getpixel((7, 3)) == (*face_color(7, 3), 255)

    def test_does_not_alias_source(self, texture: Image.Image) -> None:
        face = extract_region(texture, 8, 8, 8, 8)
        face.putpixel((0, 0), (9, 9, 9, 9))
        assert texture.getpixel((8, 8)) == (*face_color(0, 0), 255)


class TestCompositeOverlay:
    def test_transparent_overlay_leaves_base(self) -> None:
        base = Image.new("RGB", (2, 2), (10, 20, 30))
        result = composite_overlay(base, Image.new("RGBA", (2, 2), (255, 255, 255, 0)))
        assert list(result.getdata()) == [(10, 20, 30)] * 4

    def test_opaque_overlay_replaces_base(self) -> None:
        base = Image.new("RGBA", (2, 2), (10, 20, 30, 255))
        result = composite_overlay(base, Image.new("RGBA", (2, 2), (1, 2, 3, 255)))
        assert list(result.getdata()) == [(1, 2, 3, 255)] * 4

    def test_half_alpha_over_opaque(self) -> None:
        base = Image.new("RGBA", (1, 1), (100, 100, 100, 255))
        result = composite_overlay(base, Image.new("RGBA", (1, 1), (200, 0, 0, 128)))
        # (200*128 + 100*127) / 255 = 150.2, (100*127) / 255 = 49.8
        assert result.getpixel((0, 0)) == (150, 50, 50, 255)

    def test_half_alpha_over_transparent(self) -> None:
        base = Image.new("RGBA", (1, 1), (0, 0, 0, 0))
        result = composite_overlay(base, Image.new("RGBA", (1, 1), (200, 0, 0, 128)))
        assert result.getpixel((0, 0)) == (200, 0, 0, 128)

    def test_rgb_base_stays_rgb(self) -> None:
        base = Image.new("RGB", (1, 1), (100, 100, 100))
        result = composite_overlay(base, Image.new("RGBA", (1, 1), (200, 0, 0, 128)))
        assert result.mode == "RGB"
        assert result.getpixel((0, 0)) == (150, 50, 50)

    def test_offset_and_clipping(self) -> None:
        base = Image.new("RGB", (2, 2), (0, 0, 0))
        result = composite_overlay(base, Image.new("RGBA", (2, 2), (9, 9, 9, 255)), 1, 1)
        assert result.getpixel((0, 0)) == (0, 0, 0)
        assert result.getpixel((1, 1)) == (9, 9, 9)

    def test_base_is_not_modified(self) -> None:
        base = Image.new("RGB", (1, 1), (0, 0, 0))
        composite_overlay(base, Image.new("RGBA", (1, 1), (9, 9, 9, 255)))
        assert base.getpixel((0, 0)) == (0, 0, 0)


class TestScaleNearestNeighbor:
    def test_pixel_replication(self, texture: Image.Image) -> None:
        face = extract_region(texture, 8, 8, 8, 8)
        scaled = scale_nearest_neighbor(face, 64)
        assert scaled.size == (64, 64)
        for y in range(64):
            for x in range(64):
                assert scaled.getpixel((x, y)) == face.getpixel((x // 8, y // 8))

    def test_same_size_is_a_copy(self) -> None:
        grid = Image.new("RGB", (8, 8), (1, 2, 3))
        scaled = scale_nearest_neighbor(grid, 8)
        assert scaled is not grid
        assert scaled.tobytes() == grid.tobytes()

    @pytest.mark.parametrize("target", [0, 4, 12, 100])
    def test_non_integer_factor(self, target: int) -> None:
        with pytest.raises(ScaleFactorError):
            scale_nearest_neighbor(Image.new("RGB", (8, 8)), target)

    def test_non_square_grid(self) -> None:
        with pytest.raises(ScaleFactorError):
            scale_nearest_neighbor(Image.new("RGB", (8, 4)), 16)


class TestEncode:
    def test_deterministic(self, texture: Image.Image) -> None:
        assert encode(texture) == encode(texture.copy())

    def test_metadata_does_not_reach_output(self, texture: Image.Image) -> None:
        tagged = texture.copy()
        tagged.info["dpi"] = (300, 300)
        tagged.info["icc_profile"] = b"not really a profile"
        assert encode(tagged) == encode(texture)

    def test_modes(self) -> None:
        with Image.open(BytesIO(encode(Image.new("RGB", (8, 8))))) as img:
            assert img.mode == "RGB"
        with Image.open(BytesIO(encode(Image.new("RGBA", (64, 64))))) as img:
            assert img.mode == "RGBA"


class TestDecodeCached:
    def test_matching_image(self) -> None:
        grid = decode_cached(encode(Image.new("RGB", (8, 8), (1, 2, 3))), "RGB", 8)
        assert grid.getpixel((0, 0)) == (1, 2, 3)

    def test_wrong_shape(self) -> None:
        with pytest.raises(CacheDecodeError, match="expected RGB 8x8"):
            decode_cached(encode(Image.new("RGBA", (64, 64))), "RGB", 8)

    def test_undecodable(self) -> None:
        with pytest.raises(CacheDecodeError):
            decode_cached(b"\x89PNG\r\n\x1a\nbroken", "RGB", 8)


class TestBuilders:
    def test_plain_avatar_is_the_face(self, texture: Image.Image) -> None:
        avatar = build_avatar(texture, overlay=False)
        assert avatar.mode == "RGB"
        assert avatar.size == (8, 8)
        for j in range(8):
            for i in range(8):
                assert avatar.getpixel((i, j)) == face_color(i, j)

    def test_overlay_avatar(self, texture: Image.Image) -> None:
        avatar = build_avatar(texture, overlay=True)
        # Transparent helmet row keeps the face
        assert avatar.getpixel((3, 0)) == face_color(3, 0)
        # Opaque helmet row replaces it
        assert avatar.getpixel((3, 1)) == (255, 0, 0)
        # Half-alpha blue over (0, 40, 200): (40*127)/255 = 19.9, (255*128 + 200*127)/255 = 227.6
        assert avatar.getpixel((0, 2)) == (0, 20, 228)
        assert avatar.getpixel((4, 5)) == face_color(4, 5)

    def test_skin_is_the_texture(self, texture: Image.Image) -> None:
        skin = build_skin(texture)
        assert skin.tobytes() == texture.tobytes()
        assert skin is not texture


def test_extract_region_from_block_markers() -> None:
    """Every 8x8 block has its own colour; the face is exactly block (1, 1)."""
    texture = Image.new("RGBA", (64, 64))
    for by in range(8):
        for bx in range(8):
            block = Image.new("RGBA", (8, 8), (bx * 30, by * 30, 7, 255))
            texture.paste(block, (bx * 8, by * 8))

    face = extract_region(texture, 8, 8, 8, 8)

    assert set(face.getdata()) == {(30, 30, 7, 255)}
