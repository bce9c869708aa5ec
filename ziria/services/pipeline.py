"""
Image pipeline.

Pure transforms over Pillow images: region extraction from the standard
skin texture layout, alpha compositing, integer-factor nearest-neighbor
scaling, and the fixed PNG encoder whose output the compact codec relies on.
"""

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ziria.configs import FACE_REGION, HELM_REGION, PNG_COMPRESS_LEVEL, SKIN_BASE_SIZE
from ziria.errors.cache import CacheDecodeError
from ziria.errors.render import ScaleFactorError, TextureUnavailableError

LEGACY_TEXTURE_HEIGHT = 32

PixelGrid = Image.Image


def decode_texture(data: bytes) -> PixelGrid:
    """
    Decode raw upstream texture bytes into a 64x64 RGBA grid.

    Legacy 64x32 textures are padded with transparent pixels at the bottom,
    which keeps the head regions at their usual offsets.

    Raises:
        TextureUnavailableError: If the bytes are not an image of a known
            texture size.
    """
    try:
        with Image.open(BytesIO(data)) as img:
            texture = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as e:
        mssg = f"Skin texture could not be decoded: {e!s}"
        raise TextureUnavailableError(mssg) from e

    if texture.size == (SKIN_BASE_SIZE, LEGACY_TEXTURE_HEIGHT):
        padded = Image.new("RGBA", (SKIN_BASE_SIZE, SKIN_BASE_SIZE), (0, 0, 0, 0))
        padded.paste(texture, (0, 0))
        return padded
    if texture.size != (SKIN_BASE_SIZE, SKIN_BASE_SIZE):
        mssg = f"Unsupported skin texture size {texture.width}x{texture.height}"
        raise TextureUnavailableError(mssg)
    return texture


def extract_region(texture: PixelGrid, x: int, y: int, w: int, h: int) -> PixelGrid:
    """Copy the ``w`` x ``h`` rectangle whose top-left corner is (x, y)."""
    return texture.crop((x, y, x + w, y + h))


def _round_div(numerator: int, denominator: int) -> int:
    """Integer division rounding half up."""
    return (2 * numerator + denominator) // (2 * denominator)


def _blend(
    over: tuple[int, int, int, int],
    under: tuple[int, int, int],
    under_alpha: int,
) -> tuple[tuple[int, int, int], int]:
    """Non-premultiplied "over" of one pixel, in 0..255 integer space."""
    *color, alpha = over
    # Combined alpha, scaled by 255
    total = alpha * 255 + under_alpha * (255 - alpha)
    if total == 0:
        return (0, 0, 0), 0
    blended = tuple(
        _round_div(o * alpha * 255 + u * under_alpha * (255 - alpha), total)
        for o, u in zip(color, under, strict=True)
    )
    return (blended[0], blended[1], blended[2]), _round_div(total, 255)


def composite_overlay(
    base: PixelGrid,
    overlay: PixelGrid,
    offset_x: int = 0,
    offset_y: int = 0,
) -> PixelGrid:
    """
    Alpha-composite ``overlay`` onto a copy of ``base`` at the given offset.

    Fully transparent overlay pixels leave the base untouched, fully opaque
    ones replace it, and anything in between blends linearly by alpha. The
    result keeps the mode (RGB or RGBA) of ``base``.
    """
    result = base.copy()
    has_alpha = result.mode == "RGBA"
    target = result.load()
    source = overlay.convert("RGBA").load()

    for oy in range(overlay.height):
        ty = oy + offset_y
        if not 0 <= ty < result.height:
            continue
        for ox in range(overlay.width):
            tx = ox + offset_x
            if not 0 <= tx < result.width:
                continue

            pixel = source[ox, oy]
            if pixel[3] == 0:
                continue
            if pixel[3] == 255:
                target[tx, ty] = pixel if has_alpha else pixel[:3]
                continue

            under = target[tx, ty]
            under_alpha = under[3] if has_alpha else 255
            color, alpha = _blend(pixel, under[:3], under_alpha)
            target[tx, ty] = (*color, alpha) if has_alpha else color

    return result


def scale_nearest_neighbor(grid: PixelGrid, target_size: int) -> PixelGrid:
    """
    Upscale a square grid to ``target_size`` by pixel replication.

    Raises:
        ScaleFactorError: If ``target_size`` is not a positive exact multiple
            of the grid's side length.
    """
    side = grid.width
    if grid.height != side or target_size < side or target_size % side:
        raise ScaleFactorError(source=side, target=target_size)
    if target_size == side:
        return grid.copy()
    return grid.resize((target_size, target_size), Image.Resampling.NEAREST)


def encode(grid: PixelGrid) -> bytes:
    """
    Serialize a grid as PNG with the one fixed encoder configuration.

    The pixels are copied into a fresh image so no metadata carried over from
    a decoded source (ICC profiles, transparency keys, text) reaches the
    encoder; the output depends on pixel content only.
    """
    mode = "RGBA" if "A" in grid.getbands() else "RGB"
    clean = Image.frombytes(mode, grid.size, grid.convert(mode).tobytes())
    buffer = BytesIO()
    clean.save(buffer, format="PNG", compress_level=PNG_COMPRESS_LEVEL)
    return buffer.getvalue()


def decode_cached(png: bytes, mode: str, size: int) -> PixelGrid:
    """
    Decode a rebuilt cache entry and check it is the expected base image.

    Raises:
        CacheDecodeError: If the bytes do not decode to a ``size`` x ``size``
            image in ``mode``.
    """
    try:
        with Image.open(BytesIO(png)) as img:
            img.load()
            grid = img.copy()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise CacheDecodeError from e

    if grid.mode != mode or grid.size != (size, size):
        mssg = f"Cached image is {grid.mode} {grid.width}x{grid.height}, expected {mode} {size}x{size}"
        raise CacheDecodeError(mssg)
    return grid


def build_avatar(texture: PixelGrid, *, overlay: bool) -> PixelGrid:
    """Cut the 8x8 face out of a texture, optionally under its helmet layer."""
    avatar = extract_region(texture, *FACE_REGION).convert("RGB")
    if overlay:
        helm = extract_region(texture, *HELM_REGION)
        avatar = composite_overlay(avatar, helm, 0, 0)
    return avatar


def build_skin(texture: PixelGrid) -> PixelGrid:
    """Return the full texture at its base resolution."""
    return texture.copy()
