"""
Compact codec for cached PNG images.

Every image this service caches is written by one fixed encoder
configuration (8-bit RGB or RGBA, zlib level 6, a single IDAT chunk, no
ancillary chunks). Such a stream is mostly structure that is either constant
or recomputable from its compressed pixels:

    signature | IHDR | len "IDAT" 78 9C <deflate> <adler32> crc | IEND

The compact payload keeps only a one-byte profile tag (standing in for the
whole IHDR chunk) followed by the raw DEFLATE stream. Everything else is
rebuilt on the way out: chunk lengths and CRC-32s, the zlib header, and the
Adler-32 trailer, which is recomputed from the inflated scanlines.

This is not a general-purpose PNG codec. ``compact`` refuses any stream that
does not match the skeleton exactly, so everything it accepts comes back
byte-for-byte from ``decompact``.
"""

from dataclasses import dataclass
from logging import DEBUG, getLogger
from struct import Struct
from zlib import MAX_WBITS, adler32, crc32, decompressobj
from zlib import error as ZlibError

from ziria.configs import file_logger
from ziria.errors.cache import CodecCorruptionError, CodecFormatError

logger = file_logger(getLogger(__name__))

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
# CMF 0x78 (deflate, 32K window), FLG 0x9C (FLEVEL 2, i.e. level 6)
ZLIB_HEADER = b"\x78\x9c"
ADLER_SIZE = 4

COLOR_TYPE_RGB = 2
COLOR_TYPE_RGBA = 6

_UINT32 = Struct(">I")
_IHDR = Struct(">IIBBBBB")


@dataclass(frozen=True)
class Profile:
    """One image shape the fixed encoder produces for the cache."""

    tag: int
    width: int
    height: int
    color_type: int

    @property
    def channels(self) -> int:
        return 4 if self.color_type == COLOR_TYPE_RGBA else 3

    @property
    def raw_size(self) -> int:
        """Size of the filtered scanlines: one filter byte per row plus pixels."""
        return self.height * (1 + self.width * self.channels)

    @property
    def ihdr(self) -> bytes:
        # bit depth 8, compression 0, filter 0, interlace 0
        return _IHDR.pack(self.width, self.height, 8, self.color_type, 0, 0, 0)


AVATAR_PROFILE = Profile(0x01, 8, 8, COLOR_TYPE_RGB)
SKIN_PROFILE = Profile(0x02, 64, 64, COLOR_TYPE_RGBA)

PROFILES: tuple[Profile, ...] = (AVATAR_PROFILE, SKIN_PROFILE)
_BY_TAG = {p.tag: p for p in PROFILES}
_BY_IHDR = {p.ihdr: p for p in PROFILES}


def _chunk(kind: bytes, data: bytes) -> bytes:
    """Frame chunk data with its length and CRC-32 (over type and data)."""
    return _UINT32.pack(len(data)) + kind + data + _UINT32.pack(crc32(data, crc32(kind)))


IEND_CHUNK = _chunk(b"IEND", b"")


def _read_chunks(stream: bytes) -> list[tuple[bytes, bytes]]:
    """Split a PNG stream into (type, data) pairs, checking every CRC."""
    chunks: list[tuple[bytes, bytes]] = []
    offset = len(PNG_SIGNATURE)
    while offset < len(stream):
        if offset + 8 > len(stream):
            mssg = "Truncated chunk header"
            raise CodecFormatError(mssg)
        (length,) = _UINT32.unpack_from(stream, offset)
        kind = stream[offset + 4 : offset + 8]
        end = offset + 8 + length
        if end + 4 > len(stream):
            mssg = f"Truncated {kind!r} chunk"
            raise CodecFormatError(mssg)
        data = stream[offset + 8 : end]
        (crc,) = _UINT32.unpack_from(stream, end)
        if crc != crc32(data, crc32(kind)):
            mssg = f"CRC mismatch in {kind!r} chunk"
            raise CodecFormatError(mssg)
        chunks.append((kind, data))
        offset = end + 4
    return chunks


def _inflate(deflate: bytes, profile: Profile) -> bytes:
    """
    Inflate a raw DEFLATE stream and check it yields exactly one image.

    Raises:
        CodecCorruptionError: If the stream is invalid, truncated, followed by
            stray bytes, or inflates to the wrong number of scanline bytes.
    """
    inflater = decompressobj(-MAX_WBITS)
    try:
        raw = inflater.decompress(deflate, profile.raw_size + 1)
    except ZlibError as e:
        mssg = f"Invalid deflate stream: {e}"
        raise CodecCorruptionError(mssg) from e

    if inflater.unconsumed_tail:
        mssg = "Deflate stream inflates beyond the expected image size"
        raise CodecCorruptionError(mssg)
    if not inflater.eof:
        mssg = "Deflate stream is truncated"
        raise CodecCorruptionError(mssg)
    if inflater.unused_data:
        mssg = f"{len(inflater.unused_data)} stray bytes after deflate stream"
        raise CodecCorruptionError(mssg)
    if len(raw) != profile.raw_size:
        mssg = f"Inflated {len(raw)} bytes, expected {profile.raw_size}"
        raise CodecCorruptionError(mssg)
    return raw


def compact(png: bytes) -> bytes:
    """
    Strip a self-encoded PNG down to its profile tag and DEFLATE stream.

    Args:
        png: A stream produced by ``ziria.services.pipeline.encode``.

    Returns:
        The compact payload to store.

    Raises:
        CodecFormatError: If the stream does not have the fixed skeleton.
    """
    if not png.startswith(PNG_SIGNATURE):
        mssg = "Missing PNG signature"
        raise CodecFormatError(mssg)

    chunks = _read_chunks(png)
    kinds = [kind for kind, _ in chunks]
    if kinds != [b"IHDR", b"IDAT", b"IEND"]:
        mssg = f"Unexpected chunk layout {b' '.join(kinds).decode('latin-1')}"
        raise CodecFormatError(mssg)

    (_, ihdr), (_, idat), (_, iend) = chunks
    profile = _BY_IHDR.get(ihdr)
    if profile is None:
        mssg = "Image header does not match any cached profile"
        raise CodecFormatError(mssg)
    if iend:
        mssg = "IEND chunk carries data"
        raise CodecFormatError(mssg)
    if len(idat) < len(ZLIB_HEADER) + ADLER_SIZE or not idat.startswith(ZLIB_HEADER):
        mssg = "IDAT does not start with the fixed zlib header"
        raise CodecFormatError(mssg)

    deflate = idat[len(ZLIB_HEADER) : -ADLER_SIZE]
    try:
        raw = _inflate(deflate, profile)
    except CodecCorruptionError as e:
        raise CodecFormatError(e.detail) from e
    if _UINT32.pack(adler32(raw)) != idat[-ADLER_SIZE:]:
        mssg = "Adler-32 mismatch in IDAT"
        raise CodecFormatError(mssg)

    payload = bytes((profile.tag,)) + deflate
    if logger.isEnabledFor(DEBUG):
        logger.debug("Compacted %d-byte PNG to %d bytes", len(png), len(payload))
    return payload


def decompact(payload: bytes) -> bytes:
    """
    Rebuild the exact PNG stream a compact payload was taken from.

    Args:
        payload: Bytes previously returned by ``compact``.

    Returns:
        A complete, standard PNG stream.

    Raises:
        CodecCorruptionError: If the payload cannot yield a valid stream.
    """
    if not payload:
        mssg = "Empty payload"
        raise CodecCorruptionError(mssg)

    profile = _BY_TAG.get(payload[0])
    if profile is None:
        mssg = f"Unknown profile tag 0x{payload[0]:02x}"
        raise CodecCorruptionError(mssg)

    deflate = payload[1:]
    raw = _inflate(deflate, profile)
    idat = ZLIB_HEADER + deflate + _UINT32.pack(adler32(raw))

    return PNG_SIGNATURE + _chunk(b"IHDR", profile.ihdr) + _chunk(b"IDAT", idat) + IEND_CHUNK
