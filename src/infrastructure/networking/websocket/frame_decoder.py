"""
Inbound Frame Decoder

Turns a raw websocket frame into a decoded JSON object. Text frames are
parsed directly. Binary frames go through a prioritized list of
decompressors reordered by magic-byte sniffing:

    gzip        1f 8b
    zlib        78 01 / 78 5e / 78 9c / 78 da (any CMF/FLG pair with valid checksum)
    raw deflate no header

Every candidate must yield valid UTF-8; the raw bytes decoded as UTF-8
are the last resort. Inflated output is capped at max_decompressed_size.
"""

import zlib
from typing import Any, Dict, List, Optional, Tuple, Union

import msgspec

from infrastructure.exceptions.exchange import FrameDecodeError
from infrastructure.logging import get_logger, HFTLoggerInterface

GZIP_MAGIC = b'\x1f\x8b'
DEFAULT_MAX_DECOMPRESSED_SIZE = 16 * 1024 * 1024

WBITS: Dict[str, int] = {
    'gzip': 16 + zlib.MAX_WBITS,
    'zlib': zlib.MAX_WBITS,
    'deflate': -zlib.MAX_WBITS,
}


def inflate(payload: bytes, wbits: int, max_length: int) -> bytes:
    """
    Inflate one compressed stream, producing at most max_length bytes.

    Raises:
        zlib.error: corrupt or truncated stream
        FrameDecodeError: output exceeds max_length
    """
    decompressor = zlib.decompressobj(wbits)
    data = decompressor.decompress(payload, max_length + 1)
    if len(data) > max_length:
        raise FrameDecodeError(f"Decompressed frame exceeds {max_length} bytes")
    if not decompressor.eof:
        raise zlib.error("truncated compressed stream")
    return data


DEFAULT_ORDER = ('gzip', 'deflate', 'zlib')


def has_zlib_header(payload: bytes) -> bool:
    """Deflate method, 32K window or less, and header checksum divisible by 31."""
    if len(payload) < 2:
        return False
    cmf, flg = payload[0], payload[1]
    return (cmf & 0x0F) == 8 and (cmf >> 4) <= 7 and ((cmf << 8) | flg) % 31 == 0


def candidate_order(payload: bytes) -> List[str]:
    """Decompressor names to try for payload, most likely first."""
    if payload[:2] == GZIP_MAGIC:
        first = 'gzip'
    elif has_zlib_header(payload):
        first = 'zlib'
    else:
        return list(DEFAULT_ORDER)
    return [first] + [name for name in DEFAULT_ORDER if name != first]


class FrameDecoder:

    def __init__(self, logger: Optional[HFTLoggerInterface] = None,
                 max_decompressed_size: int = DEFAULT_MAX_DECOMPRESSED_SIZE):
        self.logger = logger or get_logger('coinex.ws.decoder')
        self.max_decompressed_size = max_decompressed_size
        self._json_decoder = msgspec.json.Decoder()

    def decompress(self, payload: bytes) -> Tuple[str, str]:
        """
        Decompress a binary frame.

        Returns:
            (text, codec) where codec is gzip, zlib, deflate or raw

        Raises:
            FrameDecodeError: nothing produced valid UTF-8, or the output is too large
        """
        for name in candidate_order(payload):
            try:
                return inflate(payload, WBITS[name], self.max_decompressed_size).decode('utf-8'), name
            except (zlib.error, UnicodeDecodeError):
                continue

        try:
            return payload.decode('utf-8'), 'raw'
        except UnicodeDecodeError as e:
            raise FrameDecodeError(f"Binary frame is neither compressed nor UTF-8 ({len(payload)} bytes)") from e

    def decode(self, frame: Union[str, bytes, bytearray, memoryview]) -> Dict[str, Any]:
        """
        Decode a frame into a JSON object.

        Raises:
            FrameDecodeError: decompression failed, invalid or too deeply nested JSON,
                or JSON is not an object
        """
        if isinstance(frame, str):
            text = frame
        elif isinstance(frame, (bytes, bytearray, memoryview)):
            text, codec = self.decompress(bytes(frame))
            self.logger.debug("Binary frame decoded", codec=codec, size=len(frame))
        else:
            raise FrameDecodeError(f"Unsupported frame type: {type(frame).__name__}")

        try:
            message = self._json_decoder.decode(text)
        except (msgspec.DecodeError, RecursionError, ValueError) as e:
            raise FrameDecodeError(f"Invalid JSON frame: {e}") from e

        if not isinstance(message, dict):
            raise FrameDecodeError(f"Frame is not a JSON object: {type(message).__name__}")
        return message
