import gzip
import zlib

import pytest

from infrastructure.exceptions.exchange import FrameDecodeError
from infrastructure.networking.websocket import FrameDecoder, candidate_order, has_zlib_header

BODY = b'{"method":"state.update","data":{"state_list":[]},"id":null}'


def raw_deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
    return compressor.compress(data) + compressor.flush()


class TestFrameDecoder:

    @pytest.fixture
    def decoder(self):
        return FrameDecoder()

    def test_text_frame(self, decoder):
        assert decoder.decode(BODY.decode())["method"] == "state.update"

    @pytest.mark.parametrize("compress, codec", [
        (gzip.compress, 'gzip'),
        (zlib.compress, 'zlib'),
        (raw_deflate, 'deflate'),
    ])
    def test_compressed_frames(self, decoder, compress, codec):
        text, used = decoder.decompress(compress(BODY))
        assert used == codec
        assert decoder.decode(compress(BODY))["data"] == {"state_list": []}

    def test_uncompressed_binary_falls_back_to_utf8(self, decoder):
        text, codec = decoder.decompress(BODY)
        assert codec == 'raw'
        assert decoder.decode(bytearray(BODY))["id"] is None

    def test_garbage_binary_raises(self, decoder):
        with pytest.raises(FrameDecodeError):
            decoder.decode(b"\x00\x01garbage\xff\xfe")

    def test_invalid_json_raises(self, decoder):
        with pytest.raises(FrameDecodeError):
            decoder.decode("{broken")

    def test_non_object_json_raises(self, decoder):
        with pytest.raises(FrameDecodeError):
            decoder.decode("[1, 2]")

    def test_unsupported_frame_type(self, decoder):
        with pytest.raises(FrameDecodeError):
            decoder.decode(12345)

    def test_deeply_nested_json_raises(self, decoder):
        with pytest.raises(FrameDecodeError):
            decoder.decode("[" * 100000)
        with pytest.raises(FrameDecodeError):
            decoder.decode(gzip.compress(b"[" * 100000))

    def test_oversized_decompressed_frame_raises(self):
        decoder = FrameDecoder(max_decompressed_size=1024)
        payload = gzip.compress(b"{\"pad\":\"" + b"a" * 10000 + b"\"}")
        assert len(payload) < 1024
        with pytest.raises(FrameDecodeError, match="exceeds 1024 bytes"):
            decoder.decode(payload)

    def test_frame_at_size_limit_decodes(self):
        decoder = FrameDecoder(max_decompressed_size=len(BODY))
        assert decoder.decode(zlib.compress(BODY))["method"] == "state.update"

    def test_truncated_gzip_is_not_inflated(self, decoder):
        with pytest.raises(FrameDecodeError):
            decoder.decode(gzip.compress(BODY)[:-12])


class TestCompressionSniffing:

    def test_gzip_magic_first(self):
        assert candidate_order(gzip.compress(BODY))[0] == 'gzip'

    def test_zlib_header_first(self):
        payload = zlib.compress(BODY)
        assert has_zlib_header(payload)
        assert candidate_order(payload) == ['zlib', 'gzip', 'deflate']

    def test_default_order_without_header(self):
        assert candidate_order(b'{"a":1}') == ['gzip', 'deflate', 'zlib']

    def test_zlib_header_checks(self):
        assert has_zlib_header(b'\x78\x9c')
        assert has_zlib_header(b'\x78\xda')
        assert not has_zlib_header(b'\x78\x00')
        assert not has_zlib_header(b'\x78')
