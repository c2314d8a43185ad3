"""
Tests for bjcloudvod URL decoding.

Test coverage:
- Known vectors, including byte wraparound and non-ASCII results
- Prefix rejection and empty payloads
- Strict base64: alphabet, padding, length, trailing bits
"""

import base64

import pytest

from bjcloudvod_dl import URL_PREFIX, decode_bjc_url
from bjcloudvod_dl.errors import Base64DecodeError, BjcUrlDecodeError, InvalidUrl
from conftest import encode_bjc_url


class TestDecodeSuccess:
    def test_hello_vector(self):
        assert decode_bjc_url("bjcloudvod://AUlocXBx") == "Hello"

    def test_is_deterministic(self):
        url = "bjcloudvod://AUlocXBx"
        assert decode_bjc_url(url) == decode_bjc_url(url)

    def test_realistic_link(self):
        video_url = b"https://dal-video.baijiayun.com/path/to/0a1b2c3d.ev1?sign=abc&t=1700000000"
        url = encode_bjc_url(video_url, key=0xB5)

        result = decode_bjc_url(url)

        assert result == video_url.decode("ascii")

    def test_subtraction_wraps_around(self):
        # payload [0, 0]: key 0, step 1, 0 - 1 wraps to 255
        assert decode_bjc_url("bjcloudvod://AAA") == "\xff"

    def test_high_bytes_map_to_same_code_points(self):
        plain = bytes([0x80, 0xE4, 0xFF, 0x41])
        result = decode_bjc_url(encode_bjc_url(plain, key=7))

        assert [ord(ch) for ch in result] == list(plain)

    def test_single_byte_payload_gives_empty_string(self):
        assert decode_bjc_url("bjcloudvod://AA") == ""

    def test_length_is_payload_minus_key(self):
        body = "AUlocXBxc3R1dnd4"
        payload = base64.urlsafe_b64decode(body + "=" * (-len(body) % 4))
        assert len(decode_bjc_url(URL_PREFIX + body)) == len(payload) - 1


class TestInvalidUrl:
    @pytest.mark.parametrize(
        "url",
        ["http://example.com", "", "bjcloudvod:/AUlocXBx", "BJCLOUDVOD://AUlocXBx", " bjcloudvod://AUlocXBx"],
    )
    def test_missing_prefix(self, url):
        with pytest.raises(InvalidUrl) as excinfo:
            decode_bjc_url(url)
        assert excinfo.value.url == url

    def test_empty_payload(self):
        with pytest.raises(InvalidUrl, match="empty payload"):
            decode_bjc_url("bjcloudvod://")

    def test_errors_share_base_class(self):
        with pytest.raises(BjcUrlDecodeError):
            decode_bjc_url("http://example.com")


class TestBase64Errors:
    def test_symbols_outside_alphabet(self):
        with pytest.raises(Base64DecodeError) as excinfo:
            decode_bjc_url("bjcloudvod://!!!")
        assert "offset 0" in excinfo.value.detail

    @pytest.mark.parametrize("body", ["AUlo+XBx", "AUlo/XBx", "AUlo XBx"])
    def test_standard_alphabet_and_whitespace_rejected(self, body):
        with pytest.raises(Base64DecodeError):
            decode_bjc_url(URL_PREFIX + body)

    def test_padding_rejected(self):
        with pytest.raises(Base64DecodeError, match="padding"):
            decode_bjc_url("bjcloudvod://AAA=")

    def test_impossible_length(self):
        with pytest.raises(Base64DecodeError, match="length"):
            decode_bjc_url("bjcloudvod://AUloc")

    def test_non_canonical_trailing_bits(self):
        with pytest.raises(Base64DecodeError, match="last symbol"):
            decode_bjc_url("bjcloudvod://AAB")
