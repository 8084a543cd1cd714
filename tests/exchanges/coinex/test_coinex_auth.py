import pytest

from exchanges.integrations.coinex.ws.auth import AUTH_METHOD, AUTH_REQUEST_ID, build_auth_message, generate_signature


class TestSignature:

    def test_reference_vector(self):
        assert generate_signature("s", "1700000000000") == \
            "d2f061a924242a54e74ab899a90aed2286c20c0f5021987e051a91ccf0c7d67d"

    def test_deterministic(self):
        assert generate_signature("test-secret", "1700000000000") == generate_signature("test-secret", "1700000000000")
        assert generate_signature("test-secret", "1700000000000") == \
            "85b5366c365c4f9329d1e9d48dc1040220fa942d630b0b5521cb8b5d94d2a042"

    def test_lowercase_hex(self):
        signature = generate_signature("key", "")
        assert signature == "5d5d139563c95b5967b9bd9a8c9b233a9dedb45072794cd232dc1b74832607d0"
        assert signature == signature.lower()
        assert len(signature) == 64


class TestAuthMessage:

    def test_message_shape(self):
        message = build_auth_message("k", "s", timestamp_ms=1700000000000)
        assert message == {
            "method": AUTH_METHOD,
            "params": {
                "access_id": "k",
                "signed_str": "d2f061a924242a54e74ab899a90aed2286c20c0f5021987e051a91ccf0c7d67d",
                "timestamp": 1700000000000,
            },
            "id": AUTH_REQUEST_ID,
        }

    def test_current_timestamp_used_by_default(self):
        message = build_auth_message("k", "s")
        timestamp = message["params"]["timestamp"]
        assert isinstance(timestamp, int)
        assert message["params"]["signed_str"] == generate_signature("s", str(timestamp))
