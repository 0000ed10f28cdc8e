"""
Unit tests for the data-check string and HMAC signature.
"""

import hashlib
import hmac
from urllib.parse import parse_qsl

import pytest

from service_miniapp_auth.app.validation.canonical import build_data_check_string
from service_miniapp_auth.app.validation.result import InitDataRejected, RejectionKind
from service_miniapp_auth.app.validation.signature import (
    build_init_data,
    compute_signature,
    derive_signing_key,
    sign_fields,
    verify_signature,
)

BOT_TOKEN = "123456789:ABCdefGHIjklMNOpqrsTUVwxyz"


class TestDataCheckString:
    """Test cases for build_data_check_string."""

    def test_sorted_newline_joined(self):
        """Test key ordering and join rule."""
        fields = {"query_id": "q", "user": '{"id":1}', "auth_date": "100"}

        assert build_data_check_string(fields) == 'auth_date=100\nquery_id=q\nuser={"id":1}'

    def test_excludes_hash(self):
        """Test that the signature field never enters the string."""
        assert build_data_check_string({"b": "2", "hash": "x", "a": "1"}) == "a=1\nb=2"

    def test_no_trailing_newline(self):
        """Test there is no trailing delimiter."""
        assert not build_data_check_string({"a": "1"}).endswith("\n")
        assert build_data_check_string({}) == ""

    def test_bytewise_not_locale_order(self):
        """Test uppercase sorts before lowercase and ASCII before non-ASCII."""
        fields = {"b": "1", "B": "2", "é": "3", "a": "4"}

        assert build_data_check_string(fields) == "B=2\na=4\nb=1\né=3"

    def test_order_independent(self):
        """Test insertion order does not change the string."""
        first = {"query_id": "q", "auth_date": "1", "user": "u"}
        second = {"user": "u", "query_id": "q", "auth_date": "1"}

        assert build_data_check_string(first) == build_data_check_string(second)


class TestSignature:
    """Test cases for signing and verification."""

    def test_two_stage_hmac(self):
        """Test the signature against a direct HMAC computation."""
        data_check_string = "auth_date=1\nquery_id=q"
        secret_key = hmac.new(b"WebAppData", BOT_TOKEN.encode(), hashlib.sha256).digest()
        expected = hmac.new(secret_key, data_check_string.encode(), hashlib.sha256).hexdigest()

        assert derive_signing_key(BOT_TOKEN) == secret_key
        assert compute_signature(data_check_string, BOT_TOKEN) == expected

    def test_verify_accepts_matching_signature(self):
        """Test verification succeeds for a matching digest."""
        signature = compute_signature("a=1", BOT_TOKEN)

        verify_signature("a=1", signature, BOT_TOKEN)

    @pytest.mark.parametrize("data_check_string, bot_token", [
        ("a=2", BOT_TOKEN),
        ("a=1", "987654321:OtherToken"),
    ])
    def test_verify_rejects_mismatch(self, data_check_string, bot_token):
        """Test tampered content and wrong token give the same rejection."""
        signature = compute_signature("a=1", BOT_TOKEN)

        with pytest.raises(InitDataRejected) as exc_info:
            verify_signature(data_check_string, signature, bot_token)

        assert exc_info.value.kind == RejectionKind.SIGNATURE_INVALID

    def test_verify_rejects_non_hex_signature(self):
        """Test garbage and non-ASCII signatures are rejected, not crashed on."""
        for signature in ("invalid-hash", "ü" * 64, ""):
            with pytest.raises(InitDataRejected):
                verify_signature("a=1", signature, BOT_TOKEN)

    def test_build_init_data_appends_hash(self):
        """Test build_init_data signs the fields and appends hash last."""
        fields = {"query_id": "q", "auth_date": "1700000000"}

        raw = build_init_data(fields, BOT_TOKEN)
        pairs = parse_qsl(raw)

        assert pairs[-1] == ("hash", sign_fields(fields, BOT_TOKEN))
        assert dict(pairs[:-1]) == fields

    def test_build_init_data_ignores_existing_hash(self):
        """Test a stale hash in the input is replaced."""
        raw = build_init_data({"a": "1", "hash": "stale"}, BOT_TOKEN)

        assert parse_qsl(raw) == [("a", "1"), ("hash", sign_fields({"a": "1"}, BOT_TOKEN))]
