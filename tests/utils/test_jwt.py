# -*- coding: utf-8 -*-
import pytest

from extensions.jwt import TokenError, create_token, decode_token, revoke_token


def test_round_trip_and_revocation(app, fake_redis):
    with app.app_context():
        token = create_token(7, "a@example.com", "USER")
        payload = decode_token(token)
        assert payload["sub"] == 7
        assert payload["role"] == "USER"

        revoke_token(token)
        assert any(k.startswith("jwt:blk:") for k in fake_redis._data)
        with pytest.raises(TokenError):
            decode_token(token)
        assert decode_token(token, check_revoked=False)["sub"] == 7


def test_tampered_and_expired_tokens(app):
    with app.app_context():
        token = create_token(1, "a@example.com", "USER")
        head, body, sig = token.split(".")
        with pytest.raises(TokenError):
            decode_token(f"{head}.{body}.{sig[:-2]}xx")

        expired = create_token(1, "a@example.com", "USER", expires_seconds=-10)
        with pytest.raises(TokenError):
            decode_token(expired)
        with pytest.raises(TokenError):
            decode_token("not-a-token")
