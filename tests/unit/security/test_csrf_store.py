"""CSRF 令牌存储的单元测试."""

import pytest

from adminkit.security.csrf import CsrfTokenStore, FlaskWtfCsrfTokenStore


@pytest.mark.unit
def test_flask_wtf_store_round_trips_session_token(app) -> None:
    store = FlaskWtfCsrfTokenStore()

    with app.test_request_context("/"):
        token = store.generate_token()

        assert store.validate_token(token) is True
        assert store.validate_token("forged") is False
        assert store.validate_token(None) is False
        assert store.validate_token("") is False


@pytest.mark.unit
def test_stores_satisfy_protocol(csrf_store) -> None:
    assert isinstance(FlaskWtfCsrfTokenStore(), CsrfTokenStore)
    assert isinstance(csrf_store, CsrfTokenStore)
