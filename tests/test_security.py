import hashlib
from datetime import timedelta

import pytest
from jose import JWTError

from marketplace.api.forms import decode_form_fields
from marketplace.core.exceptions import BadRequestError, CastError
from marketplace.core.rate_limit import RateLimiter
from marketplace.core.security import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    rotate_refresh_tokens,
    verify_password,
)
from marketplace.services.upload_service import sign_params
from marketplace.utils.serialization import to_object_id
from marketplace.utils.validation_utils import slugify, validate_coordinates


def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret123", None)


def test_access_and_refresh_tokens_use_separate_secrets():
    access = create_access_token("abc", "vendor")
    refresh = create_refresh_token("abc")

    claims = decode_access_token(access)
    assert claims["id"] == "abc"
    assert claims["role"] == "vendor"
    assert decode_refresh_token(refresh)["type"] == "refresh"

    with pytest.raises(JWTError):
        decode_access_token(refresh)
    with pytest.raises(JWTError):
        decode_refresh_token(access)


def test_tokens_minted_together_differ():
    assert create_refresh_token("abc") != create_refresh_token("abc")


def test_expired_token_rejected():
    token = create_access_token("abc", "customer", expires_delta=timedelta(seconds=-1))
    with pytest.raises(JWTError):
        decode_access_token(token)


class TestRefreshRotation:
    def test_rotation_replaces_old_token(self):
        assert rotate_refresh_tokens(["a", "b"], "c", old_token="a") == ["b", "c"]

    def test_list_is_capped_keeping_newest(self):
        tokens = ["t1", "t2", "t3", "t4", "t5"]
        assert rotate_refresh_tokens(tokens, "t6", limit=5) == ["t2", "t3", "t4", "t5", "t6"]

    def test_empty(self):
        assert rotate_refresh_tokens(None, "a") == ["a"]


def test_reset_token_is_stored_hashed():
    raw, hashed, expires_at = generate_reset_token()
    assert hashed == hashlib.sha256(raw.encode()).hexdigest()
    assert hash_reset_token(raw) == hashed
    assert expires_at is not None


class TestRateLimiter:
    def test_blocks_after_max_attempts(self):
        limiter = RateLimiter(max_attempts=2, window_seconds=60)
        assert limiter.hit("ip", now=0)
        assert limiter.hit("ip", now=1)
        assert not limiter.hit("ip", now=2)
        assert limiter.hit("other", now=2)
        assert limiter.remaining("ip", now=2) == 0

    def test_window_slides(self):
        limiter = RateLimiter(max_attempts=1, window_seconds=10)
        assert limiter.hit("ip", now=0)
        assert not limiter.hit("ip", now=5)
        assert limiter.hit("ip", now=10)

    def test_expired_keys_are_dropped(self):
        limiter = RateLimiter(max_attempts=3, window_seconds=10)
        for n in range(50):
            limiter.hit(f"10.0.0.{n}", now=0)
        assert len(limiter) == 50
        assert limiter.remaining("10.0.0.1", now=10) == 3
        limiter.hit("10.0.0.99", now=20)
        for n in range(50):
            limiter.remaining(f"10.0.0.{n}", now=20)
        assert len(limiter) == 1

    def test_reset_and_disabled(self):
        limiter = RateLimiter(max_attempts=1, window_seconds=60)
        limiter.hit("ip", now=0)
        limiter.reset("ip")
        assert limiter.hit("ip", now=1)
        disabled = RateLimiter(max_attempts=0, window_seconds=60, enabled=False)
        assert disabled.hit("ip")


def test_cloudinary_signature():
    params = {"timestamp": 1315060510, "public_id": "sample_image", "folder": None}
    expected = hashlib.sha1(b"public_id=sample_image&timestamp=1315060510abcd").hexdigest()
    assert sign_params(params, "abcd") == expected


@pytest.mark.parametrize("text, slug", [
    ("Fresh Mangoes!! (1 kg)", "fresh-mangoes-1-kg"),
    ("  Desk   Lamp ", "desk-lamp"),
    ("a -- b", "a-b"),
])
def test_slugify(text, slug):
    assert slugify(text) == slug


def test_coordinates():
    assert validate_coordinates([73.85, 18.52])
    assert not validate_coordinates([200, 18.52])
    assert not validate_coordinates(["x", "y"])


def test_to_object_id_raises_cast_error():
    with pytest.raises(CastError):
        to_object_id("not-an-id")


def test_decode_form_fields():
    decoded = decode_form_fields({
        "name": "Lamp",
        "tags": '["a", "b"]',
        "deliveryOptions": '{"instant": true}',
        "imagesMeta": "[]",
        "brand": "",
    })
    assert decoded == {"name": "Lamp", "tags": ["a", "b"], "deliveryOptions": {"instant": True}}

    with pytest.raises(BadRequestError, match="Invalid inventory format"):
        decode_form_fields({"inventory": "{broken"})
