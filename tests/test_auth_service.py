from datetime import timedelta

from siamleave.services import auth as auth_service

def test_password_hashing():
    """Test that password hashing and verification works correctly."""
    password = "MySecurePassword123!"
    hashed = auth_service.get_password_hash(password)
    assert hashed != password
    assert auth_service.verify_password(password, hashed)
    assert not auth_service.verify_password("WrongPassword", hashed)

def test_access_token_round_trip():
    token = auth_service.create_access_token({"sub": "user-1", "role": "admin"})
    payload = auth_service.decode_access_token(token)
    assert payload["sub"] == "user-1"
    assert payload["role"] == "admin"
    assert payload["type"] == "access"

def test_expired_and_tampered_tokens():
    expired = auth_service.create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-5))
    assert auth_service.decode_access_token(expired) == {"error": "TOKEN_EXPIRED"}
    tampered = expired.rsplit(".", 1)[0] + ".bm90LWEtc2lnbmF0dXJl"
    assert auth_service.decode_access_token(tampered) is None
