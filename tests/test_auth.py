"""Unit tests for auth/tokens.py, auth/store.py and auth/dependencies.resolve_principal.

Covers:
- bcrypt hash/verify round trip and malformed hash handling
- JWT claims, expiry, and rejection of tokens signed with another key
- authenticate_user() success, wrong password, unknown email, inactive user
- UserStore email normalisation and duplicate rejection
- resolve_principal() failure reasons all surface as Unauthenticated
"""

import pytest
from jose import jwt
from sqlalchemy.exc import IntegrityError

from auth.dependencies import resolve_principal
from auth.models import Principal, Role, User
from auth.store import UserStore
from auth.tokens import (
    authenticate_user,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from core.errors import Unauthenticated


def _add_user(store: UserStore, email: str = "ada@dealer.test", role: Role = Role.manager, **kwargs) -> int:
    return store.create_user(
        User(
            email=email,
            first_name="Ada",
            last_name="Lovelace",
            role=role,
            hashed_password=hash_password("correct-horse"),
            **kwargs,
        )
    )


class TestPasswords:
    def test_round_trip(self) -> None:
        hashed = hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_malformed_hash_is_false(self) -> None:
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_claims(self) -> None:
        token = create_access_token(user_id=7, email="a@b.io", role=Role.sales, expire_seconds=60)
        payload = decode_access_token(token)
        assert payload is not None
        assert payload["sub"] == "a@b.io"
        assert payload["user_id"] == 7
        assert payload["role"] == "sales"
        assert "exp" in payload

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(user_id=7, email="a@b.io", role=Role.sales, expire_seconds=-10)
        assert decode_access_token(token) is None

    def test_foreign_key_rejected(self) -> None:
        forged = jwt.encode({"sub": "a@b.io", "user_id": 1, "role": "admin"}, "x" * 40, algorithm="HS256")
        assert decode_access_token(forged) is None

    def test_garbage_rejected(self) -> None:
        assert decode_access_token("not.a.jwt") is None


class TestUserStore:
    def test_create_and_lookup(self, user_store: UserStore) -> None:
        uid = _add_user(user_store, email="  Ada@Dealer.TEST ")
        user = user_store.get_by_email("ada@dealer.test")
        assert user is not None
        assert user.id == uid
        assert user.email == "ada@dealer.test"
        assert user.role is Role.manager
        assert user.is_active is True
        assert user.created_at
        assert user_store.get_by_id(uid) == user

    def test_duplicate_email_rejected(self, user_store: UserStore) -> None:
        _add_user(user_store)
        with pytest.raises(IntegrityError):
            _add_user(user_store, email="ADA@dealer.test")

    def test_count_and_last_login(self, user_store: UserStore) -> None:
        assert user_store.count_users() == 0
        uid = _add_user(user_store)
        assert user_store.count_users() == 1
        assert user_store.get_by_id(uid).last_login is None
        user_store.update_last_login(uid)
        assert user_store.get_by_id(uid).last_login is not None

    def test_missing_user(self, user_store: UserStore) -> None:
        assert user_store.get_by_id(12345) is None
        assert user_store.get_by_email("ghost@dealer.test") is None


class TestAuthenticateUser:
    def test_success(self, user_store: UserStore) -> None:
        _add_user(user_store)
        user = authenticate_user(user_store, "ada@dealer.test", "correct-horse")
        assert user is not None
        assert user.email == "ada@dealer.test"

    def test_wrong_password(self, user_store: UserStore) -> None:
        _add_user(user_store)
        assert authenticate_user(user_store, "ada@dealer.test", "wrong") is None

    def test_unknown_email(self, user_store: UserStore) -> None:
        assert authenticate_user(user_store, "ghost@dealer.test", "correct-horse") is None

    def test_inactive_user(self, user_store: UserStore) -> None:
        _add_user(user_store, is_active=False)
        assert authenticate_user(user_store, "ada@dealer.test", "correct-horse") is None


class TestResolvePrincipal:
    def test_valid_token(self, user_store: UserStore) -> None:
        uid = _add_user(user_store)
        token = create_access_token(uid, "ada@dealer.test", Role.manager, expire_seconds=60)
        assert resolve_principal(user_store, token) == Principal(id=uid, role=Role.manager)

    def test_stored_role_wins_over_token_claim(self, user_store: UserStore) -> None:
        """A token minted with role=admin for a sales user resolves as sales."""
        uid = _add_user(user_store, role=Role.sales)
        token = create_access_token(uid, "ada@dealer.test", Role.admin, expire_seconds=60)
        assert resolve_principal(user_store, token).role is Role.sales

    @pytest.mark.parametrize("token", [None, "", "garbage"])
    def test_missing_or_malformed(self, user_store: UserStore, token) -> None:
        with pytest.raises(Unauthenticated) as exc_info:
            resolve_principal(user_store, token)
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Authentication required"

    def test_expired(self, user_store: UserStore) -> None:
        uid = _add_user(user_store)
        token = create_access_token(uid, "ada@dealer.test", Role.manager, expire_seconds=-1)
        with pytest.raises(Unauthenticated):
            resolve_principal(user_store, token)

    def test_unknown_user(self, user_store: UserStore) -> None:
        token = create_access_token(999, "ghost@dealer.test", Role.admin, expire_seconds=60)
        with pytest.raises(Unauthenticated):
            resolve_principal(user_store, token)

    def test_inactive_user(self, user_store: UserStore) -> None:
        uid = _add_user(user_store, is_active=False)
        token = create_access_token(uid, "ada@dealer.test", Role.manager, expire_seconds=60)
        with pytest.raises(Unauthenticated):
            resolve_principal(user_store, token)
