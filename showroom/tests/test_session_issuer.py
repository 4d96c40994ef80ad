from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from conftest import DeterministicHasher, InMemoryCredentialRepository
from showroom.application.services.credential_store import CredentialStore
from showroom.application.services.session_issuer import SessionIssuer
from showroom.domain.admin.exceptions import (
    AuthError,
    InvalidCredentialsError,
    InvalidTokenError,
    LoginLockedError,
)
from showroom.infrastructure.auth import InMemoryTokenDenylist, LoginAttemptsTracker


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def credentials() -> CredentialStore:
    store = CredentialStore(
        credentials=InMemoryCredentialRepository(), password_hasher=DeterministicHasher()
    )
    store.bootstrap("a", "pw1")
    return store


def make_issuer(credentials: CredentialStore, clock: FakeClock, **kwargs) -> SessionIssuer:
    return SessionIssuer(credentials=credentials, secret_key="test-secret", clock=clock, **kwargs)


def test_login_issues_one_hour_token(credentials: CredentialStore, clock: FakeClock) -> None:
    issuer = make_issuer(credentials, clock)

    issued = issuer.login("a", "pw1")

    assert issued.max_age == 3600
    assert issued.principal.expires_at == clock.now + timedelta(hours=1)
    assert issuer.verify(issued.token).username == "a"


def test_login_failures_are_indistinguishable(credentials: CredentialStore, clock: FakeClock) -> None:
    issuer = make_issuer(credentials, clock)

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        issuer.login("a", "wrong")
    with pytest.raises(InvalidCredentialsError) as unknown_user:
        issuer.login("nosuchuser", "whatever")

    assert wrong_password.value.to_dict() == unknown_user.value.to_dict()
    assert wrong_password.value.status == unknown_user.value.status == 401


def test_verify_rejects_expired_token(credentials: CredentialStore, clock: FakeClock) -> None:
    issuer = make_issuer(credentials, clock)
    token = issuer.login("a", "pw1").token

    clock.advance(minutes=59)
    assert issuer.verify(token).username == "a"

    clock.advance(minutes=1)
    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_verify_rejects_altered_signature(credentials: CredentialStore, clock: FakeClock) -> None:
    issuer = make_issuer(credentials, clock)
    token = issuer.login("a", "pw1").token
    payload, signature = token.rsplit(".", 1)
    tampered = f"{payload}.{'A' if signature[0] != 'A' else 'B'}{signature[1:]}"

    with pytest.raises(InvalidTokenError):
        issuer.verify(tampered)


def test_verify_rejects_token_signed_with_another_key(
    credentials: CredentialStore, clock: FakeClock
) -> None:
    foreign = SessionIssuer(credentials=credentials, secret_key="other-secret", clock=clock)
    issuer = make_issuer(credentials, clock)

    with pytest.raises(InvalidTokenError):
        issuer.verify(foreign.issue("a").token)


def test_verify_missing_token_is_unauthorized(credentials: CredentialStore, clock: FakeClock) -> None:
    issuer = make_issuer(credentials, clock)

    with pytest.raises(AuthError) as exc_info:
        issuer.verify(None)

    assert type(exc_info.value) is AuthError
    assert exc_info.value.status == 401


def test_logout_without_denylist_keeps_token_valid(
    credentials: CredentialStore, clock: FakeClock
) -> None:
    issuer = make_issuer(credentials, clock)
    token = issuer.login("a", "pw1").token

    issuer.logout(token)

    assert issuer.verify(token).username == "a"


def test_logout_with_denylist_revokes_token(credentials: CredentialStore, clock: FakeClock) -> None:
    denylist = InMemoryTokenDenylist(clock=clock)
    issuer = make_issuer(credentials, clock, denylist=denylist)
    token = issuer.login("a", "pw1").token
    other = issuer.login("a", "pw1").token

    issuer.logout(token)

    with pytest.raises(InvalidTokenError):
        issuer.verify(token)
    assert issuer.verify(other).username == "a"

    clock.advance(hours=2)
    assert len(denylist) == 0


def test_rotation_does_not_revoke_issued_tokens(
    credentials: CredentialStore, clock: FakeClock
) -> None:
    issuer = make_issuer(credentials, clock)
    token = issuer.login("a", "pw1").token

    credentials.rotate("pw1", "b", "pw2")

    assert issuer.verify(token).username == "a"
    with pytest.raises(InvalidCredentialsError):
        issuer.login("a", "pw1")
    assert issuer.login("b", "pw2").principal.username == "b"


def test_repeated_failures_lock_the_username(credentials: CredentialStore, clock: FakeClock) -> None:
    attempts = LoginAttemptsTracker(max_attempts=3, lockout_duration=60, clock=lambda: 1000.0)
    issuer = make_issuer(credentials, clock, attempts=attempts)

    for _ in range(3):
        with pytest.raises(InvalidCredentialsError):
            issuer.login("a", "wrong")

    with pytest.raises(LoginLockedError) as exc_info:
        issuer.login("a", "pw1")
    assert exc_info.value.status == 429
