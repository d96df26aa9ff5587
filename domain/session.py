# domain/session.py

import hmac
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Session:
    authenticated: bool = False
    username: Optional[str] = None


ANONYMOUS = Session()


def login(
        username: str,
        password: str,
        *,
        expected_username: Optional[str],
        expected_password: Optional[str],
) -> Session:
    """
    Return an authenticated session when the credentials match, else ANONYMOUS.
    No credentials configured means nobody can log in.
    """
    if not expected_username or not expected_password:
        return ANONYMOUS

    user_ok = hmac.compare_digest((username or "").encode(), expected_username.encode())
    pass_ok = hmac.compare_digest((password or "").encode(), expected_password.encode())

    if user_ok and pass_ok:
        return Session(authenticated=True, username=username)
    return ANONYMOUS


def logout() -> Session:
    return ANONYMOUS


def is_allowed(session: Optional[Session]) -> bool:
    # the one gate every protected screen goes through
    return session is not None and session.authenticated
