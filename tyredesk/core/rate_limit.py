# tyredesk/core/rate_limit.py
from slowapi import Limiter
from slowapi.util import get_remote_address


def _rate_limit_key(request) -> str:
    # user id is set on request.state by the auth dependency
    user_id = getattr(request.state, "user_id", None) or "anon"
    return f"{get_remote_address(request)}:{user_id}"


# One shared Limiter for the whole app
limiter = Limiter(key_func=_rate_limit_key)
