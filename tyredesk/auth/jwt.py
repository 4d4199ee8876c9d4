import jwt

from tyredesk.core.settings import settings


def decode_token(token: str) -> dict:
    """
    Verify a token issued by the hosted auth provider.
    Tokens are only verified here, never issued.
    """
    options = {"require": ["sub", "exp"]}
    if settings.JWT_AUDIENCE:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=["HS256"],
        options={**options, "verify_aud": False},
    )
