"""Request-scoped caller identity passed into every service operation."""

import uuid
from dataclasses import dataclass

DEFAULT_ROLE = "authenticated"


@dataclass(frozen=True)
class RequestContext:
    """Who is calling, as established from the bearer token.

    Services take this explicitly instead of reading shared session state.
    ``role`` is the token's ``role`` claim; end users carry the default.
    """

    user_id: uuid.UUID
    access_token: str | None = None
    role: str = DEFAULT_ROLE
