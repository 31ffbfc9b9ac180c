from typing import Annotated

from fastapi import Depends, Request
from stockroom.core.config import settings


async def get_actor_id(request: Request) -> str | None:
    """
    Read the acting user from the actor header.

    Identifiers are opaque strings supplied by the calling client, a blank header counts as absent.
    """
    actor_id = request.headers.get(settings.ACTOR_HEADER)
    if actor_id is None or not actor_id.strip():
        return None

    return actor_id.strip()


CurrentActor = Annotated[str | None, Depends(get_actor_id)]
