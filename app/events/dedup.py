import logging
from enum import Enum
from typing import Any, Type
from tortoise.exceptions import IntegrityError
from tortoise.models import Model

log = logging.getLogger(__name__)


class ClaimResult(str, Enum):
    CLAIMED = "CLAIMED"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"


async def try_claim(model: Type[Model], using_db: Any = None, **key) -> ClaimResult:
    """
    Claims ``key`` by inserting a row into a table whose key columns are unique.

    The insert is the whole decision: whoever inserts first wins, and a
    uniqueness violation means another delivery already claimed it. Call this
    inside the transaction of the effect being protected so the claim and the
    effect commit or roll back together.
    """
    try:
        await model.create(using_db=using_db, **key)
    except IntegrityError:
        log.debug(f"Dedup key {key} already present in {model._meta.db_table}")
        return ClaimResult.ALREADY_CLAIMED
    return ClaimResult.CLAIMED
