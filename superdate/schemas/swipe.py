from pydantic import BaseModel

from superdate.models.match import MatchOut
from superdate.models.swipe import SwipeOut


class SwipeRequest(BaseModel):
    # Missing or unknown values are rejected by record_swipe
    target_user_id: str | None = None
    action: str | None = None


class SwipeResultOut(BaseModel):
    swipe: SwipeOut
    is_mutual: bool
    match: MatchOut | None = None
    match_created: bool = False
