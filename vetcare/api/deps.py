from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from vetcare.database import get_db

DBSession = Annotated[AsyncSession, Depends(get_db)]

# Identity of the caller; authentication happens in front of this service
RequesterId = Annotated[int, Header(alias="X-User-Id")]
