"""Pydantic schemas for the signed-in identity"""

from typing import Optional, Union
from pydantic import BaseModel, ConfigDict

from portal.app.models.candidate import UserRole


class Identity(BaseModel):
    """Authenticated user as returned by the sign-in endpoint"""
    id: Optional[Union[int, str]] = None
    name: str = ""
    email: str = ""
    role: UserRole = UserRole.USER

    model_config = ConfigDict(frozen=True)
