from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field


class AuthUser(BaseModel):
    """
    Represents an authenticated user from a Supabase access token.

    ``role`` is the Supabase claim (usually "authenticated"); the application
    role lives on the ``users`` row and is resolved per request.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: str = "authenticated"
    app_metadata: dict[str, Any] = Field(default_factory=dict)
