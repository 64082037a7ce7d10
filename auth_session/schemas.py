"""
Pydantic schemas for the auth backend's request and response bodies.
"""
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class GoogleLoginRequest(BaseModel):
    """Body of POST /api/auth/google."""
    token: str = Field(description="Google credential issued to the browser/client")


class GithubLoginRequest(BaseModel):
    """Body of POST /api/auth/github."""
    code: str = Field(description="OAuth authorization code from GitHub")


class EmailLoginRequest(BaseModel):
    """Body of POST /api/auth/login."""
    email: str = Field(description="Account email address")
    password: str = Field(description="Account password")


class RegisterRequest(EmailLoginRequest):
    """Body of POST /api/auth/register."""
    name: str = Field(description="Display name")


class HandleUpdateRequest(BaseModel):
    """Body of POST /api/auth/update-handles."""
    platform: str = Field(description="Platform identifier, e.g. github")
    handle: str = Field(description="User's handle on that platform")


class UserResponse(BaseModel):
    """Success body carrying the (opaque) user record."""
    model_config = ConfigDict(extra="allow")
    
    user: Optional[Dict[str, Any]] = Field(None, description="User record as defined by the backend")


class ErrorResponse(BaseModel):
    """Error body sent with non-2xx responses."""
    model_config = ConfigDict(extra="allow")
    
    message: Optional[str] = Field(None, description="Human-readable error message")
