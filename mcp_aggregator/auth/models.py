"""Pydantic models for caller identity."""

from pydantic import BaseModel, Field, ConfigDict


class UserClaims(BaseModel):
    """Identity of the caller, extracted from the bearer token.
    
    Attributes:
        user_id: Unique identifier for the user.
        email: User's email address (optional).
        organization_id: Organization the user is acting for (optional).
    """
    
    user_id: str = Field(..., description="Unique user identifier")
    email: str | None = Field(None, description="User email address")
    organization_id: str | None = Field(None, description="Organization identifier")
    
    # Allow extra fields from JWT without raising validation errors
    model_config = ConfigDict(extra="allow")
