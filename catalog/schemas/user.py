"""
User Pydantic Schemas

Schemas:
- LoginRequest: credentials for POST /auth/login
- PasswordUpdateRequest: body of POST /auth/update-password
- UserResponse: public projection {id, email} (never the password hash)
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class Credentials(BaseModel):
    """
    Email and password pair.

    The email is normalized to lower case so lookups match however the
    address was typed.
    """

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["william@example.com"],
    )

    password: str = Field(
        ...,
        min_length=1,
        description="Password (cannot be empty)",
        examples=["Password123"],
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(Credentials):
    """Schema for the login request."""


class PasswordUpdateRequest(Credentials):
    """
    Schema for a password change.

    `password` is the NEW password for the account identified by `email`.
    """


class UserResponse(BaseModel):
    """
    Schema for user responses.

    SECURITY: Never includes the password hash.
    """

    id: int = Field(..., description="Unique user identifier", examples=[1])
    email: str = Field(..., description="User's email address")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {"id": 1, "email": "william@example.com"}
        },
    )
