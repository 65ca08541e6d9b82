# qjob_tracker/users/models.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone


class SignupRequest(BaseModel):
    """Signup body. Field names follow the dashboard client: crn and api."""
    username: str = Field(min_length=1)
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)
    crn: str = Field(min_length=1, description="Service CRN scoping the provider credential.")
    api: str = Field(min_length=1, description="Provider API key.")


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignupResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "User created successfully"
    user_id: str = Field(serialization_alias="userId")


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(serialization_alias="userId")
    username: str
    email: str


class UserIdentity(BaseModel):
    """The public part of a user, returned by signup and login."""
    id: str
    username: str
    email: str


class UserCreate(BaseModel):
    """Everything needed to insert a user row. The password is already hashed."""
    username: str
    email: str
    password_hash: str
    service_crn: str
    api_key: str


class UserInDB(UserCreate):
    """A user row as stored. api_key and service_crn are kept verbatim."""
    id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(from_attributes=True)

    def to_identity(self) -> UserIdentity:
        return UserIdentity(id=self.id, username=self.username, email=self.email)
