"""Connection aggregate root and the actor recorded on revisions."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Connection(BaseModel):
    """A federated service entry whose configuration evolves over revisions.

    Revisions reference a connection but never modify it. The id is
    assigned by the store on first save.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: int | None = Field(default=None, description="Store-assigned identifier")
    name: str = Field(..., min_length=1, description="Entity id of the connection")
    type: str = Field(..., min_length=1, description="Connection type, e.g. saml20-idp")
    created_at_date: datetime | None = Field(default=None, description="First save time")

    def to_reference(self) -> dict[str, int | str | None]:
        """Return the {id, name} pair used in relation lists."""
        return {"id": self.id, "name": self.name}


class User(BaseModel):
    """Administrator recorded as the author of a revision."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="User identifier")
    username: str = Field(..., min_length=1, description="Login name")
