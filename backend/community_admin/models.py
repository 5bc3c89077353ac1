from typing import Optional, List
from pydantic import BaseModel, ConfigDict, EmailStr, Field, computed_field


class CommunityAuthRequest(BaseModel):
    communityName: Optional[str] = None
    password: Optional[str] = None
    action: Optional[str] = "login"


class UserCreate(BaseModel):
    """Users are free-form; only the fields below are checked."""
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    community: Optional[str] = None
    favoriteCommunities: Optional[List[str]] = None


class CommunityIdentity(BaseModel):
    document_id: str
    name: str
    formatted_id: Optional[str] = None
    all_possible_ids: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def canonical_id(self) -> str:
        return self.formatted_id or self.document_id


class AssociationResult(BaseModel):
    """Records written per collection by one association sweep."""
    users: int = 0
    posts: int = 0
    news: int = 0
    businesses: int = 0
    resources: int = 0
    resourceContent: int = 0
    documents: int = 0

    @computed_field
    @property
    def total(self) -> int:
        return (
            self.users + self.posts + self.news + self.businesses
            + self.resources + self.resourceContent + self.documents
        )
