from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import AliasChoices, BaseModel, Field


class CreatePollRequestSchema(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class PollSchema(BaseModel):
    id: UUID
    creator_id: UUID
    title: str
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CreatePollResponseSchema(BaseModel):
    message: str
    poll: PollSchema


class ProfileSchema(BaseModel):
    id: Optional[UUID] = None
    username: str


class AddGameRequestSchema(BaseModel):
    catalog_id: Optional[int] = Field(None, validation_alias=AliasChoices("catalog_id", "igdb_id"))
    title: Optional[str] = None
    cover_url: Optional[str] = None


class PollGameSchema(BaseModel):
    id: UUID
    poll_id: UUID
    catalog_id: int
    title: str
    cover_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AddGameResponseSchema(BaseModel):
    message: str
    game: PollGameSchema


class PollGameWithVotesSchema(PollGameSchema):
    vote_count: int
    voters: List[ProfileSchema] = Field(default_factory=list)
    has_voted: bool = False


class PollDetailResponseSchema(BaseModel):
    poll: PollSchema
    creator: ProfileSchema
    games: List[PollGameWithVotesSchema] = Field(default_factory=list)


class VoteResponseSchema(BaseModel):
    message: str
    voted: bool


class CreatedPollSchema(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    created_at: datetime
    game_count: int


class ParticipatedPollSchema(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    created_at: datetime
    creator_username: str


class PollHistoryResponseSchema(BaseModel):
    created: List[CreatedPollSchema] = Field(default_factory=list)
    participated: List[ParticipatedPollSchema] = Field(default_factory=list)
