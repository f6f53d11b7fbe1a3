from fastapi import APIRouter, status

from core.depends import AsyncDBSession, AuthenticatedUser, OptionalUser
from schemas.poll_schema import (
    AddGameRequestSchema,
    AddGameResponseSchema,
    CreatePollRequestSchema,
    CreatePollResponseSchema,
    PollDetailResponseSchema,
    PollGameSchema,
    PollHistoryResponseSchema,
    PollSchema,
    VoteResponseSchema,
)
from services.history_service import history_service as HistoryService
from services.poll_service import poll_service as PollService


router = APIRouter(
    prefix="/polls",
)


@router.post("", response_model=CreatePollResponseSchema, status_code=status.HTTP_201_CREATED)
async def create_poll(
    session: AsyncDBSession,
    poll: CreatePollRequestSchema,
    current_user: AuthenticatedUser
):
    created_poll = await PollService.create_poll(session, current_user, poll.title, poll.description)
    return CreatePollResponseSchema(
        message="Poll created successfully",
        poll=PollSchema.model_validate(created_poll),
    )


# Declared before /{poll_id} so "history" is not taken for a poll id
@router.get("/history", response_model=PollHistoryResponseSchema)
async def get_poll_history(
    session: AsyncDBSession,
    current_user: AuthenticatedUser
):
    """Polls the current user created and polls of others they voted in."""
    history = await HistoryService.get_history(session, current_user)
    return PollHistoryResponseSchema.model_validate(history)


@router.get("/{poll_id}", response_model=PollDetailResponseSchema)
async def get_poll(
    session: AsyncDBSession,
    poll_id: str,
    viewer: OptionalUser
):
    poll_data = await PollService.get_poll(session, poll_id, viewer)
    return PollDetailResponseSchema.model_validate(poll_data)


@router.post("/{poll_id}/games", response_model=AddGameResponseSchema, status_code=status.HTTP_201_CREATED)
async def add_game_to_poll(
    session: AsyncDBSession,
    poll_id: str,
    game_data: AddGameRequestSchema,
    current_user: AuthenticatedUser
):
    game = await PollService.add_game(
        session,
        current_user,
        poll_id,
        game_data.catalog_id,
        game_data.title,
        game_data.cover_url,
    )
    return AddGameResponseSchema(
        message="Game added successfully",
        game=PollGameSchema.model_validate(game),
    )


@router.post("/{poll_id}/games/{game_id}/vote", response_model=VoteResponseSchema)
async def toggle_vote(
    session: AsyncDBSession,
    poll_id: str,
    game_id: str,
    current_user: AuthenticatedUser
):
    """Toggle the current user's vote on a suggestion."""
    voted = await PollService.toggle_vote(session, current_user, poll_id, game_id)
    return VoteResponseSchema(
        message="Vote added" if voted else "Vote removed",
        voted=voted,
    )
