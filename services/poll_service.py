import logging
import re
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import Conflict, MalformedIdentifier, NotFound, UpstreamUnavailable, ValidationError
from crud.poll_crud import poll_crud as PollCrud
from crud.poll_game_crud import poll_game_crud as PollGameCrud
from crud.user_crud import user_crud as UserCrud
from crud.vote_crud import vote_crud as VoteCrud
from models import Poll, PollGame
from schemas.poll_schema import PollSchema
from schemas.user_schema import AuthUser

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
GAME_TITLE_MAX_LENGTH = 255
COVER_URL_MAX_LENGTH = 500
CATALOG_ID_MAX = 2**31 - 1
DESCRIPTION_MAX_LENGTH = 500
UNKNOWN_USERNAME = "Unknown"

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)


def parse_identifier(value: Any, kind: str = "poll") -> UUID:
    """Validate the canonical UUID form before anything touches the store."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str) or not UUID_PATTERN.match(value):
        raise MalformedIdentifier(f"Invalid {kind} ID format")
    return UUID(value)


class PollService:

    async def create_poll(
        self,
        session: AsyncSession,
        user: AuthUser,
        title: Optional[str],
        description: Optional[str],
    ) -> Poll:
        title = title.strip() if isinstance(title, str) else ""
        description = description.strip() if isinstance(description, str) else ""

        errors = []
        if not title:
            errors.append("Poll title is required")
        elif len(title) > TITLE_MAX_LENGTH:
            errors.append(f"Title must be {TITLE_MAX_LENGTH} characters or less")
        if len(description) > DESCRIPTION_MAX_LENGTH:
            errors.append(f"Description must be {DESCRIPTION_MAX_LENGTH} characters or less")
        if errors:
            raise ValidationError("; ".join(errors))

        try:
            poll = await PollCrud.create_poll(session, {
                "creator_id": user.id,
                "title": title,
                "description": description or None,
            })
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Poll creation failed for user {user.id}: {e}")
            raise UpstreamUnavailable("Failed to create poll") from e

        logger.info(f"User {user.id} created poll {poll.id}")
        return poll

    async def get_poll(
        self,
        session: AsyncSession,
        poll_id: Any,
        viewer: Optional[AuthUser] = None,
    ) -> Dict[str, Any]:
        """Poll with its creator and every suggestion in the order it was added.

        The creator profile and the suggestions are secondary reads: if they fail
        the poll is still returned with placeholders.
        """
        poll_uuid = parse_identifier(poll_id)
        poll = await PollCrud.get_poll_by_id(session, poll_uuid)
        if poll is None:
            raise NotFound("Poll not found")

        # Copied out before any rollback below expires the ORM instance
        poll_data = PollSchema.model_validate(poll)

        creator = {"id": poll_data.creator_id, "username": UNKNOWN_USERNAME}
        try:
            profile = await UserCrud.get_user_by_id(session, poll_data.creator_id)
            if profile is not None:
                creator["username"] = profile.username
        except SQLAlchemyError as e:
            await session.rollback()
            logger.warning(f"Creator lookup failed for poll {poll_data.id}: {e}")

        try:
            games = await self._games_with_votes(session, poll_data.id, viewer)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.warning(f"Games fetch failed for poll {poll_data.id}, continuing without games: {e}")
            games = []

        return {
            "poll": poll_data,
            "creator": creator,
            "games": games,
        }

    async def _games_with_votes(
        self,
        session: AsyncSession,
        poll_id: UUID,
        viewer: Optional[AuthUser],
    ) -> List[Dict[str, Any]]:
        games = await PollGameCrud.get_games_by_poll(session, poll_id)
        voter_rows = await VoteCrud.get_voters_by_games(session, [game.id for game in games])

        voters_by_game: Dict[UUID, List[Dict[str, Any]]] = {game.id: [] for game in games}
        for row in voter_rows:
            voters_by_game[row.poll_game_id].append({
                "id": row.user_id,
                "username": row.username or UNKNOWN_USERNAME,
            })

        result = []
        for game in games:
            voters = voters_by_game[game.id]
            result.append({
                "id": game.id,
                "poll_id": game.poll_id,
                "catalog_id": game.catalog_id,
                "title": game.title,
                "cover_url": game.cover_url,
                "created_at": game.created_at,
                "vote_count": len(voters),
                "voters": voters,
                "has_voted": viewer is not None and any(v["id"] == viewer.id for v in voters),
            })
        return result

    async def add_game(
        self,
        session: AsyncSession,
        user: AuthUser,
        poll_id: Any,
        catalog_id: Optional[int],
        title: Optional[str],
        cover_url: Optional[str] = None,
    ) -> PollGame:
        poll_uuid = parse_identifier(poll_id)
        title = title.strip() if isinstance(title, str) else ""
        if catalog_id is None or not title:
            raise ValidationError("Game ID and title are required")
        if catalog_id <= 0 or catalog_id > CATALOG_ID_MAX:
            raise ValidationError(f"Game ID must be a positive integer no greater than {CATALOG_ID_MAX}")
        if len(title) > GAME_TITLE_MAX_LENGTH:
            raise ValidationError(f"Game title must be {GAME_TITLE_MAX_LENGTH} characters or less")
        cover_url = cover_url.strip() if isinstance(cover_url, str) else None
        if cover_url and len(cover_url) > COVER_URL_MAX_LENGTH:
            raise ValidationError(f"Cover URL must be {COVER_URL_MAX_LENGTH} characters or less")

        poll = await PollCrud.get_poll_by_id(session, poll_uuid)
        if poll is None:
            raise NotFound("Poll not found")

        existing_game = await PollGameCrud.get_game_by_catalog_id(session, poll_uuid, catalog_id)
        if existing_game:
            raise Conflict("This game has already been added to the poll")

        try:
            game = await PollGameCrud.create_game(session, {
                "poll_id": poll_uuid,
                "catalog_id": catalog_id,
                "title": title,
                "cover_url": cover_url or None,
            })
            await session.commit()
        except IntegrityError as e:
            # A concurrent request added the same catalog entry first
            await session.rollback()
            raise Conflict("This game has already been added to the poll") from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Game insert failed for poll {poll_uuid}: {e}")
            raise UpstreamUnavailable("Failed to add game") from e

        logger.info(f"User {user.id} added game {catalog_id} to poll {poll_uuid}")
        return game

    async def toggle_vote(
        self,
        session: AsyncSession,
        user: AuthUser,
        poll_id: Any,
        poll_game_id: Any,
    ) -> bool:
        """Remove the user's vote on the suggestion if present, otherwise add it.

        Two near-simultaneous toggles may leave either state; the unique
        constraint guarantees there is never more than one row.
        """
        poll_uuid = parse_identifier(poll_id)
        game_uuid = parse_identifier(poll_game_id, kind="game")

        game = await PollGameCrud.get_game_in_poll(session, game_uuid, poll_uuid)
        if game is None:
            raise NotFound("Game not found in this poll")

        existing_vote = await VoteCrud.get_vote(session, game_uuid, user.id)
        try:
            if existing_vote:
                await VoteCrud.delete_vote(session, game_uuid, user.id)
                voted = False
            else:
                await VoteCrud.create_vote(session, game_uuid, user.id)
                voted = True
            await session.commit()
        except IntegrityError:
            # The same user's other request inserted the row first
            await session.rollback()
            voted = True
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Vote toggle failed for game {game_uuid}: {e}")
            raise UpstreamUnavailable("Failed to record vote") from e

        return voted


poll_service = PollService()
