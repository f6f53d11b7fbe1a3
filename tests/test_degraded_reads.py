import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from crud.poll_crud import poll_crud
from crud.poll_game_crud import poll_game_crud
from crud.user_crud import user_crud
from crud.vote_crud import vote_crud
from services.history_service import history_service as HistoryService
from services.identity_service import identity_service as IdentityService
from services.poll_service import UNKNOWN_USERNAME
from services.poll_service import poll_service as PollService


class AbortableSession(AsyncSession):
    """Session that, like Postgres, refuses work after a failed statement until rolled back."""

    aborted = False
    rollbacks = 0

    async def rollback(self):
        self.aborted = False
        self.rollbacks += 1
        await super().rollback()


def failing(session):
    session.aborted = True
    raise OperationalError("SELECT", {}, Exception("connection lost"))


def guarded(monkeypatch, crud, name):
    """Make ``crud.name`` fail while the session's transaction is aborted."""
    original = getattr(crud, name)

    async def wrapper(session, *args, **kwargs):
        if session.aborted:
            raise OperationalError("SELECT", {}, Exception("current transaction is aborted"))
        return await original(session, *args, **kwargs)

    monkeypatch.setattr(crud, name, wrapper)


def broken(monkeypatch, crud, name):
    async def wrapper(session, *args, **kwargs):
        failing(session)

    monkeypatch.setattr(crud, name, wrapper)


@pytest_asyncio.fixture
async def abortable(engine):
    factory = async_sessionmaker(engine, class_=AbortableSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def game_night(abortable):
    """alice's poll with one suggestion that bob voted for; bob also owns a poll."""
    alice = await IdentityService.register(abortable, "alice", "secret123")
    bob = await IdentityService.register(abortable, "bob", "secret123")
    poll = await PollService.create_poll(abortable, alice, "Alice night", "")
    await PollService.create_poll(abortable, bob, "Bob night", "")
    game = await PollService.add_game(abortable, alice, poll.id, 101, "Chess")
    assert await PollService.toggle_vote(abortable, bob, poll.id, game.id) is True
    return {"alice": alice, "bob": bob, "poll_id": poll.id, "game_id": game.id}


class TestGetPoll:
    async def test_failed_creator_lookup_leaves_games_readable(self, abortable, game_night, monkeypatch):
        broken(monkeypatch, user_crud, "get_user_by_id")
        guarded(monkeypatch, poll_game_crud, "get_games_by_poll")
        guarded(monkeypatch, vote_crud, "get_voters_by_games")

        result = await PollService.get_poll(abortable, game_night["poll_id"])

        assert result["creator"] == {"id": game_night["alice"].id, "username": UNKNOWN_USERNAME}
        assert result["poll"].id == game_night["poll_id"]
        assert [game["id"] for game in result["games"]] == [game_night["game_id"]]
        assert result["games"][0]["voters"] == [{"id": game_night["bob"].id, "username": "bob"}]

    async def test_failed_games_fetch_is_rolled_back(self, abortable, game_night, monkeypatch):
        broken(monkeypatch, poll_game_crud, "get_games_by_poll")
        guarded(monkeypatch, poll_crud, "get_poll_by_id")

        result = await PollService.get_poll(abortable, game_night["poll_id"])

        assert result["games"] == []
        assert result["creator"]["username"] == "alice"
        assert abortable.rollbacks == 1
        # The session is usable for the next statement
        assert await poll_crud.get_poll_by_id(abortable, game_night["poll_id"]) is not None


class TestHistory:
    async def test_failed_created_half_leaves_participated_readable(self, abortable, game_night, monkeypatch):
        broken(monkeypatch, poll_crud, "get_polls_created_by")
        guarded(monkeypatch, poll_crud, "get_polls_voted_by")

        history = await HistoryService.get_history(abortable, game_night["bob"])

        assert history["created"] == []
        assert [poll["title"] for poll in history["participated"]] == ["Alice night"]

    @pytest.mark.parametrize("name", ["get_polls_created_by", "get_polls_voted_by"])
    async def test_each_failed_half_is_rolled_back(self, abortable, game_night, monkeypatch, name):
        broken(monkeypatch, poll_crud, name)

        history = await HistoryService.get_history(abortable, game_night["bob"])

        assert abortable.rollbacks == 1
        assert not abortable.aborted
        assert sum(len(half) for half in history.values()) == 1
