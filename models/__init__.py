from .user_model import UserModel
from .poll_model import Poll
from .poll_game_model import PollGame
from .vote_model import Vote

__all__ = ['UserModel', 'Poll', 'PollGame', 'Vote']
