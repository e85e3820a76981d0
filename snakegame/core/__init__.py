from .game_engine import *  # noqa: F401,F403
from .game_engine import __all__  # noqa: F401
