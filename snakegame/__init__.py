"""
Terminal Snake
A classic Snake game for the terminal, built on Python's curses library.

Controls:
- Arrow keys to move
- Esc to quit
"""

from .core import (
    Cell,
    Direction,
    GameSettings,
    GameState,
    Position,
    RandomFoodPlacer,
    Snake,
    SnakeError,
    SnakeGame,
)

__version__ = "1.0.0"
