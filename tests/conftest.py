import os
import sys

import pytest

# Allow running the tests from a plain checkout
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from snakegame.core import FoodPlacer, GameSettings, Position, SnakeGame


class FixedFoodPlacer(FoodPlacer):
    """Hands out positions from a list, then repeats the last one"""

    def __init__(self, *positions):
        self.positions = list(positions) or [Position(1, 1)]
        self.calls = []

    def place(self, width, height, occupied):
        self.calls.append((width, height, list(occupied)))
        if len(self.positions) > 1:
            return self.positions.pop(0)
        return self.positions[0]


@pytest.fixture
def placer():
    return FixedFoodPlacer(Position(1, 1))


@pytest.fixture
def small_game(placer):
    """10x10 board, snake at (5, 5) facing right, food out of the way at (2, 2)"""
    return SnakeGame(GameSettings(width=10, height=10), food_placer=placer)
