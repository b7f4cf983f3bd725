"""Shared fixtures for the Millionaire tests."""

import pytest

from game import Game
from market import Stock
from portfolio import Player


class FixedRandom:
    """Random source whose integer draws come from a fixed list."""

    def __init__(self, draws):
        self.draws = list(draws)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        return self.draws.pop(0)


@pytest.fixture
def fixed_random():
    return FixedRandom


@pytest.fixture
def stock() -> Stock:
    return Stock(id=0, name="Rainbow Mining", initial_value=50, variation=10)


@pytest.fixture
def player() -> Player:
    return Player(balance=1000, income=100)


@pytest.fixture
def game() -> Game:
    return Game(
        stocks=[
            Stock(id=0, name="Rainbow Mining", initial_value=50, variation=10),
            Stock(id=1, name="Quantum Foods", initial_value=20, variation=5),
        ],
        player=Player(balance=1000, income=100),
        goal=5000,
        add_stock_cost=300,
        initial_income=100,
        income_upgrade_cost=1000,
    )


@pytest.fixture
def save_dir(tmp_path):
    path = tmp_path / "saves"
    path.mkdir()
    return path
