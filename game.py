"""Game state: the stocks, the player and the economic parameters."""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from config import (
    GOAL, STARTING_BALANCE, STARTING_INCOME, STARTING_STOCKS,
    NEW_STOCK_COST, INCOME_UPGRADE_MULTIPLIER,
)
from market import Stock, generate_name, generate_stock
from portfolio import Player


class TurnPhase(Enum):
    AWAITING_ACTION = "awaiting_action"
    WON = "won"
    QUIT = "quit"


@dataclass
class Game:
    """Everything that is written to a save file."""
    stocks: List[Stock]
    player: Player
    goal: int = GOAL
    add_stock_cost: int = NEW_STOCK_COST
    initial_income: int = STARTING_INCOME
    income_upgrade_cost: int = STARTING_INCOME * INCOME_UPGRADE_MULTIPLIER

    def stock_by_id(self, stock_id: int) -> Stock:
        for stock in self.stocks:
            if stock.id == stock_id:
                return stock
        raise KeyError(f"No stock with id {stock_id}")

    def net_worth(self) -> int:
        return self.player.net_worth(self.stocks)

    def has_won(self) -> bool:
        return self.net_worth() > self.goal

    def add_stock(self, rng: random.Random) -> Stock:
        """Charge the player for a new stock and add it to the market.

        Raises ``InsufficientFundsError`` without adding anything if the
        player can't afford it.
        """
        self.player.withdraw(self.add_stock_cost)
        return self._append_stock(rng)

    def upgrade_income(self):
        self.player.increase_income(self.income_upgrade_cost)

    def _append_stock(self, rng: random.Random) -> Stock:
        name = generate_name(rng, taken=[s.name for s in self.stocks])
        # Ids are positions in the list; stocks are never removed
        stock = generate_stock(len(self.stocks), rng, name=name)
        self.stocks.append(stock)
        return stock

    def reset_bankrupt_stocks(self) -> List[Stock]:
        """Reset every stock worth nothing and wipe the player's shares in it."""
        bankrupt = []
        for stock in self.stocks:
            if stock.bankrupt:
                stock.reset()
                self.player.reset_stock(stock)
                bankrupt.append(stock)
        return bankrupt

    def start_turn(self) -> 'TurnReport':
        """Run the checks made before the player acts."""
        bankrupt = self.reset_bankrupt_stocks()
        phase = TurnPhase.WON if self.has_won() else TurnPhase.AWAITING_ACTION
        return TurnReport(phase=phase, bankrupt=bankrupt, net_worth=self.net_worth())

    def end_turn(self, rng: random.Random) -> Dict[int, int]:
        """Collect income and vary every stock exactly once.

        Returns how much each stock moved, keyed by stock id.
        """
        self.player.collect_income()
        return {stock.id: stock.vary(rng) for stock in sorted(self.stocks)}

    def to_dict(self) -> Dict:
        return {
            'stocks': [s.to_dict() for s in self.stocks],
            'player': self.player.to_dict(),
            'goal': self.goal,
            'add_stock_cost': self.add_stock_cost,
            'initial_income': self.initial_income,
            'income_upgrade_cost': self.income_upgrade_cost,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Game':
        return cls(
            stocks=[Stock.from_dict(s) for s in data['stocks']],
            player=Player.from_dict(data['player']),
            goal=data['goal'],
            add_stock_cost=data['add_stock_cost'],
            initial_income=data['initial_income'],
            income_upgrade_cost=data['income_upgrade_cost'],
        )


@dataclass
class TurnReport:
    """Outcome of the checks at the start of a turn."""
    phase: TurnPhase
    bankrupt: List[Stock] = field(default_factory=list)
    net_worth: int = 0
    log_error: Optional[str] = None


def new_game(rng: random.Random,
             goal: int = GOAL,
             balance: int = STARTING_BALANCE,
             income: int = STARTING_INCOME,
             add_stock_cost: int = NEW_STOCK_COST,
             starting_stocks: int = STARTING_STOCKS) -> Game:
    """Set up a fresh game with a few random stocks."""
    game = Game(
        stocks=[],
        player=Player(balance=balance, income=income),
        goal=goal,
        add_stock_cost=add_stock_cost,
        initial_income=income,
        income_upgrade_cost=income * INCOME_UPGRADE_MULTIPLIER,
    )
    for _ in range(starting_stocks):
        game._append_stock(rng)
    return game
