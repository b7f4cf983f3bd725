"""A running game: turn counter, random source, history and save location."""

import os
import random
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from config import LOGGING
from analyzer import PriceHistory
from game import Game, TurnPhase, TurnReport, new_game
from portfolio import Transaction
from trades import (
    TradeResult, execute_trade, execute_income_upgrade, execute_add_stock,
)
import saves
import turn_log


class Session:
    """Drives a game through its turns.

    Within a turn the player may trade as often as they like. ``end_turn``
    collects income and varies every stock once, then runs the next turn's
    bankruptcy and win checks.
    """

    def __init__(self, game: Game, rng: random.Random = None,
                 save_dir: Optional[Path] = None, save_path: Optional[Path] = None,
                 log_turns: bool = True):
        self.game = game
        self.rng = rng if rng is not None else random.Random()
        self.save_dir = save_dir
        self.save_path = save_path
        self.log_turns = log_turns
        # Not saved: a loaded game counts turns from 1 again
        self.turn = 0
        self.started_at = datetime.now().isoformat()
        self.phase = TurnPhase.AWAITING_ACTION
        self.history = PriceHistory()
        self.transactions: List[Transaction] = []
        self._turn_transactions: List[Transaction] = []

    @classmethod
    def new(cls, rng: random.Random = None, save_dir: Optional[Path] = None, **kwargs) -> 'Session':
        rng = rng if rng is not None else random.Random()
        return cls(new_game(rng, **kwargs), rng=rng, save_dir=save_dir)

    @classmethod
    def load(cls, path: Path, rng: random.Random = None, **kwargs) -> 'Session':
        path = Path(path)
        game = saves.load(path)
        return cls(game, rng=rng, save_dir=path.parent, save_path=path, **kwargs)

    @property
    def log_file(self) -> Optional[str]:
        if self.save_dir is None:
            return None
        return os.path.join(str(self.save_dir), LOGGING["log_file_name"])

    def start_turn(self) -> TurnReport:
        """Begin the next turn: reset bankrupt stocks and check for a win."""
        self.turn += 1
        report = self.game.start_turn()
        self.history.record(self.turn, self.game.stocks)
        self.phase = report.phase
        self._turn_transactions = []
        return report

    def end_turn(self) -> TurnReport:
        """Finish the current turn and start the next one."""
        if self.phase != TurnPhase.AWAITING_ACTION:
            raise RuntimeError(f"Cannot end turn while game is {self.phase.value}")

        finished_turn = self.turn
        transactions = self._turn_transactions
        self.game.end_turn(self.rng)
        report = self.start_turn()

        if self.log_turns and self.log_file:
            try:
                turn_log.log_turn(self.log_file, self.game, finished_turn,
                                  report.bankrupt, transactions,
                                  session=self.started_at)
            except OSError as e:
                report.log_error = str(e)
        return report

    def quit(self):
        self.phase = TurnPhase.QUIT

    def _record(self, result: TradeResult) -> TradeResult:
        if result.success and result.transaction:
            self.transactions.append(result.transaction)
            self._turn_transactions.append(result.transaction)
        return result

    def buy(self, stock_id: int, amount: int) -> TradeResult:
        return self._record(execute_trade(self.game, "BUY", stock_id, amount, self.turn))

    def sell(self, stock_id: int, amount: int) -> TradeResult:
        return self._record(execute_trade(self.game, "SELL", stock_id, amount, self.turn))

    def upgrade_income(self) -> TradeResult:
        return self._record(execute_income_upgrade(self.game, self.turn))

    def add_stock(self) -> TradeResult:
        result = self._record(execute_add_stock(self.game, self.rng, self.turn))
        if result.success:
            self.history.record(self.turn, self.game.stocks)
        return result

    def save(self) -> Path:
        """Write the game to its save file, picking a new path on first save."""
        if self.save_path is None:
            directory = saves.ensure_save_dir(self.save_dir)
            self.save_dir = directory
            self.save_path = saves.make_save_path(directory)
        saves.save(self.save_path, self.game)
        return self.save_path
