"""Player actions, validated and reported as results."""

import random
from dataclasses import dataclass
from typing import Optional

from game import Game
from market import Stock
from portfolio import LedgerError, InsufficientFundsError, InsufficientSharesError, Transaction


@dataclass
class TradeResult:
    """Result of a trade attempt."""
    success: bool
    message: str
    stock: str = ""
    action: str = ""
    amount: int = 0
    price: int = 0
    total: int = 0
    transaction: Optional[Transaction] = None


def _failure(error: LedgerError, action: str, stock: str = "") -> TradeResult:
    return TradeResult(success=False, message=str(error), stock=stock, action=action)


def execute_buy(game: Game, stock: Stock, amount: int, turn: int = 0) -> TradeResult:
    """Execute a buy order at the stock's current value."""
    try:
        game.player.buy_stock(stock, amount)
    except InsufficientFundsError as e:
        max_shares = game.player.max_affordable(stock)
        return TradeResult(
            success=False,
            message=f"You could not afford that much stock. {e}. Max shares: {max_shares}",
            stock=stock.name,
            action="BUY",
        )
    except LedgerError as e:
        return _failure(e, "BUY", stock.name)

    transaction = Transaction.now(turn, "BUY", stock.name, amount, stock.value)
    return TradeResult(
        success=True,
        message=f"Bought {amount} shares of {stock.name} at {stock.value}",
        stock=stock.name,
        action="BUY",
        amount=amount,
        price=stock.value,
        total=transaction.total,
        transaction=transaction,
    )


def execute_sell(game: Game, stock: Stock, amount: int, turn: int = 0) -> TradeResult:
    """Execute a sell order at the stock's current value."""
    try:
        game.player.sell_stock(stock, amount)
    except InsufficientSharesError as e:
        return TradeResult(
            success=False,
            message=f"You do not have enough stock. {e}",
            stock=stock.name,
            action="SELL",
        )
    except LedgerError as e:
        return _failure(e, "SELL", stock.name)

    transaction = Transaction.now(turn, "SELL", stock.name, amount, stock.value)
    return TradeResult(
        success=True,
        message=f"Sold {amount} shares of {stock.name} at {stock.value}",
        stock=stock.name,
        action="SELL",
        amount=amount,
        price=stock.value,
        total=transaction.total,
        transaction=transaction,
    )


def execute_trade(game: Game, action: str, stock_id: int, amount: int, turn: int = 0) -> TradeResult:
    """Execute a trade (buy or sell) on the stock with the given id."""
    action = action.upper()

    try:
        stock = game.stock_by_id(stock_id)
    except KeyError:
        return TradeResult(success=False, message=f"Unknown stock id: {stock_id}", action=action)

    if action == "BUY":
        return execute_buy(game, stock, amount, turn)
    elif action == "SELL":
        return execute_sell(game, stock, amount, turn)
    else:
        return TradeResult(success=False, message=f"Unknown action: {action}. Use BUY or SELL.")


def execute_income_upgrade(game: Game, turn: int = 0) -> TradeResult:
    """Pay for an income increase."""
    cost = game.income_upgrade_cost
    try:
        game.upgrade_income()
    except InsufficientFundsError as e:
        return TradeResult(
            success=False,
            message=f"You couldn't afford an income increase. {e}",
            action="UPGRADE_INCOME",
        )
    except LedgerError as e:
        return _failure(e, "UPGRADE_INCOME")

    transaction = Transaction.now(turn, "UPGRADE_INCOME", "", 1, cost)
    return TradeResult(
        success=True,
        message=f"Income increased to {game.player.income} per turn",
        action="UPGRADE_INCOME",
        amount=1,
        price=cost,
        total=cost,
        transaction=transaction,
    )


def execute_add_stock(game: Game, rng: random.Random, turn: int = 0) -> TradeResult:
    """Pay to unlock a new random stock."""
    cost = game.add_stock_cost
    try:
        stock = game.add_stock(rng)
    except InsufficientFundsError as e:
        return TradeResult(
            success=False,
            message=f"You couldn't afford a new stock. {e}",
            action="ADD_STOCK",
        )
    except LedgerError as e:
        return _failure(e, "ADD_STOCK")

    transaction = Transaction.now(turn, "ADD_STOCK", stock.name, 1, cost)
    return TradeResult(
        success=True,
        message=f"Unlocked {stock.name} at {stock.value}",
        stock=stock.name,
        action="ADD_STOCK",
        amount=1,
        price=cost,
        total=cost,
        transaction=transaction,
    )
