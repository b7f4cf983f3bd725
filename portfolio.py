"""Player ledger: balance, income and stock holdings."""

from datetime import datetime
from typing import Dict, Iterable
from dataclasses import dataclass, asdict, field

from market import Stock


class LedgerError(ValueError):
    """Base class for rejected ledger operations."""


class InsufficientFundsError(LedgerError):
    def __init__(self, balance: int, needed: int):
        super().__init__(f"Insufficient funds. Have {balance}, need {needed}")
        self.balance = balance
        self.needed = needed


class InsufficientSharesError(LedgerError):
    def __init__(self, held: int, requested: int):
        super().__init__(f"Insufficient shares. Have {held}, trying to sell {requested}")
        self.held = held
        self.requested = requested


class InvalidAmountError(LedgerError):
    def __init__(self, amount: int):
        super().__init__(f"Amount must not be negative, got {amount}")
        self.amount = amount


def _check_amount(amount: int):
    if amount < 0:
        raise InvalidAmountError(amount)


@dataclass
class Transaction:
    """Represents a trade or purchase made during a session."""
    timestamp: str
    turn: int
    action: str  # BUY, SELL, UPGRADE_INCOME or ADD_STOCK
    stock: str
    amount: int
    price: int
    total: int

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Transaction':
        return cls(**data)

    @classmethod
    def now(cls, turn: int, action: str, stock: str, amount: int, price: int) -> 'Transaction':
        return cls(
            timestamp=datetime.now().isoformat(),
            turn=turn,
            action=action,
            stock=stock,
            amount=amount,
            price=price,
            total=amount * price,
        )


@dataclass
class Player:
    """The player's account.

    Every operation checks before it mutates, so a failed operation leaves
    the balance and holdings exactly as they were.
    """
    balance: int
    income: int
    initial_income: int = None
    stock_balances: Dict[int, int] = field(default_factory=dict)

    def __post_init__(self):
        if self.initial_income is None:
            self.initial_income = self.income

    def stock_balance(self, stock: Stock) -> int:
        """Get the number of shares owned of a stock."""
        return self.stock_balances.get(stock.id, 0)

    def buy_stock(self, stock: Stock, amount: int):
        """Buy shares at the stock's current value."""
        _check_amount(amount)
        cost = stock.value * amount
        if self.balance < cost:
            raise InsufficientFundsError(self.balance, cost)

        self.balance -= cost
        self.stock_balances[stock.id] = self.stock_balance(stock) + amount

    def sell_stock(self, stock: Stock, amount: int):
        """Sell shares at the stock's current value."""
        _check_amount(amount)
        held = self.stock_balance(stock)
        if held < amount:
            raise InsufficientSharesError(held, amount)

        self.stock_balances[stock.id] = held - amount
        self.balance += stock.value * amount

    def reset_stock(self, stock: Stock):
        """Wipe the position in a stock that went bankrupt."""
        self.stock_balances[stock.id] = 0

    def collect_income(self):
        self.balance += self.income

    def increase_income(self, upgrade_cost: int):
        """Pay for an income upgrade worth the initial income."""
        self.withdraw(upgrade_cost)
        self.income += self.initial_income

    def withdraw(self, amount: int):
        _check_amount(amount)
        if self.balance < amount:
            raise InsufficientFundsError(self.balance, amount)
        self.balance -= amount

    def deposit(self, amount: int):
        _check_amount(amount)
        self.balance += amount

    def max_affordable(self, stock: Stock) -> int:
        """Calculate maximum shares that can be bought."""
        if stock.value <= 0:
            return 0
        return max(0, self.balance // stock.value)

    def net_worth(self, stocks: Iterable[Stock]) -> int:
        """Balance plus the current worth of held shares in the given stocks."""
        total = self.balance
        for stock in stocks:
            total += stock.value * self.stock_balance(stock)
        return total

    def to_dict(self) -> Dict:
        return {
            'balance': self.balance,
            'income': self.income,
            'initial_income': self.initial_income,
            'stock_balances': {str(k): v for k, v in self.stock_balances.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Player':
        return cls(
            balance=data['balance'],
            income=data['income'],
            initial_income=data['initial_income'],
            stock_balances={int(k): v for k, v in data['stock_balances'].items()},
        )
