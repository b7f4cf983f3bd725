"""Tests for the player ledger."""

import pytest

from market import Stock
from portfolio import (
    Player, Transaction, InsufficientFundsError, InsufficientSharesError,
    InvalidAmountError, LedgerError,
)


class TestBuySell:

    def test_buy_then_sell_round_trip(self, player, stock):
        player.buy_stock(stock, 10)
        assert player.balance == 500
        assert player.stock_balance(stock) == 10

        player.sell_stock(stock, 10)
        assert player.balance == 1000
        assert player.stock_balance(stock) == 0

    def test_buy_exact_balance(self, player, stock):
        player.buy_stock(stock, 20)
        assert player.balance == 0
        assert player.stock_balance(stock) == 20

    def test_buy_insufficient_funds_leaves_ledger_unchanged(self, player, stock):
        with pytest.raises(InsufficientFundsError) as exc:
            player.buy_stock(stock, 21)

        assert exc.value.needed == 1050
        assert player.balance == 1000
        assert player.stock_balance(stock) == 0
        assert player.stock_balances == {}

    def test_sell_insufficient_shares_leaves_ledger_unchanged(self, player, stock):
        player.buy_stock(stock, 2)
        with pytest.raises(InsufficientSharesError):
            player.sell_stock(stock, 3)

        assert player.balance == 900
        assert player.stock_balance(stock) == 2

    def test_sell_unowned_stock(self, player, stock):
        with pytest.raises(InsufficientSharesError):
            player.sell_stock(stock, 1)

    def test_sell_at_changed_price(self, player, stock):
        player.buy_stock(stock, 10)
        stock.value = 80
        player.sell_stock(stock, 10)
        assert player.balance == 1300

    def test_negative_amounts_rejected(self, player, stock):
        with pytest.raises(InvalidAmountError):
            player.buy_stock(stock, -1)
        with pytest.raises(InvalidAmountError):
            player.sell_stock(stock, -1)
        assert player.balance == 1000
        assert player.stock_balances == {}

    def test_zero_amount_is_noop(self, player, stock):
        player.buy_stock(stock, 0)
        assert player.balance == 1000
        assert player.stock_balance(stock) == 0

    def test_ledger_errors_are_value_errors(self):
        assert issubclass(InsufficientFundsError, LedgerError)
        assert issubclass(LedgerError, ValueError)


class TestIncome:

    def test_collect_income(self, player):
        player.collect_income()
        assert player.balance == 1100

    def test_increase_income_adds_initial_income(self, player):
        player.increase_income(300)
        player.increase_income(300)

        assert player.income == 300
        assert player.balance == 400

    def test_increase_income_insufficient_funds(self, player):
        with pytest.raises(InsufficientFundsError):
            player.increase_income(1001)
        assert player.income == 100
        assert player.balance == 1000

    def test_initial_income_defaults_to_income(self):
        assert Player(balance=0, income=250).initial_income == 250


class TestWithdrawDeposit:

    def test_withdraw(self, player):
        player.withdraw(1000)
        assert player.balance == 0

    def test_withdraw_too_much(self, player):
        with pytest.raises(InsufficientFundsError):
            player.withdraw(1001)
        assert player.balance == 1000

    def test_deposit(self, player):
        player.deposit(25)
        assert player.balance == 1025

    def test_negative_withdraw_and_deposit(self, player):
        with pytest.raises(InvalidAmountError):
            player.withdraw(-5)
        with pytest.raises(InvalidAmountError):
            player.deposit(-5)
        assert player.balance == 1000


class TestNetWorth:

    def test_no_stocks(self, player):
        assert player.net_worth([]) == player.balance

    def test_includes_holdings(self, player, stock):
        other = Stock(id=1, name="Polar Energy", initial_value=7, variation=1)
        player.buy_stock(stock, 4)
        player.buy_stock(other, 10)

        assert player.net_worth([stock, other]) == 1000

        stock.value = 100
        assert player.net_worth([stock, other]) == 730 + 400 + 70

    def test_excludes_stocks_not_listed(self, player, stock):
        player.buy_stock(stock, 4)
        assert player.net_worth([]) == 800

    def test_reset_stock_wipes_position(self, player, stock):
        player.buy_stock(stock, 4)
        player.reset_stock(stock)
        assert player.stock_balance(stock) == 0
        assert player.balance == 800

    def test_max_affordable(self, player, stock):
        assert player.max_affordable(stock) == 20
        stock.value = 0
        assert player.max_affordable(stock) == 0


class TestSerialization:

    def test_player_round_trip(self, player, stock):
        player.buy_stock(stock, 3)
        data = player.to_dict()

        assert data['stock_balances'] == {"0": 3}
        assert Player.from_dict(data) == player

    def test_transaction(self):
        t = Transaction.now(4, "BUY", "Nova Labs", 3, 20)
        assert t.total == 60
        assert Transaction.from_dict(t.to_dict()) == t
