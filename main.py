#!/usr/bin/env python3
"""Millionaire: Stock Trading Game CLI."""

import sys
import argparse
import random
from typing import List, Optional, Sequence, TextIO

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt

from session import Session
from game import TurnPhase
from analyzer import get_market_summary
from config import INDICATORS
import saves


GAME_OPTIONS = [
    "Buy stocks", "Sell stocks", "Increase income", "Add a new stock",
    "Print net worth breakdown", "Stock analysis", "Transaction history",
    "Save game", "End turn", "Quit game",
]
MAIN_OPTIONS = ["Play game!", "Load game", "Manage saves", "Quit"]
SAVE_OPTIONS = ["Copy", "Rename", "Delete", "Back"]


def print_header(console: Console, text: str):
    """Print a header."""
    console.print(Panel(text, style="bold blue"))


def choose(console: Console, options: Sequence, stream: TextIO = None):
    """Show a numbered menu and return the chosen option."""
    while True:
        for idx, option in enumerate(options, start=1):
            console.print(f"{idx}. {option}")
        choice = IntPrompt.ask("Please choose an option", console=console, stream=stream)
        if 1 <= choice <= len(options):
            return options[choice - 1]
        console.print(f"[red]Invalid choice, `{choice}`![/red]\n")


def ask_amount(console: Console, prompt: str, stream: TextIO = None) -> int:
    while True:
        amount = IntPrompt.ask(prompt, console=console, stream=stream)
        if amount >= 0:
            return amount
        console.print("[red]Amount must not be negative.[/red]")


def confirm(console: Console, prompt: str, default: bool, stream: TextIO = None) -> bool:
    return Confirm.ask(prompt, console=console, default=default, stream=stream)


def render_breakdown(console: Console, session: Session):
    """Show balance, holdings and net worth."""
    game = session.game
    player = game.player

    table = Table(title=f"Turn {session.turn} - Net Worth Breakdown")
    table.add_column("Stock", style="cyan")
    table.add_column("Shares", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Worth", justify="right", style="green")

    for stock in sorted(game.stocks):
        shares = player.stock_balance(stock)
        value_style = "green" if stock.momentum >= 0 else "red"
        table.add_row(
            stock.name,
            str(shares),
            f"[{value_style}]{stock.value}[/{value_style}]",
            str(shares * stock.value),
        )

    console.print(table)
    console.print(f"Balance: {player.balance}")
    console.print(f"Income: {player.income} per turn")
    console.print(f"[bold]Net worth: {game.net_worth()}[/bold] (goal: {game.goal})")


def render_analysis(console: Console, session: Session):
    """Show trend indicators for every stock."""
    summary = get_market_summary(session.history, session.game.stocks)
    if "error" in summary:
        console.print(f"[yellow]{summary['error']}[/yellow]")
        return

    table = Table(title=f"Market after {len(session.history)} turns")
    table.add_column("Stock", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Change", justify="right")
    for period in INDICATORS['sma_periods']:
        table.add_column(f"SMA {period}", justify="right")
    table.add_column("RSI", justify="right")
    table.add_column("High/Low", justify="right")

    def fmt(value):
        return "-" if value is None else f"{value:.2f}"

    for a in summary['all_stocks']:
        change_style = "green" if a['change'] >= 0 else "red"
        row = [
            a['name'],
            str(a['value']),
            f"[{change_style}]{a['change']:+d} ({a['change_pct']:+.2f}%)[/{change_style}]",
        ]
        row += [fmt(a[f"sma_{period}"]) for period in INDICATORS['sma_periods']]
        row += [fmt(a['rsi']), f"{a['high']}/{a['low']}"]
        table.add_row(*row)

    console.print(table)
    console.print(f"Average change: {summary['avg_change_pct']:+.2f}%")


def render_history(console: Console, session: Session, limit: int = 10):
    """Show transaction history."""
    transactions = session.transactions[-limit:]
    if not transactions:
        console.print("No transactions yet.")
        return

    table = Table(title=f"Last {len(transactions)} Transactions")
    table.add_column("Turn", justify="right", style="dim")
    table.add_column("Action", style="cyan")
    table.add_column("Stock")
    table.add_column("Amount", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Total", justify="right")

    for t in transactions:
        action_style = "green" if t.action == "SELL" else "red"
        table.add_row(
            str(t.turn),
            f"[{action_style}]{t.action}[/{action_style}]",
            t.stock,
            str(t.amount),
            str(t.price),
            str(t.total),
        )

    console.print(table)


def render_saves(console: Console, found: List[saves.Save]):
    if not found:
        console.print("[yellow]No saves yet.[/yellow]")
        return
    table = Table(title="Saves")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="cyan")
    for idx, save in enumerate(found, start=1):
        table.add_row(str(idx), save.name)
    console.print(table)


def report(console: Console, result):
    if result.success:
        console.print(f"[green]SUCCESS:[/green] {result.message}")
    else:
        console.print(f"[red]FAILED:[/red] {result.message}")


def save_session(console: Console, session: Session) -> bool:
    """Save the game, reporting rather than raising on failure."""
    try:
        path = session.save()
    except saves.SaveError as e:
        console.print(f"[red]Could not save game:[/red] {e}")
        return False
    console.print(f"[green]Game saved to[/green] {path}")
    return True


def announce_turn(console: Console, session: Session, turn_report):
    for stock in turn_report.bankrupt:
        console.print(f"[red]Stock '{stock.name}' went bankrupt![/red]")
    if turn_report.log_error:
        console.print(f"[yellow]Could not write turn log: {turn_report.log_error}[/yellow]")
    if turn_report.phase == TurnPhase.WON:
        render_breakdown(console, session)
        print_header(console, "You win!")


def play(console: Console, session: Session, stream: TextIO = None):
    """Run the turn loop until the player wins or quits."""
    turn_report = session.start_turn()
    announce_turn(console, session, turn_report)

    while session.phase == TurnPhase.AWAITING_ACTION:
        console.print()
        render_breakdown(console, session)
        choice = choose(console, GAME_OPTIONS, stream)
        console.print()
        game = session.game

        if choice == "Buy stocks":
            stock = choose(console, sorted(game.stocks), stream)
            max_shares = game.player.max_affordable(stock)
            amount = ask_amount(console, f"How much stock would you like to buy? (Max: {max_shares})", stream)
            report(console, session.buy(stock.id, amount))

        elif choice == "Sell stocks":
            stock = choose(console, sorted(game.stocks), stream)
            held = game.player.stock_balance(stock)
            amount = ask_amount(console, f"How much stock would you like to sell? (Max: {held})", stream)
            report(console, session.sell(stock.id, amount))

        elif choice == "Increase income":
            console.print(f"An income increase costs {game.income_upgrade_cost}.")
            if confirm(console, "Are you sure you want to increase your income?", True, stream):
                report(console, session.upgrade_income())

        elif choice == "Add a new stock":
            console.print(f"Adding a new stock costs {game.add_stock_cost}.")
            if confirm(console, "Are you sure you want to unlock a new stock?", True, stream):
                report(console, session.add_stock())

        elif choice == "Print net worth breakdown":
            render_breakdown(console, session)

        elif choice == "Stock analysis":
            render_analysis(console, session)

        elif choice == "Transaction history":
            render_history(console, session)

        elif choice == "Save game":
            save_session(console, session)

        elif choice == "End turn":
            turn_report = session.end_turn()
            announce_turn(console, session, turn_report)

        elif choice == "Quit game":
            if confirm(console, "Are you sure you want to end the game?", False, stream):
                if confirm(console, "Save before quitting?", True, stream):
                    save_session(console, session)
                session.quit()


def pick_save(console: Console, save_dir: Optional[str], stream: TextIO = None) -> Optional[saves.Save]:
    """Let the player choose a save. Returns None when they go back."""
    found = saves.list_saves(save_dir)
    if not found:
        console.print("[yellow]No saves yet.[/yellow]")
        return None
    choice = choose(console, found + ["Back"], stream)
    return choice if isinstance(choice, saves.Save) else None


def manage_saves(console: Console, save_dir: Optional[str], stream: TextIO = None):
    """Copy, rename or delete a save."""
    save = pick_save(console, save_dir, stream)
    if save is None:
        return

    action = choose(console, SAVE_OPTIONS, stream)
    if action == "Copy":
        path = saves.copy(save.path)
        console.print(f"Copied to {path.name}")
    elif action == "Rename":
        new_name = Prompt.ask("New name", console=console, stream=stream)
        try:
            path = saves.rename(save.path, new_name)
        except (saves.EmptyFileNameError, saves.InvalidFileNameError,
                saves.SaveAlreadyExistsError) as e:
            console.print(f"[red]{e}[/red]")
            return
        console.print(f"Renamed to {path.name}")
    elif action == "Delete":
        if confirm(console, f"Delete '{save.name}'?", False, stream):
            saves.delete(save.path)
            console.print("Save deleted.")


def main_menu(console: Console, save_dir: Optional[str], rng: random.Random, stream: TextIO = None):
    """Top level menu: play, load, manage saves or quit."""
    while True:
        console.print()
        choice = choose(console, MAIN_OPTIONS, stream)

        try:
            if choice == "Play game!":
                play(console, Session.new(rng=rng, save_dir=save_dir), stream)

            elif choice == "Load game":
                save = pick_save(console, save_dir, stream)
                if save is not None:
                    play(console, Session.load(save.path, rng=rng), stream)

            elif choice == "Manage saves":
                manage_saves(console, save_dir, stream)

            elif choice == "Quit":
                console.print("Goodbye ;(")
                return

        except saves.DirectoryNotFoundError:
            console.print("[yellow]No saves yet.[/yellow]")
        except saves.SaveError as e:
            console.print(f"[red]{e}[/red]")


def run_command(console: Console, command: str, args: List[str],
                save_dir: Optional[str], rng: random.Random) -> int:
    """Run a single command and return the exit code."""
    if command == 'play':
        main_menu(console, save_dir, rng)

    elif command == 'saves':
        render_saves(console, saves.list_saves(save_dir))

    elif command == 'load':
        if not args:
            console.print("Usage: load <NAME>")
            return 1
        play(console, Session.load(saves.save_path(args[0], save_dir), rng=rng))

    elif command == 'copy':
        if not args:
            console.print("Usage: copy <NAME>")
            return 1
        path = saves.copy(saves.save_path(args[0], save_dir))
        console.print(f"Copied to {path.name}")

    elif command == 'delete':
        if not args:
            console.print("Usage: delete <NAME>")
            return 1
        saves.delete(saves.save_path(args[0], save_dir))
        console.print(f"Deleted {args[0]}")

    elif command == 'rename':
        if len(args) < 2:
            console.print("Usage: rename <NAME> <NEW NAME>")
            return 1
        path = saves.rename(saves.save_path(args[0], save_dir), " ".join(args[1:]))
        console.print(f"Renamed to {path.name}")

    else:
        console.print(f"Unknown command: {command}")
        return 1

    return 0


def main(argv: List[str] = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Millionaire: Stock Trading Game",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  play                Start the interactive game (default)
  saves               List saved games
  load NAME           Continue a saved game
  copy NAME           Copy a saved game
  delete NAME         Delete a saved game
  rename NAME NEW     Rename a saved game

Examples:
  python main.py
  python main.py saves
  python main.py load "2026-01-05 18:30:12"
  python main.py --seed 42 play
        """
    )

    parser.add_argument('command', nargs='?', default='play',
                        help='Command to execute')
    parser.add_argument('args', nargs='*', help='Command arguments')
    parser.add_argument('--save-dir', default=None,
                        help='Directory holding save files')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for stock prices')

    args = parser.parse_args(argv)
    console = Console()
    rng = random.Random(args.seed)

    try:
        code = run_command(console, args.command.lower(), args.args, args.save_dir, rng)
    except KeyboardInterrupt:
        console.print("\nInterrupted.")
        sys.exit(0)
    except saves.SaveError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if code:
        parser.print_help()
        sys.exit(code)


if __name__ == '__main__':
    main()
