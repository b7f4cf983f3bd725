"""JSON log of completed turns."""

import json
import os
from datetime import datetime
from typing import Dict, List

from config import LOGGING
from game import Game
from market import Stock
from portfolio import Transaction


def build_turn_entry(game: Game, turn: int, bankrupt: List[Stock],
                     transactions: List[Transaction], session: str = None) -> Dict:
    # Turn numbers restart at 1 whenever a save is loaded, so entries from
    # separate runs are told apart by the session they were played in.
    return {
        "timestamp": datetime.now().isoformat(),
        "session": session,
        "turn": turn,
        "balance": game.player.balance,
        "income": game.player.income,
        "net_worth": game.net_worth(),
        "stocks": {s.name: s.value for s in game.stocks},
        "bankrupt": [s.name for s in bankrupt],
        "transactions": [t.to_dict() for t in transactions],
    }


def log_turn(log_file: str, game: Game, turn: int, bankrupt: List[Stock],
             transactions: List[Transaction], verbose: bool = None,
             session: str = None) -> Dict:
    """Append a turn to the log file."""
    entry = build_turn_entry(game, turn, bankrupt, transactions, session=session)

    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    try:
        with open(log_file, "r") as f:
            log = json.load(f)
        if not isinstance(log.get("turns"), list):
            log = {"turns": []}
    except (FileNotFoundError, ValueError, AttributeError):
        log = {"turns": []}

    log["turns"].append(entry)

    # Keep last N turns
    log["turns"] = log["turns"][-LOGGING["max_entries"]:]

    with open(log_file, "w") as f:
        json.dump(log, f, indent=2)

    if verbose is None:
        verbose = LOGGING["verbose"]
    if verbose:
        print(f"\n{'='*60}")
        print(f"TURN {turn} - {entry['timestamp']}")
        print(f"{'='*60}")
        print(f"Net worth: {entry['net_worth']} | Balance: {entry['balance']} | Income: {entry['income']}")
        if transactions:
            print("\nTRANSACTIONS:")
            for t in transactions:
                print(f"  {t.action} {t.amount} {t.stock} @ {t.price}")
        if bankrupt:
            print(f"\nBANKRUPT: {', '.join(entry['bankrupt'])}")
        print(f"{'='*60}\n")

    return entry


def read_log(log_file: str) -> List[Dict]:
    """Read the logged turns, oldest first."""
    try:
        with open(log_file, "r") as f:
            return json.load(f).get("turns", [])
    except (FileNotFoundError, ValueError, AttributeError):
        return []
