"""Save file persistence and save directory management.

A save is a JSON document holding the whole ``Game``::

    {
      "stocks": [{"id": 0, "name": "...", "initial_value": 50, "value": 47,
                  "variation": 6, "momentum": -3}, ...],
      "player": {"balance": 1000, "income": 1000, "initial_income": 1000,
                 "stock_balances": {"0": 10}},
      "goal": 1000000,
      "add_stock_cost": 15000,
      "initial_income": 1000,
      "income_upgrade_cost": 10000
    }

Saves live in one directory as ``<name>.save.json``.
"""

import json
import os
import shutil
import sys
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import platformdirs

from config import (
    SAVE_SUFFIX, SAVE_TIMESTAMP_FORMAT, COPY_PREFIX, APP_NAME, APP_AUTHOR, SAVE_DIR,
)
from game import Game

UNSUPPORTED_PLATFORMS = ('emscripten', 'wasi')


class SaveError(Exception):
    """Base class for save file errors."""


class DirectoryNotFoundError(SaveError):
    def __init__(self, path: Path):
        super().__init__(f"Save directory not found: {path}")
        self.path = path


class PlatformNotSupportedError(SaveError):
    def __init__(self, platform: str):
        super().__init__(f"No default save directory on platform {platform!r}")
        self.platform = platform


class SaveIOError(SaveError):
    def __init__(self, error: OSError):
        super().__init__(f"Could not access save file: {error}")
        self.error = error


class SaveDecodeError(SaveError):
    """The save file is not a valid game."""


class SaveAlreadyExistsError(SaveError):
    def __init__(self, path: Path):
        super().__init__(f"A save named {path.name!r} already exists")
        self.path = path


class EmptyFileNameError(SaveError):
    def __init__(self):
        super().__init__("Save name must not be empty")


class InvalidFileNameError(SaveError):
    def __init__(self, name: str):
        super().__init__(f"Save name {name!r} must not contain path separators")
        self.name = name


@dataclass
class Save:
    """A save file found in a save directory."""
    path: Path
    name: str

    def __str__(self):
        return self.name


# Required fields and whether they must be integers (True) or strings (False)
STOCK_FIELDS = {
    'id': True, 'name': False, 'initial_value': True, 'value': True, 'variation': True,
}
PLAYER_FIELDS = {'balance': True, 'income': True, 'initial_income': True}
GAME_FIELDS = ['goal', 'add_stock_cost', 'initial_income', 'income_upgrade_cost']


def _is_int(value) -> bool:
    # bool is an int subclass but never a valid amount
    return isinstance(value, int) and not isinstance(value, bool)


def _require(data: Dict, key: str, is_int: bool, where: str):
    if key not in data:
        raise SaveDecodeError(f"Missing field {key!r} in {where}")
    value = data[key]
    if is_int and not _is_int(value):
        raise SaveDecodeError(f"Field {key!r} in {where} must be an integer, got {value!r}")
    if not is_int and not isinstance(value, str):
        raise SaveDecodeError(f"Field {key!r} in {where} must be a string, got {value!r}")


def _validate(data) -> None:
    """Check the decoded JSON has the shape of a game."""
    if not isinstance(data, dict):
        raise SaveDecodeError("Save must be a JSON object")

    for key in GAME_FIELDS:
        _require(data, key, True, "game")

    stocks = data.get('stocks')
    if not isinstance(stocks, list):
        raise SaveDecodeError("Field 'stocks' must be a list")
    for index, stock in enumerate(stocks):
        where = f"stock {index}"
        if not isinstance(stock, dict):
            raise SaveDecodeError(f"{where} must be an object")
        for key, is_int in STOCK_FIELDS.items():
            _require(stock, key, is_int, where)
        if 'momentum' in stock and not _is_int(stock['momentum']):
            raise SaveDecodeError(f"Field 'momentum' in {where} must be an integer")
        if stock['variation'] < 0:
            raise SaveDecodeError(f"Field 'variation' in {where} must not be negative")

    ids = [stock['id'] for stock in stocks]
    if len(set(ids)) != len(ids):
        raise SaveDecodeError("Stock ids must be unique")

    player = data.get('player')
    if not isinstance(player, dict):
        raise SaveDecodeError("Field 'player' must be an object")
    for key, is_int in PLAYER_FIELDS.items():
        _require(player, key, is_int, "player")
    balances = player.get('stock_balances')
    if not isinstance(balances, dict):
        raise SaveDecodeError("Field 'stock_balances' in player must be an object")
    for key, shares in balances.items():
        try:
            canonical = str(int(key)) == key
        except ValueError:
            canonical = False
        # "00" and "0" would both load as stock 0
        if not canonical:
            raise SaveDecodeError(f"Stock id {key!r} in player is not an integer")
        if not _is_int(shares) or shares < 0:
            raise SaveDecodeError(f"Share count for stock {key} must be a non-negative integer")


def serialize(game: Game) -> bytes:
    """Encode a game as JSON."""
    return json.dumps(game.to_dict(), indent=2).encode('utf-8')


def _reject_duplicate_keys(pairs) -> Dict:
    result = {}
    for key, value in pairs:
        if key in result:
            raise SaveDecodeError(f"Duplicate key {key!r} in save file")
        result[key] = value
    return result


def deserialize(data: Union[bytes, str]) -> Game:
    """Decode a game, raising ``SaveDecodeError`` for anything invalid."""
    try:
        decoded = json.loads(data, object_pairs_hook=_reject_duplicate_keys)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SaveDecodeError(f"Malformed save file: {e}") from e
    except RecursionError as e:
        raise SaveDecodeError("Save file is nested too deeply") from e

    _validate(decoded)
    return Game.from_dict(decoded)


def default_save_dir(platform: str = None) -> Path:
    """Get the per-user data directory for this application."""
    if platform is None:
        platform = sys.platform

    # Browser and WASI builds have no per-user data directory
    if platform in UNSUPPORTED_PLATFORMS:
        raise PlatformNotSupportedError(platform)
    return Path(platformdirs.user_data_dir(APP_NAME, APP_AUTHOR))


def resolve_save_dir(directory: Optional[Union[str, Path]] = None) -> Path:
    """Pick the explicit directory, the env override, or the platform default."""
    if directory:
        return Path(directory)
    if SAVE_DIR:
        return Path(SAVE_DIR)
    return default_save_dir()


def ensure_save_dir(directory: Optional[Union[str, Path]] = None) -> Path:
    """Resolve the save directory and create it if needed."""
    path = resolve_save_dir(directory)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SaveIOError(e) from e
    return path


def list_saves(directory: Optional[Union[str, Path]] = None) -> List[Save]:
    """Find all save files in a directory, sorted by name."""
    path = resolve_save_dir(directory)
    if not path.is_dir():
        raise DirectoryNotFoundError(path)

    saves = []
    try:
        entries = list(path.iterdir())
    except OSError as e:
        raise SaveIOError(e) from e

    for entry in entries:
        if entry.name.endswith(SAVE_SUFFIX) and entry.is_file():
            saves.append(Save(path=entry, name=entry.name[:-len(SAVE_SUFFIX)]))

    return sorted(saves, key=lambda s: s.name)


def save_path(name: str, directory: Optional[Union[str, Path]] = None) -> Path:
    """Get the path of the save with the given display name."""
    return resolve_save_dir(directory) / f"{name}{SAVE_SUFFIX}"


def make_save_path(directory: Optional[Union[str, Path]] = None,
                   now: datetime = None) -> Path:
    """Get a path for a new save, named after the current local time."""
    if now is None:
        now = datetime.now()
    return save_path(now.strftime(SAVE_TIMESTAMP_FORMAT), directory)


def load(path: Union[str, Path]) -> Game:
    """Read a game from a save file."""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise SaveIOError(e) from e
    return deserialize(data)


def _file_mode(path: Path) -> int:
    """Permissions for a save: the existing file's, or what open() would give."""
    try:
        return path.stat().st_mode & 0o777
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def save(path: Union[str, Path], game: Game):
    """Write a game to a save file.

    The file is written next to the target and then moved into place so a
    crash never leaves a half written save.
    """
    path = Path(path)
    data = serialize(game)
    try:
        mode = _file_mode(path)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix='.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            # mkstemp always creates 0600
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise
    except OSError as e:
        raise SaveIOError(e) from e


def copy(path: Union[str, Path]) -> Path:
    """Copy a save next to the original and return the copy's path."""
    path = Path(path)
    copy_path = path.with_name(f"{COPY_PREFIX}{path.name}")
    try:
        shutil.copyfile(path, copy_path)
    except OSError as e:
        raise SaveIOError(e) from e
    return copy_path


def delete(path: Union[str, Path]):
    try:
        Path(path).unlink()
    except OSError as e:
        raise SaveIOError(e) from e


def rename(path: Union[str, Path], new_name: str) -> Path:
    """Rename a save, keeping it in the same directory."""
    new_name = new_name.strip()
    if not new_name:
        raise EmptyFileNameError()

    if any(sep and sep in new_name for sep in (os.sep, os.altsep, "\0")):
        raise InvalidFileNameError(new_name)

    path = Path(path)
    try:
        new_path = path.with_name(f"{new_name}{SAVE_SUFFIX}")
    except ValueError:
        raise InvalidFileNameError(new_name)
    if new_path.exists():
        raise SaveAlreadyExistsError(new_path)

    try:
        path.rename(new_path)
    except OSError as e:
        raise SaveIOError(e) from e
    return new_path
