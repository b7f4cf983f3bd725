"""Tests for the console game."""

import io
import random

import pytest
from rich.console import Console

import main
import saves
from game import TurnPhase
from session import Session


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120)


def output(console) -> str:
    return console.file.getvalue()


def write_save(save_dir, name, game):
    path = save_dir / f"{name}.save.json"
    saves.save(path, game)
    return path


class TestPrompts:

    def test_choose_retries_invalid_choice(self, console):
        stream = io.StringIO("5\nabc\n2\n")
        assert main.choose(console, ["a", "b", "c"], stream) == "b"
        assert "Invalid choice, `5`!" in output(console)

    def test_ask_amount_rejects_negative(self, console):
        stream = io.StringIO("-2\n7\n")
        assert main.ask_amount(console, "How much?", stream) == 7

    def test_confirm(self, console):
        assert main.confirm(console, "Sure?", False, io.StringIO("y\n"))
        assert not main.confirm(console, "Sure?", True, io.StringIO("n\n"))
        assert main.confirm(console, "Sure?", True, io.StringIO(""))


class TestPlay:

    def test_buy_end_turn_and_quit(self, console, game, save_dir, fixed_random):
        session = Session(game, rng=fixed_random([0] * 10), save_dir=save_dir)
        stream = io.StringIO("1\n1\n4\n9\n7\n6\n10\ny\nn\n")

        main.play(console, session, stream)

        assert game.player.stock_balance(game.stocks[0]) == 4
        assert game.player.balance == 900
        assert session.turn == 2
        assert session.phase == TurnPhase.QUIT
        assert "Bought 4 shares of Rainbow Mining" in output(console)
        assert saves.list_saves(save_dir) == []

    def test_failed_trade_is_reported(self, console, game, save_dir, fixed_random):
        session = Session(game, rng=fixed_random([]), save_dir=save_dir)
        stream = io.StringIO("2\n1\n3\n10\ny\nn\n")

        main.play(console, session, stream)

        assert "FAILED" in output(console)
        assert game.player.balance == 1000

    def test_save_and_quit(self, console, game, save_dir, fixed_random):
        session = Session(game, rng=fixed_random([]), save_dir=save_dir)
        stream = io.StringIO("10\ny\ny\n")

        main.play(console, session, stream)

        found = saves.list_saves(save_dir)
        assert len(found) == 1
        assert saves.load(found[0].path).to_dict() == game.to_dict()

    def test_declining_quit_keeps_playing(self, console, game, save_dir, fixed_random):
        session = Session(game, rng=fixed_random([]), save_dir=save_dir)
        stream = io.StringIO("10\nn\n5\n10\ny\nn\n")

        main.play(console, session, stream)
        assert session.phase == TurnPhase.QUIT

    def test_win(self, console, game, save_dir, fixed_random):
        game.player.balance = 4950
        session = Session(game, rng=fixed_random([0, 0]), save_dir=save_dir)

        main.play(console, session, io.StringIO("9\n"))

        assert session.phase == TurnPhase.WON
        assert "You win!" in output(console)

    def test_unlock_stock(self, console, game, save_dir):
        session = Session(game, rng=random.Random(3), save_dir=save_dir)
        stream = io.StringIO("4\ny\n10\ny\nn\n")

        main.play(console, session, stream)

        assert len(game.stocks) == 3
        assert game.player.balance == 700

    def test_save_failure_is_reported(self, console, game, tmp_path, fixed_random):
        session = Session(game, rng=fixed_random([]), save_dir=tmp_path / "missing" / "x",
                          save_path=tmp_path / "missing" / "x" / "a.save.json")
        stream = io.StringIO("8\n10\ny\nn\n")

        main.play(console, session, stream)

        assert "Could not save game" in output(console)


class TestMainMenu:

    def test_quit(self, console, save_dir):
        main.main_menu(console, str(save_dir), random.Random(1), io.StringIO("4\n"))
        assert "Goodbye" in output(console)

    def test_manage_saves_without_directory(self, console, tmp_path):
        stream = io.StringIO("3\n4\n")
        main.main_menu(console, str(tmp_path / "missing"), random.Random(1), stream)
        assert "No saves yet." in output(console)

    def test_load_and_quit(self, console, game, save_dir):
        write_save(save_dir, "run", game)
        stream = io.StringIO("2\n1\n10\ny\nn\n4\n")

        main.main_menu(console, str(save_dir), random.Random(1), stream)

        assert "Rainbow Mining" in output(console)

    def test_rename_through_menu(self, console, game, save_dir):
        write_save(save_dir, "run", game)
        stream = io.StringIO("3\n1\n2\nbest run\n4\n")

        main.main_menu(console, str(save_dir), random.Random(1), stream)

        assert [s.name for s in saves.list_saves(save_dir)] == ["best run"]

    def test_rename_with_separator_is_refused(self, console, game, save_dir):
        write_save(save_dir, "run", game)
        stream = io.StringIO("3\n1\n2\nsub/dir\n4\n")

        main.main_menu(console, str(save_dir), random.Random(1), stream)

        assert "path separators" in output(console)
        assert "Goodbye" in output(console)
        assert [s.name for s in saves.list_saves(save_dir)] == ["run"]

    def test_copy_and_delete_through_menu(self, console, game, save_dir):
        write_save(save_dir, "run", game)
        stream = io.StringIO("3\n1\n1\n3\n1\n3\ny\n4\n")

        main.main_menu(console, str(save_dir), random.Random(1), stream)

        assert [s.name for s in saves.list_saves(save_dir)] == ["run"]


class TestCommands:

    def test_saves(self, game, save_dir, capsys):
        write_save(save_dir, "run", game)
        main.main(["--save-dir", str(save_dir), "saves"])
        assert "run" in capsys.readouterr().out

    def test_rename(self, game, save_dir):
        write_save(save_dir, "run", game)
        main.main(["--save-dir", str(save_dir), "rename", "run", "best", "run"])
        assert [s.name for s in saves.list_saves(save_dir)] == ["best run"]

    def test_copy_and_delete(self, game, save_dir):
        write_save(save_dir, "run", game)
        main.main(["--save-dir", str(save_dir), "copy", "run"])
        main.main(["--save-dir", str(save_dir), "delete", "run"])
        assert [s.name for s in saves.list_saves(save_dir)] == ["Copy of run"]

    def test_missing_directory_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main.main(["--save-dir", str(tmp_path / "missing"), "saves"])
        assert exc.value.code == 1

    def test_unknown_command(self, save_dir):
        with pytest.raises(SystemExit) as exc:
            main.main(["--save-dir", str(save_dir), "dance"])
        assert exc.value.code == 1

    def test_usage_errors(self, save_dir):
        with pytest.raises(SystemExit):
            main.main(["--save-dir", str(save_dir), "rename", "run"])
