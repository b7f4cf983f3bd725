"""Tests for the JSON turn log."""

import json

import turn_log
from portfolio import Transaction


class TestTurnLog:

    def test_appends_entries(self, tmp_path, game):
        log_file = str(tmp_path / "logs" / "turn_log.json")
        turn_log.log_turn(log_file, game, 1, [], [], verbose=False)
        turn_log.log_turn(log_file, game, 2, [game.stocks[0]],
                          [Transaction.now(2, "BUY", "Rainbow Mining", 1, 50)], verbose=False)

        turns = turn_log.read_log(log_file)
        assert [t["turn"] for t in turns] == [1, 2]
        assert turns[1]["bankrupt"] == ["Rainbow Mining"]
        assert turns[1]["stocks"] == {"Rainbow Mining": 50, "Quantum Foods": 20}
        assert turns[0]["net_worth"] == 1000

    def test_keeps_last_entries(self, tmp_path, game, monkeypatch):
        monkeypatch.setitem(turn_log.LOGGING, "max_entries", 3)
        log_file = str(tmp_path / "turn_log.json")
        for turn in range(1, 6):
            turn_log.log_turn(log_file, game, turn, [], [], verbose=False)

        assert [t["turn"] for t in turn_log.read_log(log_file)] == [3, 4, 5]

    def test_corrupt_log_is_replaced(self, tmp_path, game):
        log_file = tmp_path / "turn_log.json"
        log_file.write_text("not json")
        turn_log.log_turn(str(log_file), game, 1, [], [], verbose=False)

        assert len(json.loads(log_file.read_text())["turns"]) == 1

    def test_verbose_prints(self, tmp_path, game, capsys):
        turn_log.log_turn(str(tmp_path / "turn_log.json"), game, 4, [], [], verbose=True)
        assert "TURN 4" in capsys.readouterr().out

    def test_read_missing_log(self, tmp_path):
        assert turn_log.read_log(str(tmp_path / "missing.json")) == []

    def test_invalid_utf8_log_is_replaced(self, tmp_path, game):
        log_file = tmp_path / "turn_log.json"
        log_file.write_bytes(b"\xff\xfe\x00garbage")

        turn_log.log_turn(str(log_file), game, 1, [], [], verbose=False)

        assert [t["turn"] for t in turn_log.read_log(str(log_file))] == [1]

    def test_read_invalid_utf8_log(self, tmp_path):
        log_file = tmp_path / "turn_log.json"
        log_file.write_bytes(b"\xff\xfe\x00garbage")
        assert turn_log.read_log(str(log_file)) == []

    def test_entries_record_session(self, tmp_path, game):
        log_file = str(tmp_path / "turn_log.json")
        turn_log.log_turn(log_file, game, 1, [], [], verbose=False, session="first")
        turn_log.log_turn(log_file, game, 1, [], [], verbose=False, session="second")

        turns = turn_log.read_log(log_file)
        assert [(t["session"], t["turn"]) for t in turns] == [("first", 1), ("second", 1)]
