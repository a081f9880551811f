"""
Tests for the command-line entry point.
"""

import json

from run_simulation import build_parser, main


class TestArguments:
    """Test option parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.decks == 6
        assert args.simulations == 10000
        assert args.seed is None

    def test_rejects_non_positive_counts(self, capsys):
        try:
            build_parser().parse_args(["-n", "0"])
        except SystemExit as e:
            assert e.code == 2
        else:
            raise AssertionError("expected parser to exit")


class TestMain:
    """Test end-to-end runs and exit codes."""

    def test_successful_run(self, capsys):
        code = main(["-d", "1", "-n", "50", "--seed", "1", "--no-progress"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Simulated games: 50" in out
        assert "Player wins:" in out

    def test_missing_strategy_entry_exits_non_zero(self, tmp_path, capsys):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({}))

        code = main(["-n", "200", "--seed", "1", "--no-progress", "--strategy", str(path)])
        captured = capsys.readouterr()

        assert code == 1
        assert "strategy table has no entry for" in captured.err
        assert "Player wins:" not in captured.out

    def test_missing_strategy_file(self, tmp_path, capsys):
        code = main(["--no-progress", "--strategy", str(tmp_path / "nope.json")])
        assert code == 1
        assert "Error:" in capsys.readouterr().err
