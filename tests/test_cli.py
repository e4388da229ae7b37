"""
Tests for the command line entry point and file loading.
"""

import pytest

import cli
from automaton import Automaton, DFA, MissingSection
from io_utils import load_from_file


class TestLoadFromFile:
    def test_loads(self, automaton_file):
        nfa = load_from_file(str(automaton_file))
        assert isinstance(nfa, Automaton)
        assert nfa.resolve(["a"]) == frozenset({"q1"})

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_from_file(str(tmp_path / "nope.nfa"))

    def test_parse_error_propagates(self, tmp_path):
        path = tmp_path / "broken.nfa"
        path.write_text("q0,q1\na\n", encoding="utf-8")
        with pytest.raises(MissingSection):
            load_from_file(str(path))


class TestMain:
    """Startup behaviour of ``cli.main``."""

    def test_missing_argument(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main([])
        assert excinfo.value.code == 2

    def test_no_tui_prints_automaton(self, automaton_file, capsys):
        assert cli.main([str(automaton_file), "--no-tui"]) == 0
        out = capsys.readouterr().out
        assert "Automata {" in out
        assert "Initial State: q0," in out

    def test_unreadable_file(self, tmp_path, capsys):
        assert cli.main([str(tmp_path / "missing.nfa")]) == 1
        err = capsys.readouterr().err
        assert err.startswith("Error: Couldn't read file")

    def test_file_not_utf8(self, tmp_path, capsys, monkeypatch):
        path = tmp_path / "latin1.nfa"
        path.write_bytes(b"q0,\xff\na\nq0\nq0\n")
        started = []
        monkeypatch.setattr(cli, "show_tui", started.append)

        assert cli.main([str(path), "--no-tui"]) == 1
        assert started == []
        err = capsys.readouterr().err
        assert err.startswith("Error: Couldn't read file")
        assert "utf-8" in err

    def test_parse_error_stops_startup(self, tmp_path, capsys, monkeypatch):
        path = tmp_path / "bad.nfa"
        path.write_text("q0\na\nq0\nq0\nq0,b=>q0\n", encoding="utf-8")
        started = []
        monkeypatch.setattr(cli, "show_tui", started.append)

        assert cli.main([str(path)]) == 1
        assert started == []
        err = capsys.readouterr().err
        assert "Symbol 'b'" in err

    def test_starts_loop_with_nfa(self, automaton_file, capsys, monkeypatch):
        started = []
        monkeypatch.setattr(cli, "show_tui", started.append)

        assert cli.main([str(automaton_file)]) == 0
        assert len(started) == 1
        assert isinstance(started[0], Automaton)
        assert "Goodbye!" in capsys.readouterr().out

    def test_dfa_flag(self, automaton_file, capsys, monkeypatch):
        started = []
        monkeypatch.setattr(cli, "show_tui", started.append)

        assert cli.main([str(automaton_file), "--dfa"]) == 0
        assert isinstance(started[0], DFA)
        assert "Initial State: {q0}," in capsys.readouterr().out

    def test_graph_flag(self, automaton_file, tmp_path, capsys, monkeypatch):
        rendered = []

        def fake_render(self, filename, view=False):
            rendered.append((filename, view))
            return filename + ".png"

        monkeypatch.setattr(Automaton, "render_graph", fake_render)

        target = str(tmp_path / "out")
        assert cli.main([str(automaton_file), "--graph", target, "--no-tui"]) == 0
        assert rendered == [(target, False)]
        assert f"Graph written to {target}.png" in capsys.readouterr().out
