"""
CLI Tests — bfi.main() end to end: source files on disk, exit codes,
diagnostics on stdout.
"""

import argparse
import io
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

import bfi
from bfi import EXIT_FAILURE, EXIT_OK, main, parse_address
from bf_interpreter.channels import ConsoleKeypress


@pytest.fixture
def program(tmp_path):
    """Write a Brainfuck source file and return its path."""
    def _write(source: str, name: str = "prog.b") -> str:
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture(autouse=True)
def no_terminal(monkeypatch):
    """Program input comes from an empty, non-interactive stdin."""
    monkeypatch.setattr(sys, "stdin", io.StringIO(""))


# ─── End-to-end scenarios ─────────────────────

class TestScenarios:

    def test_print_two(self, program, capsys):
        assert main([program("++.")]) == EXIT_OK
        assert capsys.readouterr().out == "\x02"

    def test_echo_input(self, program, capsys, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.StringIO("A"))
        assert main([program(",.")]) == EXIT_OK
        assert capsys.readouterr().out == "A"

    def test_unmatched_bracket(self, program, capsys):
        assert main([program("[")]) == EXIT_FAILURE
        out = capsys.readouterr().out
        assert "error: interpreter exception" in out
        assert "at: instruction 0" in out
        assert "char: [" in out

    def test_clear_loop(self, program, capsys):
        assert main([program("+[-]")]) == EXIT_OK
        assert capsys.readouterr().out == ""

    def test_hello_world(self, program, capsys):
        source = ("++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>."
                  "<-.<.+++.------.--------.>>+.>++.")
        assert main([program(source)]) == EXIT_OK
        assert capsys.readouterr().out == "Hello World!\n"


# ─── Invocation errors ─────────────────────

class TestInvocation:

    def test_no_source(self, capsys):
        assert main([]) == EXIT_FAILURE
        out = capsys.readouterr().out
        assert "usage: bfi <file>" in out
        assert "example:" in out

    def test_missing_file(self, tmp_path, capsys):
        missing = str(tmp_path / "nope.b")
        assert main([missing]) == EXIT_FAILURE
        assert f"error: cannot find {missing}" in capsys.readouterr().out

    def test_undecodable_file(self, tmp_path, capsys):
        path = tmp_path / "bad.b"
        path.write_bytes(b"+\xff\xfe.")
        assert main([str(path)]) == EXIT_FAILURE
        assert "error: cannot read" in capsys.readouterr().out

    def test_alternate_encoding(self, tmp_path, capsys):
        path = tmp_path / "latin.b"
        path.write_bytes(b"+\xe9+.")
        assert main([str(path), "--encoding", "latin-1"]) == EXIT_OK
        assert capsys.readouterr().out == "\x02"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "bfi" in capsys.readouterr().out

    def test_parse_address(self):
        assert parse_address("12") == 12
        assert parse_address("0x10") == 16
        assert parse_address("-3") == -3
        with pytest.raises(argparse.ArgumentTypeError):
            parse_address("twelve")


# ─── Options ─────────────────────

class TestOptions:

    def test_unbounded_prints_low_16_bits(self, program, capsys):
        assert main([program("-.")]) == EXIT_OK
        assert capsys.readouterr().out == "\uffff"

    def test_eof_then_output(self, program, capsys):
        assert main([program(",.")]) == EXIT_OK
        assert capsys.readouterr().out == "\uffff"

    def test_classic_profile_wraps(self, program, capsys):
        assert main([program("-."), "--profile", "classic"]) == EXIT_OK
        assert capsys.readouterr().out == "\xff"

    def test_cell_bits_override(self, program, capsys):
        assert main([program("-."), "--cell-bits", "8"]) == EXIT_OK
        assert capsys.readouterr().out == "\xff"

    def test_cell_bits_zero_means_unbounded(self, program, capsys):
        assert main([program("-."), "--profile", "classic", "--cell-bits", "0"]) == EXIT_OK
        assert capsys.readouterr().out == "\uffff"

    def test_invalid_cell_bits(self, program, capsys):
        assert main([program("+"), "--cell-bits", "-4"]) == EXIT_FAILURE
        assert "error:" in capsys.readouterr().out

    def test_eof_override(self, program, capsys):
        assert main([program("+++,."), "--eof", "unchanged"]) == EXIT_OK
        assert capsys.readouterr().out == "\x03"

    def test_max_steps(self, program, capsys):
        assert main([program("+[]"), "--max-steps", "50"]) == EXIT_FAILURE
        assert "step limit of 50" in capsys.readouterr().out

    def test_trace_printed_on_fault(self, program, capsys):
        assert main([program("+>["), "--trace", "5"]) == EXIT_FAILURE
        out = capsys.readouterr().out
        assert "last 3 instructions:" in out
        assert "2: '['" in out

    def test_breakpoint_output(self, program, capsys):
        assert main([program("+$")]) == EXIT_OK
        out = capsys.readouterr().out
        assert "BREAKPOINT" in out
        assert "Total Cells: 1" in out

    def test_no_debug(self, program, capsys):
        assert main([program("+$#.") , "--no-debug"]) == EXIT_OK
        assert capsys.readouterr().out == "\x01"

    def test_watch_logs_writes(self, program, tmp_path):
        log_file = tmp_path / "bfi.log"
        assert main([program("++"), "--watch", "0", "--log-file", str(log_file)]) == EXIT_OK
        text = log_file.read_text(encoding="utf-8")
        assert "watch: cell 0 0 -> 1" in text
        assert "watch: cell 0 1 -> 2" in text

    def test_ctrl_c_at_breakpoint(self, program, capsys, monkeypatch):
        def interrupt(self):
            raise KeyboardInterrupt
        monkeypatch.setattr(ConsoleKeypress, "wait", interrupt)
        assert main([program("+.$+.")]) == EXIT_FAILURE
        out = capsys.readouterr().out
        assert out.startswith("\x01")
        assert "error: interrupted" in out
