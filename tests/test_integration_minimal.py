#!/usr/bin/env python3
import io
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Config
from mintterm import build_dispatcher, repl


def minimal_session():
    return "\n".join([
        "echo hello",
        "alias hi='echo hi there'",
        "hi",
        "history",
        "exit",
        "echo never reached",
    ]) + "\n"


def _run(script):
    config = Config.from_dict({"prompt": {"banner": False, "color": False}})
    out, err = io.StringIO(), io.StringIO()
    dispatcher = build_dispatcher(config, out=out, err=err)
    rc = repl(dispatcher, config, stdin=io.StringIO(script), out=out)
    return rc, out.getvalue(), err.getvalue(), dispatcher


def test_repl_runs_a_session(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    rc, out, err, dispatcher = _run(minimal_session())
    assert rc == 0
    assert err == ""
    assert "hello\n" in out
    assert "hi there\n" in out
    assert "3  echo hi there\n" in out
    assert "never reached" not in out
    assert out.endswith("Bye\n")
    assert list(dispatcher.session.history)[-1] == "exit"


def test_repl_ends_cleanly_on_eof(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    rc, out, _, dispatcher = _run("\n   \necho last\n")
    assert rc == 0
    assert "last\n" in out
    assert out.endswith("\nBye\n")
    assert list(dispatcher.session.history) == ["echo last"]


class InterruptedOnce:
    """Dispatcher stand-in whose first line is interrupted outside any handler."""

    def __init__(self, inner):
        self.inner = inner
        self.interrupted = False

    def execute(self, line):
        if not self.interrupted:
            self.interrupted = True
            raise KeyboardInterrupt
        return self.inner.execute(line)


def test_interrupt_during_execute_returns_to_prompt(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = Config.from_dict({"prompt": {"banner": False, "color": False}})
    out = io.StringIO()
    dispatcher = InterruptedOnce(build_dispatcher(config, out=out, err=io.StringIO()))
    rc = repl(dispatcher, config, stdin=io.StringIO("echo lost\necho kept\nexit\n"), out=out)
    assert rc == 0
    assert "lost" not in out.getvalue()
    assert "kept\n" in out.getvalue()
    assert out.getvalue().endswith("Bye\n")
