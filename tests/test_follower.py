#!/usr/bin/env python3
"""Tests for cancellable long-running commands: the ``tail -f`` follower and streamed host processes."""
import io
import os
import sys
import threading
import time
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from commands import build_registry
from config import Config
from runtime.dispatch import Dispatcher
from runtime.follower import CATCH_UP, FOLLOW, STOPPED, FileFollower
from runtime.session import SessionState
from utils import runner

POLL = 0.02


def _wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def _append(path, text):
    with open(path, "a", encoding="utf-8") as f:
        f.write(text)


class Follow:
    def __init__(self, path, **kwargs):
        self.lines = []
        self.cancel = threading.Event()
        self.follower = FileFollower(
            str(path), self.lines.append, poll_interval=POLL, cancel=self.cancel, **kwargs
        )
        self.thread = threading.Thread(target=self.follower.run, daemon=True)

    def __enter__(self):
        self.thread.start()
        return self

    def __exit__(self, *exc):
        self.cancel.set()
        self.thread.join(timeout=2)


class TestFileFollower:
    def test_catch_up_replays_existing_lines_in_order(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("A\nB\n", encoding="utf-8")
        with Follow(log) as f:
            assert _wait_for(lambda: len(f.lines) == 2)
            assert f.lines == ["A", "B"]

    def test_appended_line_is_emitted_once(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("A\nB\n", encoding="utf-8")
        with Follow(log) as f:
            assert _wait_for(lambda: f.follower.state == FOLLOW)
            _append(log, "C\n")
            assert _wait_for(lambda: len(f.lines) == 3)
            time.sleep(POLL * 5)
            assert f.lines == ["A", "B", "C"]

    def test_many_appends_keep_order_without_gaps(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("", encoding="utf-8")
        expected = [f"line {i}" for i in range(200)]
        with Follow(log) as f:
            assert _wait_for(lambda: f.follower.state == FOLLOW)
            for i in range(0, 200, 20):
                _append(log, "".join(s + "\n" for s in expected[i:i + 20]))
            assert _wait_for(lambda: len(f.lines) >= 200)
            time.sleep(POLL * 3)
            assert f.lines == expected

    def test_replay_is_limited_to_trailing_bytes(self, tmp_path):
        log = tmp_path / "big.log"
        log.write_text("".join(f"line-{i:03d}\n" for i in range(100)), encoding="utf-8")
        # every line is 9 bytes, so 90 bytes is exactly the last ten lines
        with Follow(log, replay_bytes=90) as f:
            assert _wait_for(lambda: f.follower.state == FOLLOW)
            assert f.lines == [f"line-{i:03d}" for i in range(90, 100)]

    def test_partial_line_is_held_until_complete(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("A\npar", encoding="utf-8")
        with Follow(log) as f:
            assert _wait_for(lambda: f.follower.state == FOLLOW)
            time.sleep(POLL * 3)
            assert f.lines == ["A"]
            _append(log, "tial\n")
            assert _wait_for(lambda: len(f.lines) == 2)
            assert f.lines == ["A", "partial"]

    def test_cancel_stops_the_loop(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("A\n", encoding="utf-8")
        f = Follow(log)
        f.thread.start()
        assert _wait_for(lambda: f.follower.state == FOLLOW)
        f.follower.stop()
        f.thread.join(timeout=2)
        assert not f.thread.is_alive()
        assert f.follower.state == STOPPED

    def test_missing_file_raises(self, tmp_path):
        follower = FileFollower(str(tmp_path / "nope.log"), lambda line: None)
        with pytest.raises(FileNotFoundError):
            follower.run()
        assert follower.state == STOPPED

    def test_states(self):
        assert (CATCH_UP, FOLLOW, STOPPED) == ("catch-up", "follow", "stopped")


class TestTailFollowCommand:
    def test_dispatch_runs_follower_until_cancelled(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_text("A\nB\n", encoding="utf-8")
        out, err = io.StringIO(), io.StringIO()
        config = Config.from_dict({"follow": {"poll_interval_ms": 20}})
        dispatcher = Dispatcher(SessionState(), build_registry(), config, out=out, err=err)

        t = threading.Thread(target=dispatcher.execute, args=(f'tail -f "{log}"',), daemon=True)
        t.start()
        assert _wait_for(lambda: out.getvalue() == "A\nB\n")
        _append(log, "C\n")
        assert _wait_for(lambda: out.getvalue() == "A\nB\nC\n")
        dispatcher.cancel()
        t.join(timeout=2)
        assert not t.is_alive()
        assert err.getvalue() == ""
        assert list(dispatcher.session.history) == [f'tail -f "{log}"']

    def test_unreadable_file_reports_io_error(self, tmp_path):
        out, err = io.StringIO(), io.StringIO()
        dispatcher = Dispatcher(SessionState(), build_registry(), Config.from_dict({}), out=out, err=err)
        assert dispatcher.execute(f"tail -f {tmp_path / 'missing.log'}") is True
        assert err.getvalue().startswith("tail: No such file or directory")


@pytest.mark.skipif(os.name == "nt", reason="uses sleep from the host shell")
class TestExternalCommandCancel:
    def test_silent_child_is_terminated_on_cancel(self):
        out, err = io.StringIO(), io.StringIO()
        dispatcher = Dispatcher(SessionState(), build_registry(), Config.from_dict({}), out=out, err=err)

        t = threading.Thread(target=dispatcher.execute, args=("sleep 5",), daemon=True)
        started = time.monotonic()
        t.start()
        time.sleep(0.3)
        dispatcher.cancel()
        t.join(timeout=1.5)
        assert not t.is_alive()
        assert time.monotonic() - started < 3
        assert list(dispatcher.session.history) == ["sleep 5"]

    def test_cancel_stops_streamed_output_and_returns_130(self):
        chunks = []
        cancel = threading.Event()
        result = {}

        def run():
            result["rc"] = runner.stream_cmd("echo first; sleep 5; echo second", chunks.append, cancel=cancel)

        t = threading.Thread(target=run, daemon=True)
        t.start()
        assert _wait_for(lambda: chunks == ["first\n"])
        cancel.set()
        t.join(timeout=1.5)
        assert not t.is_alive()
        assert result["rc"] == 130
        assert chunks == ["first\n"]
