#!/usr/bin/env python3
"""Minimal curses process monitor, used by ``top`` when no top/htop is installed."""
from __future__ import annotations

import time
from typing import List, Optional

from services.system_state import ProcessRow, get_state, process_rows

SORT_KEYS = {
    "cpu": lambda r: r.cpu_percent,
    "mem": lambda r: r.memory_percent,
    "pid": lambda r: -r.pid,
}


def format_rows(rows: List[ProcessRow], sort_by: str = "cpu", filter_text: Optional[str] = None) -> List[str]:
    if filter_text:
        ft = filter_text.lower()
        rows = [r for r in rows if ft in r.name.lower()]
    rows = sorted(rows, key=SORT_KEYS[sort_by], reverse=True)
    return [f"{r.pid:>7}  {r.cpu_percent:>5.1f}  {r.memory_percent:>5.1f}  {r.name}" for r in rows]


def _render(stdscr) -> None:
    import curses

    curses.curs_set(0)
    stdscr.nodelay(True)  # non-blocking for auto-refresh
    stdscr.keypad(True)

    offset = 0
    refresh_ms = 1000
    last_draw = 0.0
    sort_by = "cpu"
    filter_text: Optional[str] = None

    def draw() -> None:
        stdscr.erase()
        h, w = stdscr.getmaxyx()
        title = "mintterm top  (q: quit, c/m/p: sort cpu/mem/pid, f: filter, ↑/↓: scroll)"
        stdscr.addnstr(0, 0, title.ljust(w), w, curses.A_REVERSE)
        state = get_state()
        stdscr.addnstr(
            1, 0,
            f"cpu {state['cpu_percent']:.1f}%  mem {state['memory_percent']:.1f}%  "
            f"procs {state['running_processes']}  up {state['uptime']}s",
            w,
        )
        stdscr.addnstr(2, 0, f"{'PID':>7}  {'%CPU':>5}  {'%MEM':>5}  COMMAND", w)
        stdscr.hline(3, 0, ord('-'), w)

        rows = format_rows(process_rows(), sort_by, filter_text)
        start = max(0, min(max(0, len(rows) - (h - 5)), offset))
        for i, row in enumerate(rows[start:start + (h - 5)], 4):
            stdscr.addnstr(i, 0, row, w)
        stdscr.hline(h - 2, 0, ord('-'), w)
        stdscr.addnstr(h - 1, 0, f"Sort: {sort_by}   Filter: {filter_text or '(none)'}", w)
        stdscr.refresh()

    draw()
    while True:
        now = time.time()
        if (now - last_draw) >= (refresh_ms / 1000.0):
            last_draw = now
            draw()

        ch = stdscr.getch()
        if ch == -1:
            time.sleep(0.05)
            continue
        if ch in (ord('q'), ord('Q')):
            break
        elif ch in (ord('c'), ord('m'), ord('p')):
            sort_by = {ord('c'): "cpu", ord('m'): "mem", ord('p'): "pid"}[ch]
            draw()
        elif ch in (ord('f'), ord('F')):
            curses.echo()
            h, w = stdscr.getmaxyx()
            label = "Filter text (empty to clear): "
            stdscr.addnstr(h - 1, 0, label.ljust(w), w)
            stdscr.clrtoeol()
            s = stdscr.getstr(h - 1, len(label), 200)
            filter_text = (s.decode("utf-8", errors="ignore").strip() or None) if s else None
            curses.noecho()
            draw()
        elif ch == curses.KEY_UP:
            offset = max(0, offset - 1)
            draw()
        elif ch == curses.KEY_DOWN:
            offset = offset + 1
            draw()
        elif ch == curses.KEY_NPAGE:
            offset = offset + 10
            draw()
        elif ch == curses.KEY_PPAGE:
            offset = max(0, offset - 10)
            draw()


def run_dashboard() -> bool:
    """Run the monitor until 'q'. Returns False when curses is unavailable."""
    try:
        import curses
    except ImportError:
        return False
    curses.wrapper(_render)
    return True
