#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Full-screen runner (prompt_toolkit) for the testnet bot in main.py

Features:
- Menu navigation: Up/Down/PageUp/PageDown/Home/End, Enter to select
- LOG pane is not focusable (PageUp/PageDown always drive the menu), mouse scroll works
- Log colors follow the entry kind (success, error, warn, debug, wait)
- Start/Stop runs the activity loop as an asyncio task on the UI event loop
- Set Config edits bridge/swap repetitions and saves config.json immediately
"""

from __future__ import annotations
import asyncio
import os
from typing import Any, List, Tuple, Optional, Callable

from prompt_toolkit.application import Application, run_in_terminal
from prompt_toolkit.data_structures import Point
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout, HSplit, VSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.widgets import TextArea, Frame
from prompt_toolkit.styles import Style

from main import Session, LogBuffer, LogEntry, fmt_addr

KIND_CLASS = {
    "success": "class:ok",
    "error": "class:err",
    "warn": "class:warn",
    "debug": "class:debug",
    "wait": "class:wait",
    "info": "class:log",
}

MenuItem = Tuple[str, Callable[[], Any]]


# =========================
# LOG VIEW (not focusable)
# =========================
class LogView:
    """
    Renders the session log buffer, newest line kept in view.
    """
    def __init__(self, logs: LogBuffer, tail: int = 300) -> None:
        self.logs = logs
        self.tail = tail
        self._control = FormattedTextControl(
            self._render,
            focusable=False,
            show_cursor=False,
            get_cursor_position=self._cursor,
        )
        self.window = Frame(
            body=Window(
                content=self._control,
                wrap_lines=True,
                always_hide_cursor=True,
            ),
            title="TRANSACTION LOGS",
            style="class:frame",
        )

    def _lines(self) -> List[LogEntry]:
        return self.logs.entries()[-self.tail:]

    def _cursor(self) -> Point:
        return Point(x=0, y=max(0, len(self._lines()) - 1))

    def _render(self) -> List[Tuple[str, str]]:
        return [(KIND_CLASS.get(e.kind, "class:log"), e.render() + "\n") for e in self._lines()]


# =========================
# STATUS VIEW
# =========================
class StatusView:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.area = TextArea(
            text="",
            read_only=True,
            focusable=False,
            scrollbar=False,
            style="class:stats",
        )
        self.frame = Frame(self.area, title="STATUS", style="class:frame")

    def _status(self) -> str:
        st = self.session.state
        if st.running and st.stop_requested:
            return "Stopping"
        return "Running" if st.running else "Idle"

    def update(self) -> None:
        s = self.session
        lines: List[str] = [
            f"Activity : {self._status()}",
            f"Config   : bridge x{s.config.bridge_repetitions}, swap x{s.config.swap_repetitions}",
            f"Accounts : {len(s.private_keys)}   Proxies: {len(s.proxies)}",
            "",
            "Wallets (balance on network A):",
        ]
        if not s.wallets:
            lines.append("  (none)")
        for i, w in enumerate(s.wallets, start=1):
            lines.append(f"  {i}. {fmt_addr(w['address'])}  {w['balance']:>10}  {w['proxy']}")
        self.area.text = "\n".join(lines)


# =========================
# MENU VIEW
# =========================
class MenuView:
    def __init__(self, title: str, items: List[MenuItem]) -> None:
        self.items = items
        self.index = 0
        self.control = FormattedTextControl(self._render)
        self.window = Frame(
            body=Window(self.control, always_hide_cursor=True, wrap_lines=False),
            title=title,
            style="class:frame",
            width=34,
        )

    def _render(self) -> List[Tuple[str, str]]:
        return [
            ("class:sel" if i == self.index else "class:menu", f"{'>' if i == self.index else ' '} {label}\n")
            for i, (label, _) in enumerate(self.items)
        ]

    def set(self, title: str, items: List[MenuItem]) -> None:
        self.items = items
        self.index = 0
        self.window.title = title

    def move(self, delta: int) -> None:
        if self.items:
            self.index = (self.index + delta) % len(self.items)

    def move_to(self, index: int) -> None:
        if self.items:
            self.index = max(0, min(index, len(self.items) - 1))

    def activate(self) -> Any:
        if not self.items:
            return None
        _, fn = self.items[self.index]
        # coroutine results are scheduled by prompt_toolkit as background tasks
        return fn()


# =========================
# APPLICATION
# =========================
class RunnerApp:
    def __init__(self, session: Optional[Session] = None) -> None:
        self.session = session or Session()

        # Views
        self.log = LogView(self.session.logs)
        self.status = StatusView(self.session)
        self.menu_root: List[MenuItem] = [
            ("Start Activity",  self.start_activity),
            ("Stop Activity",   self.stop_activity),
            ("Set Config",      self.menu_config),
            ("Clear Logs",      self.clear_logs),
            ("Refresh Wallets", self.refresh_wallets),
            ("Exit",            self.exit_app),
        ]
        self.menu = MenuView("Main Menu", self.menu_root)

        body = VSplit(
            [
                self.menu.window,
                HSplit([self.status.frame, self.log.window], padding=1),
            ],
            padding=2,
        )

        kb = KeyBindings()

        @kb.add("up")
        def _(event): self.menu.move(-1)

        @kb.add("down")
        def _(event): self.menu.move(+1)

        @kb.add("pageup")
        def _(event): self.menu.move(-5)

        @kb.add("pagedown")
        def _(event): self.menu.move(+5)

        @kb.add("home")
        def _(event): self.menu.move_to(0)

        @kb.add("end")
        def _(event): self.menu.move_to(len(self.menu.items) - 1)

        @kb.add("enter")
        def _(event): return self.menu.activate()

        @kb.add("q")
        @kb.add("c-c")
        def _(event): self.exit_app()

        self.app = Application(
            layout=Layout(body),
            key_bindings=kb,
            full_screen=True,
            mouse_support=True,
            style=Style.from_dict({
                "frame": "bg:#10121a #cfd8dc",
                "menu": "#cfd8dc",
                "sel": "reverse bold",
                "log": "#cfd8dc",
                "ok": "bold #00e676",
                "err": "bold #ff5252",
                "warn": "bold #ffd740",
                "debug": "#64b5f6",
                "wait": "#ce93d8",
                "stats": "#cfd8dc",
            }),
        )

        self.session.logs.subscribe(self._on_log)
        self.session.bootstrap()
        self.status.update()

    def _on_log(self, entry: Optional[LogEntry]) -> None:
        self.status.update()
        self.app.invalidate()

    # ---------- prompts (run outside the full-screen UI) ----------
    async def _prompt_int(self, label: str, current: int, minv: int, maxv: int) -> int:
        def _ask() -> Optional[str]:
            try:
                return input(f"{label} [{current}]: ").strip()
            except (KeyboardInterrupt, EOFError):
                return None

        while True:
            s = await run_in_terminal(_ask, in_executor=True)
            if not s:
                return current
            if s.isdigit() and minv <= int(s) <= maxv:
                return int(s)
            self.session.log(f"Invalid input. Must be a number {minv}..{maxv}.", "error")

    # ---------- actions ----------
    def start_activity(self) -> None:
        self.session.start()
        self.status.update()

    def stop_activity(self) -> None:
        self.session.stop()
        self.status.update()

    def clear_logs(self) -> None:
        self.session.clear_logs()

    async def refresh_wallets(self) -> None:
        self.session.log("Refreshing wallets...", "info")
        await self.session.refresh_wallets()
        self.status.update()

    def menu_config(self) -> None:
        cfg = self.session.config
        self.menu.set("Set Config", [
            (f"Bridge Repetitions ({cfg.bridge_repetitions})", self.cfg_bridge),
            (f"Swap Repetitions ({cfg.swap_repetitions})",     self.cfg_swap),
            ("Back",                                           self.menu_main),
        ])

    def menu_main(self) -> None:
        self.menu.set("Main Menu", self.menu_root)

    async def cfg_bridge(self) -> None:
        cfg = self.session.config
        n = await self._prompt_int("Bridge repetitions per account", cfg.bridge_repetitions, 1, 1000)
        self.session.set_config(n, cfg.swap_repetitions)
        self.menu_config()

    async def cfg_swap(self) -> None:
        cfg = self.session.config
        n = await self._prompt_int("Swap repetitions per account", cfg.swap_repetitions, 1, 1000)
        self.session.set_config(cfg.bridge_repetitions, n)
        self.menu_config()

    def exit_app(self) -> None:
        self.app.exit()

    # ---------- Run ----------
    def run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        loop.run_until_complete(self.app.run_async())
        # an in-flight RPC thread may still be blocked; config is already on disk
        os._exit(0)


def main() -> None:
    RunnerApp().run()


# =========================
# ENTRY
# =========================
if __name__ == "__main__":
    main()
