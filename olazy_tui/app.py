"""Terminal dashboard for the models of a local Ollama daemon."""

from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone

from rich.console import Console
from rich.layout import Layout
from rich.live import Live

from olazy_tui.collectors.ollama import OllamaClient
from olazy_tui.config import Settings, resolve_settings
from olazy_tui.controller import DashboardController
from olazy_tui.keys import KeyBindings, QuitRequested, TerminalInput
from olazy_tui.layout import compute_layout
from olazy_tui.panels.installed import render as render_installed
from olazy_tui.panels.running import render as render_running
from olazy_tui.panels.status import render as render_status

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
POLL_SECONDS = 0.05


def _panel_status(failed: bool) -> str:
    return "error" if failed else "ok"


def _render_core(controller: DashboardController, width: int, height: int) -> Layout:
    plan = compute_layout(width, height)
    state = controller.state

    body = Layout(name="body", size=plan.body_height)
    body.split_row(
        Layout(
            render_installed(controller.render_installed(), _panel_status(state.installed_failed)),
            name="installed",
            size=plan.split_x,
        ),
        Layout(
            render_running(controller.render_running(), _panel_status(state.running_failed)),
            name="running",
        ),
    )
    if not plan.show_status:
        return body

    layout = Layout()
    layout.split_column(
        body,
        Layout(render_status(controller.render_status()), name="status", size=plan.status_height),
    )
    return layout


def _json_output(settings: Settings, controller: DashboardController) -> str:
    state = controller.state
    payload = {
        "base_url": settings.base_url,
        "collected_at": datetime.now(timezone.utc).isoformat(),
        "installed": [m.to_dict() for m in state.installed],
        "running": [m.to_dict() for m in state.running],
        "installed_ok": not state.installed_failed,
        "running_ok": not state.running_failed,
        "status": state.status.lines(),
    }
    return json.dumps(payload, indent=2)


def _configure_logging(settings: Settings) -> None:
    kwargs = {"level": settings.log_level, "format": LOG_FORMAT}
    if settings.log_file:
        kwargs["filename"] = settings.log_file
    logging.basicConfig(**kwargs)


def _event_loop(controller: DashboardController, bindings: KeyBindings, terminal, live, console: Console) -> None:
    """Poll keys, apply handed-off updates and redraw until a handler quits."""
    size = None
    while True:
        key = terminal.poll_key(POLL_SECONDS)
        if key:
            bindings.dispatch(key)
        controller.updates.drain()

        dirty = controller.take_dirty()
        current = console.size
        if dirty or current != size:
            size = current
            live.update(_render_core(controller, current.width, current.height), refresh=True)


def _run_live(controller: DashboardController, console: Console, terminal: TerminalInput | None = None) -> int:
    bindings = KeyBindings()
    try:
        controller.bind_keys(bindings)
    except ValueError as exc:
        logger.critical("keybindings: %s", exc)
        controller.close()
        return 1

    terminal = terminal or TerminalInput()
    try:
        if not console.is_terminal:
            raise RuntimeError("stdout is not a terminal")
        terminal.open()
    except RuntimeError as exc:
        logger.critical("failed to init terminal: %s", exc)
        controller.close()
        return 1

    try:
        with Live(console=console, screen=True, auto_refresh=False) as live:
            controller.refresh()
            _event_loop(controller, bindings, terminal, live, console)
    except (QuitRequested, KeyboardInterrupt):
        pass
    except Exception as exc:
        logger.critical("main loop error: %s", exc, exc_info=True)
        return 1
    finally:
        terminal.close()
        controller.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Terminal dashboard for local Ollama models")
    parser.add_argument("--host", help="Ollama base URL (default: $OLLAMA_HOST or http://localhost:11434)")
    parser.add_argument("--timeout", help="Refresh deadline in seconds, 0 disables it (default: 5)")
    parser.add_argument("--once", action="store_true", help="Print one snapshot and exit")
    parser.add_argument("--json", action="store_true", help="Emit JSON payload")
    parser.add_argument("--log-file", help="Write logs to this file instead of stderr")
    parser.add_argument("--log-level", help="Logging level (default: WARNING)")
    args = parser.parse_args(argv)

    try:
        settings = resolve_settings(args.host, args.timeout, args.log_file, args.log_level)
    except ValueError as exc:
        parser.error(str(exc))

    _configure_logging(settings)
    logger.info("using backend %s", settings.base_url)

    controller = DashboardController(OllamaClient(settings.base_url), timeout=settings.timeout)
    console = Console()

    if args.json or args.once:
        try:
            controller.refresh()
            controller.wait_for_refresh()
            if args.json:
                print(_json_output(settings, controller))
            else:
                console.print(_render_core(controller, console.size.width, console.size.height))
        finally:
            controller.close()
        return 0

    return _run_live(controller, console)


if __name__ == "__main__":
    raise SystemExit(main())
