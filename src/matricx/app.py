"""matricx - Main Textual application."""

import json
import logging
import sys
from collections.abc import Sequence
from dataclasses import asdict
from datetime import datetime
from queue import Empty, Queue

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from matricx.config import DashboardConfig, configure_logging, parse_config
from matricx.models import RateSample, RateState, Snapshot, TickFailure
from matricx.monitor import MetricSource, SystemMonitor, TickResult, snapshot_once
from matricx.panels import TITLE, header_panel, render_dashboard
from matricx.rates import select_primary_interface, update_rates

logger = logging.getLogger(__name__)


class Panel(Static):
    """A bordered, titled block of dashboard text."""

    DEFAULT_CSS = """
    Panel {
        width: 100%;
        border: solid $primary;
        padding: 0;
    }
    """

    def __init__(self, title: str | None = None, **kwargs) -> None:
        """Initialize Panel with an optional border title."""
        super().__init__("", **kwargs)
        if title:
            self.border_title = title


class MatricxApp(App):
    """Main matricx application."""

    TITLE = TITLE

    CSS = """
    Screen {
        layout: vertical;
    }

    #header {
        height: 1;
        width: 100%;
    }

    #cpu {
        height: 6;
    }

    #memory, #network {
        height: 4;
    }

    #processes {
        height: 1fr;
    }

    #services, #footer {
        height: 3;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: DashboardConfig | None = None,
        source: MetricSource | None = None,
    ) -> None:
        """Initialize the MatricxApp."""
        super().__init__()
        self._config = config if config is not None else DashboardConfig()
        self._update_queue: Queue[TickResult] = Queue()
        self._monitor = SystemMonitor(
            self._update_queue, poll_rate=self._config.interval, source=source
        )
        self._rate_state = RateState()
        self._last_view: tuple[Snapshot, RateSample] | None = None
        self._error: str | None = None

    @property
    def rate_state(self) -> RateState:
        return self._rate_state

    @property
    def error(self) -> str | None:
        return self._error

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Static(header_panel(), id="header")
        yield Panel("CPU", id="cpu")
        yield Panel("Memory", id="memory")
        yield Panel("Network", id="network")
        yield Panel("Processes", id="processes")
        yield Panel("Services", id="services")
        yield Panel(id="footer")

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.1, self._check_for_updates)

    def on_resize(self, event: events.Resize) -> None:
        """Lay the last snapshot out again for the new terminal size."""
        self._render_panels()

    def _check_for_updates(self) -> None:
        """Apply every queued tick result in order, then redraw."""
        received = fresh = False
        while True:
            try:
                result = self._update_queue.get_nowait()
            except Empty:
                break
            self.apply_result(result)
            received = True
            fresh = fresh or isinstance(result, Snapshot)

        if received:
            self._render_header()
        if fresh:
            self._render_panels()

    def apply_result(self, result: TickResult) -> None:
        """Advance the dashboard state by one tick."""
        if isinstance(result, TickFailure):
            self._error = result.message
            return

        primary = select_primary_interface(result.network)
        rates, self._rate_state = update_rates(self._rate_state, primary, result.taken_at)
        self._last_view = (result, rates)
        self._error = None

    def _render_header(self) -> None:
        self.query_one("#header", Static).update(header_panel(self._error))

    def _render_panels(self) -> None:
        if self._last_view is None:
            return
        snapshot, rates = self._last_view
        dashboard = render_dashboard(
            snapshot,
            rates,
            self.size.width,
            self.size.height,
            self._config.style,
            datetime.now(),
        )
        self.query_one("#cpu", Panel).update(dashboard.cpu)
        self.query_one("#memory", Panel).update(dashboard.memory)
        self.query_one("#network", Panel).update(dashboard.network)
        self.query_one("#processes", Panel).update(dashboard.processes)
        self.query_one("#services", Panel).update(dashboard.services)
        self.query_one("#footer", Panel).update(dashboard.footer)

    def on_unmount(self) -> None:
        self._monitor.stop(timeout=0.5)

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop(timeout=0.5)
        self.exit(return_code=0)


def snapshot_json(snapshot: Snapshot) -> str:
    """Serialize a snapshot as a single JSON object."""
    record = asdict(snapshot)
    record.pop("taken_at")
    record["timestamp"] = datetime.now().astimezone().isoformat()
    return json.dumps(record)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for matricx application."""
    config = parse_config(argv)
    configure_logging(config)

    if config.json_output:
        print(snapshot_json(snapshot_once()))
        return 0

    app = MatricxApp(config)
    try:
        app.run()
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        logger.exception("Dashboard failed to start")
        print(f"matricx: cannot start the dashboard: {exc}", file=sys.stderr)
        return 1
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
