from typing import Literal, Optional, Sequence

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table

from mtp_tickler.algorithm.decoder import recovery_stats
from mtp_tickler.models.keystream import Keystream
from mtp_tickler.state_queue import LatestStateQueue
from mtp_tickler.state_snapshot import RecoveryState


COLORS = {
    "keystream": {
        "unknown": "dark_red",
        "resolved": "turquoise2",
    },
    "plaintext": {
        "unknown": "dim",
        "resolved": "spring_green2",
    },
}

ROW_WIDTH = 16

type ByteState = Literal["unknown", "resolved"]


def keystream_row_to_string(row: Sequence[Optional[int]]) -> str:
    """Convert a row of keystream positions to a colored hex string."""
    hex_bytes = []
    for value in row:
        state: ByteState = "unknown" if value is None else "resolved"
        text = "??" if value is None else f"{value:02x}"
        color = COLORS["keystream"][state]
        hex_bytes.append(f"[{color}]{text}[/{color}]")
    return " ".join(hex_bytes)


def plaintext_to_string(plaintext: str, keystream: Keystream) -> str:
    """Color recovered characters; unknown positions stay dim. Non-printables render as '.'."""
    parts = []
    for position, ch in enumerate(plaintext):
        if keystream.is_resolved(position):
            color = COLORS["plaintext"]["resolved"]
            ch = ch if ch.isprintable() else "."
        else:
            color = COLORS["plaintext"]["unknown"]
        parts.append(f"[{color}]{escape(ch)}[/{color}]")
    return "".join(parts)


def render(state: Optional[RecoveryState]):
    """Render the recovery state snapshot."""
    if state is None:
        return Panel("Waiting for first update…", title="Many-Time Pad", border_style="dim")

    status = "done" if state.complete else f"Triple {state.triple_index + 1} / {state.triple_count}  {state.triple}"
    ui_table = Table(title=f"{status}  |  Known {state.known} / {state.total} ({state.completion_percent:.0f}%)  |  v{state.state_version}")
    ui_table.add_column("Offset", justify="right")
    ui_table.add_column("Keystream")

    for offset in range(0, len(state.keystream), ROW_WIDTH):
        row = state.keystream[offset:offset + ROW_WIDTH]
        ui_table.add_row(f"{offset:04x}", keystream_row_to_string(row))

    bar = ProgressBar(total=max(state.total, 1), completed=state.known)
    return Group(ui_table, bar)


def render_result(
    plaintexts: Sequence[str],
    keystream: Keystream,
    *,
    labels: Optional[Sequence[str]] = None,
) -> Table:
    """Render decoded messages with the keystream completeness in the title."""
    stats = recovery_stats(keystream)
    table = Table(title=f"Keystream known: {stats}  ({stats.ratio:.0%})")
    table.add_column("Message", justify="right")
    table.add_column("Plaintext")
    for index, plaintext in enumerate(plaintexts):
        label = labels[index] if labels else str(index)
        table.add_row(label, plaintext_to_string(plaintext, keystream))
    return table


def ui_loop(state_queue: LatestStateQueue[RecoveryState], console: Optional[Console] = None) -> None:
    """Redraw the live view until the queue is closed."""
    with Live(render(None), console=console, refresh_per_second=30, screen=False) as live:
        for state in state_queue:
            live.update(render(state))
