"""Interactive console recorder using basic input/output."""

import asyncio
import logging
import threading
from typing import Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.events import SESSION_STATE_TOPIC, TRANSCRIPTION_STATUS_TOPIC, SessionEvent, TranscriptionEvent
from ..models.session import SessionState
from ..services.recording_session import RecordingSession

logger = logging.getLogger(__name__)

_STATE_STYLES = {
    SessionState.IDLE: ("⏹️  IDLE", "bold white"),
    SessionState.RECORDING: ("🔴 RECORDING", "bold red"),
    SessionState.FINISHED: ("✅ FINISHED", "bold green"),
    SessionState.ERROR: ("⚠️  ERROR", "bold yellow"),
}

COMMANDS = "1=Start  2=Stop  3=Play  4=Download  5=Transcribe  q=Quit"


class RecorderScreen:
    """Reads single commands from the terminal and drives a RecordingSession."""

    def __init__(self, session: RecordingSession, console: Optional[Console] = None):
        self.session = session
        self.console = console or Console()
        self.running = False
        self.transcription_thread: Optional[threading.Thread] = None

        pub.subscribe(self._on_session_event, SESSION_STATE_TOPIC)
        pub.subscribe(self._on_transcription_event, TRANSCRIPTION_STATUS_TOPIC)

    def show_status(self) -> None:
        """Show current status."""
        label, style = _STATE_STYLES[self.session.state]

        table = Table.grid(padding=(0, 2))
        table.add_row("State", f"[{style}]{label}[/]")
        table.add_row("Status", self.session.message)

        blob = self.session.current_blob
        if blob is not None:
            table.add_row("Latest", f"{blob.duration_seconds:.1f}s @ {blob.sample_rate}Hz, {len(blob.data)} bytes")

        transcription = self.session.transcription
        if transcription.is_busy:
            table.add_row("Transcript", "[blue]Transcribing...[/]")
        elif transcription.error:
            table.add_row("Transcript", f"[red]{transcription.error}[/]")
        elif transcription.text is not None:
            table.add_row("Transcript", transcription.text or "(empty result)")

        self.console.print(Panel(table, title="🎙️  voicememo", subtitle=COMMANDS))

    def handle_command(self, command: str) -> bool:
        """Run one command; returns False when the user asked to quit."""
        command = command.strip().lower()
        if command == "q":
            return False

        if command == "1":
            self._report(self.session.start())
        elif command == "2":
            self._report(self.session.stop())
        elif command == "3":
            self._report(self.session.play())
        elif command == "4":
            result = self.session.download()
            if result["success"]:
                self.console.print(f"💾 Saved to {result['path']}", style="green")
            else:
                self._report(result)
        elif command == "5":
            self.start_transcription()
        elif command:
            self.console.print(f"Unknown command: {command!r}", style="yellow")
        return True

    def start_transcription(self) -> None:
        """Run the transcription on a background thread so recording stays responsive."""
        if self.transcription_thread is not None and self.transcription_thread.is_alive():
            self.console.print("Transcription already in progress", style="yellow")
            return
        self.transcription_thread = threading.Thread(
            target=lambda: asyncio.run(self.session.transcribe()),
            name="TranscriptionThread",
            daemon=True,
        )
        self.transcription_thread.start()

    def run(self) -> None:
        """Command loop until the user quits or closes input."""
        self.running = True
        self.show_status()
        try:
            while self.running:
                try:
                    command = self.console.input("[bold]> [/]")
                except EOFError:
                    break
                if not self.handle_command(command):
                    break
                self.show_status()
        finally:
            self.running = False
            self.session.close()

    def _report(self, result: dict) -> None:
        if not result.get("success"):
            self.console.print(f"❌ {result.get('error')}", style="red")

    def _on_session_event(self, event: SessionEvent) -> None:
        logger.info(f"Session {event.previous_state} -> {event.event_type}: {event.message}")

    def _on_transcription_event(self, event: TranscriptionEvent) -> None:
        if not self.running:
            return
        if event.event_type == "completed":
            self.console.print(f"📝 {event.text or '(empty result)'}", style="cyan")
        elif event.event_type == "failed":
            self.console.print(f"❌ {event.error}", style="red")
