"""Main application entry point for voicememo."""

import sys
import time
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from .config import VoiceMemoConfig
from .services.recording_session import RecordingSession

logger = logging.getLogger(__name__)


def setup_logging(config: VoiceMemoConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'logs/voicememo.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("voicememo starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def run_auto(session: RecordingSession, duration: int, transcribe: bool) -> int:
    """Record for a fixed duration, save the recording and optionally transcribe it."""
    result = session.start()
    if not result["success"]:
        print(f"❌ {result['error']}")
        return 1

    print(f"🎙️  Recording for {duration}s...")
    try:
        time.sleep(duration)
    finally:
        result = session.stop()

    if not result["success"]:
        print(f"❌ {result['error']}")
        return 1

    saved = session.download()
    if saved["success"]:
        print(f"💾 Saved to {saved['path']}")

    if transcribe:
        status = asyncio.run(session.transcribe())
        if status.error:
            print(f"❌ {status.error}")
            return 1
        print(f"📝 {status.text or '(empty result)'}")
    return 0


def main(argv: Optional[list] = None) -> None:
    """Main entry point for voicememo."""
    parser = argparse.ArgumentParser(
        description="voicememo - record voice memos as WAV and transcribe them",
        epilog="Interactive commands: 1=Start 2=Stop 3=Play 4=Download 5=Transcribe q=Quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: logging.level from config)"
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--serve",
        action="store_true",
        help="Run the transcription server instead of the recorder"
    )
    mode.add_argument(
        "--auto",
        action="store_true",
        help="Record for --duration seconds, save the recording and exit"
    )

    parser.add_argument(
        "--duration",
        type=int,
        default=10,
        help="Duration in seconds for auto mode recording (default: 10)"
    )

    parser.add_argument(
        "--transcribe",
        action="store_true",
        help="In auto mode, send the recording to the transcription endpoint"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="voicememo v0.1.0"
    )

    args = parser.parse_args(argv)

    try:
        config = VoiceMemoConfig(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ {e}")
        sys.exit(1)
    setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))

    if args.serve:
        from .server.app import run_server
        try:
            run_server(config)
        except (FileNotFoundError, ValueError) as e:
            print(f"❌ {e}")
            logger.error(f"Server error: {e}")
            sys.exit(1)
        return

    session = RecordingSession(config)
    try:
        if args.auto:
            sys.exit(run_auto(session, args.duration, args.transcribe))
        else:
            from .ui.recorder_screen import RecorderScreen
            RecorderScreen(session).run()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    finally:
        session.close()


if __name__ == "__main__":
    main()
