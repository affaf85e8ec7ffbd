"""Main entry point for the Pitch Coach CLI."""

import argparse
import sys
from typing import Any, Dict, List, Optional

from ..core.config import ConfigManager, exercise_from_dict, session_config_from_dict
from ..errors import AudioDeviceError, PitchCoachError
from ..logger import get_logger
from ..logging_config import setup_logging
from ..note_types import NAMING_SYSTEMS
from ..session import PracticeSession

logger = get_logger(__name__)


def _common_parser() -> argparse.ArgumentParser:
    """Options shared by the commands that run a session."""
    parser = argparse.ArgumentParser(add_help=False)

    # Session settings
    parser.add_argument("--target", type=str, default=None, help="Target note, e.g. Sol4 or G4")
    parser.add_argument(
        "--tolerance", type=float, default=None, help="Tolerance unit in cents (5-50)"
    )
    parser.add_argument("--min-note", type=str, default=None, help="Lowest visible note")
    parser.add_argument("--max-note", type=str, default=None, help="Highest visible note")
    parser.add_argument(
        "--window", type=float, default=None, help="Seconds of pitch history to keep"
    )
    parser.add_argument(
        "--naming",
        type=str,
        default=None,
        choices=sorted(NAMING_SYSTEMS),
        help="Note naming system",
    )

    # Audio settings
    parser.add_argument("--device", type=int, default=None, help="Audio input device ID")
    parser.add_argument(
        "--sample-rate", type=int, default=None, help="Audio sample rate in Hz"
    )
    parser.add_argument(
        "--wav", type=str, default=None, help="Read audio from a sound file instead of a device"
    )
    parser.add_argument("--loop", action="store_true", help="Loop the sound file")

    # Misc
    parser.add_argument(
        "--config-dir", type=str, default=None, help="Directory holding the JSON settings"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pitch Coach - real-time singing feedback")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    common = _common_parser()

    subparsers.add_parser("gui", parents=[common], help="Open the scrolling pitch graph")

    monitor_parser = subparsers.add_parser(
        "monitor", parents=[common], help="Print pitch feedback in the terminal"
    )
    monitor_parser.add_argument(
        "--duration", type=float, default=10.0, help="Monitor duration in seconds"
    )

    devices_parser = subparsers.add_parser("devices", help="List audio input devices")
    devices_parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser


def session_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Settings given on the command line, keyed like the 'session' config section."""
    overrides = {
        "tolerance_cents": args.tolerance,
        "min_note": args.min_note,
        "max_note": args.max_note,
        "window_seconds": args.window,
        "naming": args.naming,
    }
    return {key: value for key, value in overrides.items() if value is not None}


def build_session(args: argparse.Namespace, config_manager: ConfigManager) -> PracticeSession:
    """Create an idle practice session from saved settings and command-line overrides.

    Raises:
        InvalidNoteError: If a note is malformed or the target is outside the selectable range
        InvalidToleranceError: If the tolerance is not a positive number
    """
    section = config_manager.get_config("session")
    section.update(session_overrides(args))

    exercise = exercise_from_dict(section)
    config = session_config_from_dict(section, target=args.target)
    return PracticeSession(config=config, exercise=exercise)


def build_pitch_source(args: argparse.Namespace, audio_config: Dict[str, Any]):
    """Create the pitch source for a sound file or a live input device.

    Raises:
        AudioDeviceError: If the file or device cannot be opened
    """
    # Audio modules are imported here so that parsing and tests never need PortAudio
    from ..audio.pitch_estimator import AubioPitchEstimator
    from ..audio.pitch_source import PitchGate, PitchSource

    frame_size = audio_config["frame_size"]
    if args.wav:
        from ..audio.wav_input import WavFileInput

        audio_input = WavFileInput(args.wav, frame_size=frame_size, loop=args.loop)
    else:
        from ..audio.audio_input import SoundDeviceInput

        audio_input = SoundDeviceInput(
            device_id=args.device,
            sample_rate=args.sample_rate or audio_config["sample_rate"],
            frame_size=frame_size,
            channels=audio_config["channels"],
        )

    estimator = AubioPitchEstimator(
        sample_rate=audio_input.sample_rate,
        frame_size=frame_size,
        method=audio_config["method"],
    )
    gate = PitchGate(
        min_clarity=audio_config["min_clarity"],
        min_frequency=audio_config["min_frequency"],
        max_frequency=audio_config["max_frequency"],
    )
    logger.info(f"Pitch source ready at {audio_input.sample_rate}Hz")
    return PitchSource(audio_input, estimator=estimator, gate=gate)


def list_devices() -> int:
    from ..audio.audio_input import list_input_devices

    devices = list_input_devices()
    if not devices:
        print("No audio input devices found")
        return 1

    print("Available audio input devices:")
    print("-" * 70)
    for device in devices:
        print(f"Device {device['id']}: {device['name']}")
        print(f"  Max input channels: {device['channels']}")
        print(f"  Default sample rate: {device['default_samplerate']} Hz")
        rates = ", ".join(str(rate) for rate in device["supported_rates"]) or "none"
        print(f"  Supported rates: {rates}")
    return 0


def run_command(args: argparse.Namespace) -> int:
    config_manager = ConfigManager(args.config_dir)
    session = build_session(args, config_manager)
    pitch_source = build_pitch_source(args, config_manager.get_config("audio"))

    if args.command == "gui":
        from ..ui.pitch_graph import PitchGraphUI

        PitchGraphUI(session, pitch_source).run()
    else:
        from .monitor import run_monitor

        run_monitor(session, pitch_source, duration=args.duration)
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 1

    # Configure logging
    setup_logging(level="DEBUG" if parsed_args.debug else None)

    if parsed_args.command == "devices":
        return list_devices()

    try:
        return run_command(parsed_args)
    except AudioDeviceError as e:
        logger.error(f"Audio error: {e}")
        return 2
    except (PitchCoachError, ValueError) as e:
        logger.error(f"Invalid settings: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
