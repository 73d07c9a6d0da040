"""Command-line interface: ``devvoice listen`` and ``devvoice chat``.

Usage:
    devvoice listen [--repo PATH] [--mute] [--no-agent] [--text]
    devvoice chat [--repo PATH] [--mute] [--no-agent] [--text]

``listen`` runs a single turn, ``chat`` loops until the user says exit. With
``--text`` utterances are read from stdin instead of the microphone.
"""

import argparse
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path

import duckdb

from devvoice import audio
from devvoice.commands.session_memory import SessionMemory
from devvoice.config import AppConfig
from devvoice.db import init_db
from devvoice.errors import DevVoiceError, InvalidRepositoryError, MissingCredentialError
from devvoice.logging_utils import configure_logging
from devvoice.metrics import get_metrics_collector
from devvoice.pipeline import TurnOutcome, TurnStatus, VoicePipeline
from devvoice.planner import get_planner
from devvoice.stt import STTProvider, get_stt_provider
from devvoice.tts import TTSProvider, get_tts_provider

logger = logging.getLogger(__name__)


def validate_repo_path(repo_path: str) -> str:
    """Return the absolute repository path.

    Raises:
        InvalidRepositoryError: If the path does not exist or is not a directory
    """
    path = Path(repo_path).expanduser()
    if not path.exists():
        raise InvalidRepositoryError(f"Repository path does not exist: {repo_path}")
    if not path.is_dir():
        raise InvalidRepositoryError(f"Repository path is not a directory: {repo_path}")
    return str(path.resolve())


class VoiceSession:
    """Captures utterances, runs them through the pipeline and reports back."""

    def __init__(
        self,
        pipeline: VoicePipeline,
        stt: STTProvider,
        tts: TTSProvider,
        config: AppConfig,
        text_mode: bool = False,
        input_fn: Callable[[str], str] | None = None,
    ):
        self.pipeline = pipeline
        self.stt = stt
        self.tts = tts
        self.config = config
        self.text_mode = text_mode
        self.input_fn = input_fn or input
        self.memory = SessionMemory()
        self.finished = False

    def capture(self, record_seconds: int, prompt: str = "You: ") -> str | None:
        """Get one utterance, or None when the turn should be skipped."""
        if self.text_mode:
            try:
                return self.input_fn(prompt).strip()
            except EOFError:
                self.finished = True
                return None

        audio.wait_for_enter()
        print(f"Recording... (up to {record_seconds} seconds)")
        wav_path = audio.record_audio(record_seconds)
        try:
            audio_data = Path(wav_path).read_bytes()
            print("Transcribing...")
            transcript = self.stt.transcribe(audio_data, "wav")
        except MissingCredentialError as e:
            print(f"Speech-to-text unavailable: {e} Skipping this turn.")
            return None
        finally:
            Path(wav_path).unlink(missing_ok=True)

        print(f'Heard: "{transcript}"')
        return transcript

    def speak(self, text: str) -> None:
        if self.config.mute or not text:
            return
        try:
            audio_bytes, content_type = self.tts.synthesize(text)
        except DevVoiceError as e:
            logger.warning("Skipping speech output: %s", e)
            return
        speech_path = audio.save_audio(audio_bytes, content_type)
        # kept on failure; play_audio printed its path
        if audio.play_audio(speech_path):
            Path(speech_path).unlink(missing_ok=True)

    def report(self, outcome: TurnOutcome) -> None:
        if outcome.status == TurnStatus.EXECUTED and outcome.result is not None:
            print(f"\nSummary: {outcome.message}")
            if outcome.result.stdout:
                print("\nOutput:")
                print(outcome.result.stdout)
            if outcome.result.stderr:
                print("\nErrors:")
                print(outcome.result.stderr)
        else:
            print(outcome.message)
        self.speak(outcome.spoken_text)

    def run_turn(self) -> TurnOutcome | None:
        """Run one full turn, including the confirmation follow-up if needed."""
        utterance = self.capture(self.config.record_seconds)
        if utterance is None:
            return None
        if not utterance:
            print("Didn't catch anything. Try again.")
            return None

        outcome = self.pipeline.handle(utterance, self.memory)
        if outcome.plan is not None:
            print(f"\nPlan: {outcome.plan.description}")
        for step in outcome.plan_steps:
            print(f"  - {step}")
        if outcome.explanation:
            print(f"\n{outcome.explanation}")

        if outcome.needs_confirmation:
            print(f"\nCommand: {outcome.command}")
            print(outcome.message)
            self.speak(outcome.message)
            follow_up = self.capture(self.config.confirm_record_seconds, prompt="Confirm? ")
            outcome = self.pipeline.confirm(outcome, follow_up or "", self.memory)

        if outcome.command and outcome.status == TurnStatus.EXECUTED:
            print(f"\nExecuted: {outcome.command}")
        self.report(outcome)

        if outcome.should_exit:
            self.finished = True
        return outcome


def listen(session: VoiceSession) -> int:
    """Single-turn mode."""
    try:
        session.run_turn()
    except DevVoiceError as e:
        logger.error("Turn failed: %s", e)
        print(f"Error: {e}")
    except Exception as e:
        logger.exception("Unexpected error during turn")
        print(f"Error: {e}")
    return 0


def chat(session: VoiceSession) -> int:
    """Multi-turn mode: loop until the user says exit."""
    print('Say "exit" to quit\n')
    while not session.finished:
        try:
            session.run_turn()
        except KeyboardInterrupt:
            print()
            break
        except DevVoiceError as e:
            logger.error("Turn failed: %s", e)
            print(f"Error: {e}")
            session.speak(f"An error occurred: {e}")
        except Exception as e:
            logger.exception("Unexpected error during turn")
            print(f"Error: {e}")
    return 0


def build_session(args: argparse.Namespace, config: AppConfig, repo_path: str) -> VoiceSession:
    action_log: duckdb.DuckDBPyConnection | None = None
    try:
        action_log = init_db(config.db_path)
    except (duckdb.Error, OSError) as e:
        logger.warning("Action log disabled: %s", e)

    pipeline = VoicePipeline(
        repo_path,
        planner=get_planner(config),
        command_timeout=config.command_timeout,
        action_log=action_log,
        metrics=get_metrics_collector() if config.enable_metrics else None,
    )
    return VoiceSession(
        pipeline,
        stt=get_stt_provider(config),
        tts=get_tts_provider(config),
        config=config,
        text_mode=args.text,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devvoice",
        description="Voice-first developer assistant for local git repositories",
    )
    subparsers = parser.add_subparsers(dest="mode", required=True)

    for name, help_text in (
        ("listen", "Single-turn voice command execution"),
        ("chat", "Multi-turn interactive voice chat"),
    ):
        mode_parser = subparsers.add_parser(name, help=help_text)
        mode_parser.add_argument(
            "--repo", default=None, help="Repository path (default: current directory)"
        )
        mode_parser.add_argument("--mute", action="store_true", help="Disable text-to-speech output")
        mode_parser.add_argument(
            "--no-agent",
            action="store_true",
            help="Disable AI agent (use simple keyword matching)",
        )
        mode_parser.add_argument(
            "--text", action="store_true", help="Read utterances from stdin instead of the microphone"
        )

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    config = AppConfig.from_env()
    if args.mute:
        config.mute = True
    if args.no_agent:
        config.no_agent = True

    try:
        repo_path = validate_repo_path(args.repo or os.getcwd())
    except InvalidRepositoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"DevVoice - {args.mode.capitalize()} Mode")
    print(f"Repository: {repo_path}")

    session = build_session(args, config, repo_path)
    if args.mode == "listen":
        return listen(session)
    return chat(session)


if __name__ == "__main__":
    sys.exit(main())
