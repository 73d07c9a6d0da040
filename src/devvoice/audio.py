"""Microphone capture and audio playback through external tools.

Recording uses ffmpeg; playback uses afplay (macOS) or mpg123/aplay (Linux).
Every tool is invoked with an argument list, never through a shell.
"""

import logging
import os
import shutil
import subprocess
import sys
import tempfile
import uuid
from pathlib import Path

from devvoice.errors import RecordingError
from devvoice.tts.provider import EXTENSIONS

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 16000
# Extra time allowed for ffmpeg to flush and exit after the recording duration
RECORD_GRACE_SECONDS = 2.0


def _temp_path(extension: str) -> str:
    return os.path.join(tempfile.gettempdir(), f"devvoice-{uuid.uuid4()}.{extension}")


def build_record_command(
    output_path: str,
    duration_seconds: int,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    platform: str | None = None,
    mic: str | None = None,
) -> list[str]:
    """ffmpeg arguments for a mono 16-bit PCM WAV recording."""
    platform = platform or sys.platform
    mic = mic if mic is not None else os.environ.get("DEVVOICE_MIC")

    if platform == "win32":
        if not mic:
            raise RecordingError(
                "No microphone device configured. Set DEVVOICE_MIC to your microphone name."
            )
        source = ["-f", "dshow", "-i", f"audio={mic}"]
    elif platform == "darwin":
        source = ["-f", "avfoundation", "-i", f":{mic or 'default'}"]
    else:
        source = ["-f", "alsa", "-i", mic or "default"]

    return [
        "ffmpeg",
        "-hide_banner",
        "-loglevel",
        "error",
        *source,
        "-t",
        str(duration_seconds),
        "-ac",
        "1",
        "-ar",
        str(sample_rate),
        "-acodec",
        "pcm_s16le",
        "-y",
        output_path,
    ]


def record_audio(duration_seconds: int = 8, sample_rate: int = DEFAULT_SAMPLE_RATE) -> str:
    """Record from the microphone into a temporary WAV file.

    Args:
        duration_seconds: Recording length
        sample_rate: Sample rate in Hz

    Returns:
        Path to the recorded WAV file

    Raises:
        RecordingError: If ffmpeg is missing, fails, or hangs
    """
    output_path = _temp_path("wav")
    command = build_record_command(output_path, duration_seconds, sample_rate)
    logger.debug("Recording %ss of audio to %s", duration_seconds, output_path)

    try:
        completed = subprocess.run(
            command,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            timeout=duration_seconds + RECORD_GRACE_SECONDS,
            check=False,
        )
    except FileNotFoundError as e:
        raise RecordingError(
            "Failed to start audio recording. FFmpeg not found. "
            "Please install FFmpeg and ensure it is in your PATH."
        ) from e
    except subprocess.TimeoutExpired as e:
        raise RecordingError(
            f"Recording did not finish within {duration_seconds + RECORD_GRACE_SECONDS:g} seconds"
        ) from e
    except OSError as e:
        raise RecordingError(f"Failed to start audio recording. {e}") from e

    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace")[-500:]
        raise RecordingError(
            f"FFmpeg recording failed with exit code {completed.returncode}. "
            + (f"Error: {stderr}" if stderr else "No error details available.")
        )

    return output_path


def wait_for_enter(prompt: str = "Press Enter to start recording...") -> None:
    """Push-to-talk: block until the user presses Enter."""
    input(prompt)


def save_audio(audio_bytes: bytes, content_type: str) -> str:
    """Write synthesized audio to a temporary file and return its path."""
    path = _temp_path(EXTENSIONS.get(content_type, "mp3"))
    Path(path).write_bytes(audio_bytes)
    return path


def playback_commands(audio_path: str, platform: str | None = None) -> list[list[str]]:
    """Candidate player invocations for a platform, in order of preference."""
    platform = platform or sys.platform
    if platform == "darwin":
        return [["afplay", audio_path]]
    if platform.startswith("linux"):
        return [["mpg123", "-q", audio_path], ["aplay", "-q", audio_path]]
    return []


def play_audio(audio_path: str) -> bool:
    """Play an audio file with the first available player.

    Playback failure is not an error: the saved path is printed instead.

    Returns:
        True if a player exited successfully
    """
    for command in playback_commands(audio_path):
        if shutil.which(command[0]) is None:
            continue
        try:
            completed = subprocess.run(command, capture_output=True, check=False)
        except OSError as e:
            logger.warning("Playback with %s failed: %s", command[0], e)
            continue
        if completed.returncode == 0:
            return True
        logger.warning("Playback with %s exited with code %d", command[0], completed.returncode)

    print(f"Could not play audio. File saved to: {audio_path}")
    return False
