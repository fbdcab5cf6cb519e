"""
MPV-backed audio engine using JSON IPC over a unix socket.

Each handle runs its own ``mpv --idle`` process so that handles behave like
independent media elements: they can be paused, sought and torn down without
affecting each other. Property observers feed the handle events.
"""

import asyncio
import json
import os
import shutil
import subprocess
import tempfile
import uuid
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .engine import (
    ENDED,
    ERROR,
    PAUSE,
    PLAY,
    TIMEUPDATE,
    VOLUMECHANGE,
    AudioEngine,
    AudioHandle,
    PlaybackStartError,
)

OBSERVED_PROPERTIES = ("pause", "time-pos", "duration", "volume")

SOCKET_POLL_INTERVAL = 0.05


def check_mpv_available(mpv_path: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    if shutil.which(mpv_path) is None:
        return False
    try:
        result = subprocess.run(
            [mpv_path, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def _socket_path() -> str:
    temp_dir = Path(tempfile.gettempdir())
    return str(temp_dir / f"ytm-proxy-mpv-{os.getpid()}-{uuid.uuid4().hex[:8]}.sock")


class MpvAudioHandle(AudioHandle):
    """One mpv process playing one stream URL."""

    def __init__(
        self, src: str, mpv_path: str = "mpv", start_timeout: float = 10.0
    ) -> None:
        super().__init__(src)
        self.mpv_path = mpv_path
        self.start_timeout = start_timeout
        self.socket_path = _socket_path()
        self._process: Optional[asyncio.subprocess.Process] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._load_waiter: Optional[asyncio.Future] = None
        self._reap_task: Optional[asyncio.Task] = None
        self._loaded = False
        self._request_id = 0

    async def play(self) -> None:
        if self.closed:
            raise PlaybackStartError("Audio handle is closed")

        if not self._loaded:
            await self._start_process()
            await self._load()

        self._send("set_property", "pause", False)
        self._paused = False

    def pause(self) -> None:
        self._send("set_property", "pause", True)
        self._paused = True

    def _seek(self, seconds: float) -> None:
        self._send("seek", seconds, "absolute")

    def _apply_volume(self, value: float) -> None:
        self._send("set_property", "volume", round(value * 100, 1))

    async def _start_process(self) -> None:
        if self._process is not None:
            return

        cmd = [
            self.mpv_path,
            "--idle=yes",
            "--no-video",
            "--no-terminal",
            "--pause",
            f"--input-ipc-server={self.socket_path}",
            f"--volume={round(self._volume * 100, 1)}",
            "--keep-open=no",
            "--load-scripts=no",
        ]
        logger.debug(f"Starting mpv with socket: {self.socket_path}")

        try:
            self._process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
                stdin=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise PlaybackStartError(f"Failed to start mpv: {e}") from e

        if self.closed:
            self._terminate_process()
            raise PlaybackStartError("Audio handle closed during startup")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.start_timeout
        while not os.path.exists(self.socket_path):
            if self.closed:
                self._terminate_process()
                raise PlaybackStartError("Audio handle closed during startup")
            if self._process.returncode is not None:
                self.close()
                raise PlaybackStartError(
                    f"mpv exited during startup (code {self._process.returncode})"
                )
            if loop.time() > deadline:
                self.close()
                raise PlaybackStartError(
                    f"mpv socket creation timeout after {self.start_timeout}s"
                )
            await asyncio.sleep(SOCKET_POLL_INTERVAL)

        try:
            reader, self._writer = await asyncio.open_unix_connection(self.socket_path)
        except OSError as e:
            self.close()
            raise PlaybackStartError(f"mpv socket connection failed: {e}") from e

        if self.closed:
            self._writer.close()
            self._terminate_process()
            raise PlaybackStartError("Audio handle closed during startup")

        self._reader_task = asyncio.create_task(self._read_loop(reader))
        for observer_id, name in enumerate(OBSERVED_PROPERTIES, start=1):
            self._send("observe_property", observer_id, name)

    async def _load(self) -> None:
        self._load_waiter = asyncio.get_running_loop().create_future()
        self._send("loadfile", self.src, "replace")
        try:
            await asyncio.wait_for(self._load_waiter, self.start_timeout)
        except asyncio.TimeoutError as e:
            self.close()
            raise PlaybackStartError(f"Timed out loading {self.src}") from e
        except PlaybackStartError:
            self.close()
            raise
        finally:
            self._load_waiter = None
        self._loaded = True
        logger.debug(f"mpv loaded {self.src}")

    def _send(self, *command: Any) -> None:
        """Queue an IPC command. Silently ignored before startup or after close."""
        if self._writer is None or self._writer.is_closing():
            return
        self._request_id += 1
        payload = {"command": list(command), "request_id": self._request_id}
        try:
            self._writer.write((json.dumps(payload) + "\n").encode("utf-8"))
        except (OSError, RuntimeError) as e:
            logger.debug(f"mpv command {command[0]} failed: {e}")

    async def _read_loop(self, reader: asyncio.StreamReader) -> None:
        while True:
            line = await reader.readline()
            if not line:
                break
            try:
                message = json.loads(line)
            except json.JSONDecodeError:
                continue
            self._handle_message(message)

        if not self.closed:
            logger.warning(f"mpv connection lost for {self.src}")
            self._fail(PlaybackStartError("mpv connection lost"))

    def _handle_message(self, message: dict) -> None:
        event = message.get("event")
        if event == "property-change":
            self._on_property(message.get("name"), message.get("data"))
        elif event == "file-loaded":
            if self._load_waiter is not None and not self._load_waiter.done():
                self._load_waiter.set_result(None)
        elif event == "end-file":
            reason = message.get("reason")
            if reason == "eof":
                self._paused = True
                self.emit(ENDED)
            elif reason == "error":
                detail = message.get("file_error") or "unknown error"
                self._fail(PlaybackStartError(f"mpv could not play {self.src}: {detail}"))

    def _on_property(self, name: Optional[str], data: Any) -> None:
        if name == "pause":
            paused = bool(data)
            if paused != self._paused:
                self._paused = paused
                self.emit(PAUSE if paused else PLAY)
        elif name == "time-pos":
            if data is None:
                return
            self._current_time = float(data)
            self.emit(TIMEUPDATE)
        elif name == "duration":
            if data:
                self._duration = float(data)
        elif name == "volume":
            if data is None:
                return
            volume = float(data) / 100
            if abs(volume - self._volume) > 1e-6:
                self._volume = volume
                self.emit(VOLUMECHANGE)

    def _fail(self, error: PlaybackStartError) -> None:
        """Fail a pending start, or report a mid-stream error."""
        if self._load_waiter is not None and not self._load_waiter.done():
            self._load_waiter.set_exception(error)
        else:
            self._paused = True
            self.emit(ERROR, error)

    def close(self) -> None:
        if self.closed:
            return
        super().close()
        self._paused = True

        if self._load_waiter is not None and not self._load_waiter.done():
            self._load_waiter.set_exception(PlaybackStartError("Audio handle closed"))

        if self._reader_task is not None:
            self._reader_task.cancel()
        if self._writer is not None:
            self._writer.close()

        self._terminate_process()

        if os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                pass

    def _terminate_process(self) -> None:
        """Kill mpv and reap it in the background. Safe to call repeatedly."""
        process = self._process
        if process is None or process.returncode is not None or self._reap_task is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            return  # Already exited

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop; the subprocess transport reaps it on close
            logger.debug(f"mpv for {self.src} killed outside the event loop")
            return
        self._reap_task = loop.create_task(process.wait())


class MpvEngine(AudioEngine):
    """Creates one ``MpvAudioHandle`` per stream."""

    def __init__(self, mpv_path: str = "mpv", start_timeout: float = 10.0) -> None:
        super().__init__()
        self.mpv_path = mpv_path
        self.start_timeout = start_timeout

    def _create_handle(self, src: str) -> MpvAudioHandle:
        return MpvAudioHandle(src, mpv_path=self.mpv_path, start_timeout=self.start_timeout)
