"""ToolHandler: runs a node's shell command."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from functools import partial
from io import BufferedReader
from pathlib import Path

from pipegraph.durations import parse_duration_ms
from pipegraph.model.context import Context
from pipegraph.model.graph import Graph, Node
from pipegraph.model.outcome import Outcome, Status

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
MAX_OUTPUT_BYTES = 10 * 1024 * 1024
_CHUNK_BYTES = 64 * 1024
_POLL_INTERVAL = 0.05


class OutputLimitExceeded(Exception):
    """A command wrote more than the allowed bytes to stdout or stderr."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Command output exceeded {limit} bytes")
        self.limit = limit


class ToolHandler:
    """Handler for tool (parallelogram) nodes.

    Runs the ``tool_command`` attribute through the shell in its own process
    group. The command is killed when it outlives the node's ``timeout``.
    Output beyond ``max_output_bytes`` on either stream kills the command
    and fails the stage; at most that many bytes are ever buffered.
    """

    def __init__(
        self,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_output_bytes: int = MAX_OUTPUT_BYTES,
        working_dir: str | None = None,
    ) -> None:
        self._default_timeout_ms = default_timeout_ms
        self._max_output_bytes = max_output_bytes
        self._working_dir = working_dir

    def execute(self, node: Node, context: Context, graph: Graph, logs_root: Path) -> Outcome:
        command = node.attr("tool_command")
        if not command:
            return Outcome(status=Status.FAIL, failure_reason="No tool_command specified")
        command = str(command)
        timeout_ms = self.timeout_ms_for(node)

        logger.debug("Stage %s running %r (timeout %dms)", node.id, command, timeout_ms)
        try:
            stdout, stderr, exit_code = self._run(command, timeout_ms)
        except subprocess.TimeoutExpired:
            return _failed(f"Command timed out after {timeout_ms}ms: {command}")
        except OutputLimitExceeded as exc:
            return _failed(f"{exc}: {command}")
        except OSError as exc:
            return _failed(f"Command could not be started: {exc}")

        out = stdout.decode("utf-8", errors="replace").strip()
        err = stderr.decode("utf-8", errors="replace").strip()
        if exit_code != 0:
            message = f"Command failed with exit code {exit_code}: {command}"
            if err:
                message += f"\n{err}"
            return _failed(message)

        return Outcome(
            status=Status.SUCCESS,
            context_updates={"tool.output": out, "tool.stderr": err},
            notes=f"Tool completed: {command}",
        )

    def timeout_ms_for(self, node: Node) -> int:
        """Deadline for *node*: its parsed ``timeout`` or the handler default."""
        if node.timeout is not None:
            return int(node.timeout * 1000)
        return parse_duration_ms(node.attr("timeout"), self._default_timeout_ms)

    def _run(self, command: str, timeout_ms: int) -> tuple[bytes, bytes, int]:
        proc = subprocess.Popen(
            command,
            shell=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=self._working_dir,
            start_new_session=True,
        )
        over_limit = threading.Event()
        stdout, stderr = bytearray(), bytearray()
        readers = [
            threading.Thread(
                target=_drain, args=(stream, buf, self._max_output_bytes, over_limit), daemon=True
            )
            for stream, buf in ((proc.stdout, stdout), (proc.stderr, stderr))
        ]
        for reader in readers:
            reader.start()

        deadline = time.monotonic() + timeout_ms / 1000.0
        try:
            while True:
                try:
                    proc.wait(timeout=_POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    if over_limit.is_set():
                        _kill_group(proc)
                        break
                    if time.monotonic() >= deadline:
                        _kill_group(proc)
                        raise subprocess.TimeoutExpired(command, timeout_ms / 1000.0) from None
        finally:
            for reader in readers:
                reader.join()

        if over_limit.is_set():
            raise OutputLimitExceeded(self._max_output_bytes)
        return bytes(stdout), bytes(stderr), proc.returncode


def _drain(stream: BufferedReader, buf: bytearray, limit: int, over_limit: threading.Event) -> None:
    """Copy *stream* into *buf* until EOF, or stop once *limit* would be passed."""
    with stream:
        for chunk in iter(partial(stream.read1, _CHUNK_BYTES), b""):
            if len(buf) + len(chunk) > limit:
                over_limit.set()
                return
            buf.extend(chunk)


def _kill_group(proc: subprocess.Popen) -> None:  # type: ignore[type-arg]
    try:
        os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass
    proc.wait()


def _failed(message: str) -> Outcome:
    return Outcome(
        status=Status.FAIL,
        failure_reason=message,
        context_updates={"tool.error": message},
    )
