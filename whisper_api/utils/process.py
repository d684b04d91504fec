"""
External process runner
Spawns CLI tools with piped stdio, a deadline and a fallback executable
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from whisper_api.exceptions import (
    MissingArtifactError,
    ProcessExitError,
    ProcessSpawnError,
    ProcessTimeoutError,
)

STDERR_TAIL_CHARS = 500


@dataclass
class ProcessResult:
    """Outcome of a successful run"""

    executable: str
    returncode: int
    stdout: str
    stderr: str
    output_dir: Optional[Path] = None
    artifact_path: Optional[Path] = None


async def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


def stderr_tail(stderr: str, limit: int = STDERR_TAIL_CHARS) -> str:
    """Last `limit` characters of stderr, stripped"""
    return stderr.strip()[-limit:]


class ProcessRunner:
    """Runs one external command at a time for the caller"""

    async def run(
        self,
        executable: str,
        fallback: Optional[str],
        args: Sequence[str],
        timeout: float,
        output_dir: Optional[Path] = None,
        artifact_path: Optional[Path] = None,
    ) -> ProcessResult:
        """
        Run `executable` (or `fallback` if it cannot be spawned)

        Args:
            executable: Primary executable name or path
            fallback: Executable tried with identical args when the primary cannot be launched
            args: Command arguments
            timeout: Wall-clock budget (seconds) shared by every attempt
            output_dir: Directory the tool writes into (returned as is)
            artifact_path: File that must exist after a zero exit code

        Returns:
            ProcessResult

        Raises:
            ProcessSpawnError: No candidate could be launched
            ProcessExitError: Non-zero exit code
            ProcessTimeoutError: Deadline exceeded (the child is killed)
            MissingArtifactError: Exit code 0 but `artifact_path` is absent
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        candidates = [executable] + ([fallback] if fallback and fallback != executable else [])

        spawn_errors: list[str] = []
        for candidate in candidates:
            try:
                process = await asyncio.create_subprocess_exec(
                    candidate,
                    *args,
                    stdin=asyncio.subprocess.DEVNULL,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except (OSError, ValueError) as e:
                # ValueError: an argument holds a NUL byte
                logger.warning(f"Could not start {candidate}: {e}")
                spawn_errors.append(f"{candidate}: {e}")
                continue

            logger.info(f"Started {candidate} (pid={process.pid}): {' '.join(args)}")
            remaining = max(deadline - loop.time(), 0)
            stdout, stderr = await self._communicate(process, candidate, remaining, timeout)

            if process.returncode != 0:
                tail = stderr_tail(stderr)
                logger.error(f"{candidate} exited with code {process.returncode}: {tail}")
                raise ProcessExitError(candidate, process.returncode, tail)

            if artifact_path is not None and not Path(artifact_path).exists():
                raise MissingArtifactError(f"{candidate} exited 0 but did not create {artifact_path}")

            logger.info(f"{candidate} finished successfully")
            return ProcessResult(
                executable=candidate,
                returncode=process.returncode,
                stdout=stdout,
                stderr=stderr,
                output_dir=output_dir,
                artifact_path=artifact_path,
            )

        raise ProcessSpawnError(f"Could not start any of {candidates}: {'; '.join(spawn_errors)}")

    @staticmethod
    async def _communicate(
        process: asyncio.subprocess.Process,
        name: str,
        remaining: float,
        timeout: float,
    ) -> tuple[str, str]:
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=remaining)
        except asyncio.TimeoutError:
            logger.error(f"{name} exceeded {timeout}s deadline, killing pid={process.pid}")
            await _kill(process)
            raise ProcessTimeoutError(f"{name} timed out after {timeout}s")
        except asyncio.CancelledError:
            await _kill(process)
            raise
        return (
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )
