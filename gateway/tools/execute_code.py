"""Code execution tool.

Snippets never run inside the server process. When enabled, each one gets a
fresh ``python -I`` interpreter with an empty environment, a throwaway
working directory, CPU/memory/file-size rlimits and a wall-clock timeout.
This is process isolation only: the child can still reach the network, so
the tool stays disabled unless ``CODE_EXECUTION_ENABLED`` is set.
"""

import asyncio
import json
import sys
import tempfile
from functools import partial

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool

from gateway.core.exceptions import ToolExecutionError
from gateway.tools.context import get_tool_context

MAX_FILE_BYTES = 1024 * 1024
MAX_OPEN_FILES = 64


def _limit_resources(cpu_seconds: int, memory_mb: int) -> None:
    """Runs in the child between fork and exec."""
    import resource

    resource.setrlimit(resource.RLIMIT_CPU, (cpu_seconds, cpu_seconds))
    memory = memory_mb * 1024 * 1024
    resource.setrlimit(resource.RLIMIT_AS, (memory, memory))
    resource.setrlimit(resource.RLIMIT_FSIZE, (MAX_FILE_BYTES, MAX_FILE_BYTES))
    resource.setrlimit(resource.RLIMIT_NOFILE, (MAX_OPEN_FILES, MAX_OPEN_FILES))


def _truncate(text: str, limit: int) -> tuple[str, bool]:
    if len(text) <= limit:
        return text, False
    return text[:limit], True


@tool
async def execute_code(
    code: str, config: RunnableConfig, language: str = "python"
) -> str:
    """Run a short Python snippet and return its stdout, stderr and exit code.

    Use only for small calculations or data transformations; nothing is
    kept between runs.
    """
    context = get_tool_context(config)
    limits = context.tools
    if not limits.code_execution_enabled:
        raise ToolExecutionError("Code execution is disabled on this server")
    if language != "python":
        raise ToolExecutionError(f"Unsupported language: {language}")

    preexec = None
    if sys.platform != "win32":
        preexec = partial(
            _limit_resources,
            limits.code_execution_timeout,
            limits.code_execution_memory_mb,
        )

    with tempfile.TemporaryDirectory(prefix="exec-") as workdir:
        process = await asyncio.create_subprocess_exec(
            sys.executable,
            "-I",
            "-c",
            code,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=workdir,
            env={},
            preexec_fn=preexec,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=limits.code_execution_timeout
            )
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise ToolExecutionError(
                f"Execution timed out after {limits.code_execution_timeout}s"
            ) from e

    out, out_truncated = _truncate(
        stdout.decode(errors="replace"), limits.code_execution_max_output
    )
    err, err_truncated = _truncate(
        stderr.decode(errors="replace"), limits.code_execution_max_output
    )
    return json.dumps(
        {
            "exit_code": process.returncode,
            "stdout": out,
            "stderr": err,
            "truncated": out_truncated or err_truncated,
        },
        ensure_ascii=False,
    )
