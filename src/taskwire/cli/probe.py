# src/taskwire/cli/probe.py

"""
Smoke-test client.

Spawns the server as a child process, talks to it over its stdin/stdout line
protocol and prints one PASS/FAIL line per check. Read-only checks run by
default; --write also creates, updates and deletes a throwaway task.

Exit code: 0 when every check passed, 1 otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
import itertools
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SERVER_CMD = [sys.executable, "-m", "taskwire"]


class ProbeClient:
    """Correlates responses to requests by id, like any real caller must."""

    def __init__(self, proc: asyncio.subprocess.Process) -> None:
        self._proc = proc
        self._ids = itertools.count(1)
        self._pending: dict[Any, asyncio.Future[dict[str, Any]]] = {}
        self._orphans: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._reader = asyncio.create_task(self._read_loop())

    @classmethod
    async def spawn(cls, cmd: list[str]) -> ProbeClient:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
        )
        return cls(proc)

    async def _read_loop(self) -> None:
        assert self._proc.stdout is not None
        while True:
            raw = await self._proc.stdout.readline()
            if not raw:
                break
            try:
                msg = json.loads(raw)
            except ValueError:
                logger.warning("Server wrote a non-JSON line: %r", raw[:200])
                continue
            fut = self._pending.pop(msg.get("id"), None) if isinstance(msg, dict) else None
            if fut is not None and not fut.done():
                fut.set_result(msg)
            else:
                await self._orphans.put(msg)

        for fut in self._pending.values():
            if not fut.done():
                fut.set_exception(ConnectionError("server closed its output"))

    async def _write(self, line: str) -> None:
        assert self._proc.stdin is not None
        self._proc.stdin.write((line + "\n").encode("utf-8"))
        await self._proc.stdin.drain()

    async def request(self, payload: dict[str, Any], *, timeout: float = 30.0) -> dict[str, Any]:
        req_id = f"probe-{next(self._ids)}"
        fut: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[req_id] = fut
        await self._write(json.dumps({"id": req_id, **payload}))
        return await asyncio.wait_for(fut, timeout=timeout)

    async def send_raw(self, line: str, *, timeout: float = 10.0) -> dict[str, Any]:
        """Send a line that carries no usable id and wait for the uncorrelated reply."""
        await self._write(line)
        return await asyncio.wait_for(self._orphans.get(), timeout=timeout)

    async def close(self) -> None:
        if self._proc.stdin is not None:
            self._proc.stdin.close()
        try:
            await asyncio.wait_for(self._proc.wait(), timeout=10.0)
        except asyncio.TimeoutError:
            self._proc.kill()
            await self._proc.wait()
        await self._reader


@dataclass(slots=True)
class CheckResult:
    name: str
    ok: bool
    detail: str = ""


Check = Callable[[ProbeClient], Awaitable[str]]


class ProbeFailure(AssertionError):
    pass


def _expect(cond: bool, message: str) -> None:
    if not cond:
        raise ProbeFailure(message)


def _first_text(resp: dict[str, Any]) -> str:
    for item in resp.get("content") or []:
        if isinstance(item, dict) and item.get("type") == "text":
            return str(item.get("text", ""))
    return ""


async def check_discover(client: ProbeClient) -> str:
    resp = await client.request({"type": "discover"})
    _expect(resp.get("type") == "discover_response", f"unexpected response: {resp}")
    names = [t.get("name") for t in resp.get("tools", [])]
    _expect("listTasks" in names, f"listTasks missing from tools: {names}")
    return f"{len(names)} tools, {len(resp.get('resources', []))} resources, {len(resp.get('prompts', []))} prompts"


async def check_list_resource(client: ProbeClient) -> str:
    resp = await client.request({"type": "resource", "uri": "tasks://list"})
    _expect(resp.get("type") == "resource_response", f"unexpected response: {resp}")
    return f"{len(resp.get('contents', []))} entries"


async def check_list_tool(client: ProbeClient) -> str:
    resp = await client.request({"type": "invoke", "tool": "listTasks", "parameters": {}})
    _expect(resp.get("type") == "invoke_response", f"unexpected response: {resp}")
    text = _first_text(resp)
    _expect(not text.startswith("Error"), text)
    return text


async def check_prompt(client: ProbeClient) -> str:
    resp = await client.request({"type": "prompt", "prompt": "taskProgressReport", "parameters": {"status": "started"}})
    _expect(resp.get("type") == "prompt_response", f"unexpected response: {resp}")
    _expect(bool(resp.get("messages")), "no messages in prompt response")
    return "prompt rendered"


async def check_unknown_tool(client: ProbeClient) -> str:
    resp = await client.request({"type": "invoke", "tool": "doesNotExist"})
    _expect(resp.get("error") == "Tool not found: doesNotExist", f"unexpected response: {resp}")
    return "rejected"


async def check_malformed_line(client: ProbeClient) -> str:
    resp = await client.send_raw("{this is not json")
    _expect(str(resp.get("id", "")).startswith("error_"), f"unexpected id: {resp}")
    _expect("error" in resp, f"no error field: {resp}")
    return "error response with synthetic id"


async def check_crud_cycle(client: ProbeClient) -> str:
    created = await client.request(
        {
            "type": "invoke",
            "tool": "createTask",
            "parameters": {
                "task": f"Probe task {datetime.now().isoformat(timespec='seconds')}",
                "category": "Test",
                "priority": "medium",
            },
        }
    )
    task_json = next(
        (c.get("json") for c in created.get("content", []) if c.get("type") == "json"),
        None,
    )
    _expect(isinstance(task_json, dict) and task_json.get("id") is not None, _first_text(created))
    task_id = task_json["id"]

    updated = await client.request(
        {"type": "invoke", "tool": "updateTask", "parameters": {"taskId": task_id, "status": "done"}}
    )
    _expect("updated successfully" in _first_text(updated), _first_text(updated))

    deleted = await client.request(
        {"type": "invoke", "tool": "deleteTask", "parameters": {"taskId": task_id}}
    )
    _expect(not _first_text(deleted).startswith("Error"), _first_text(deleted))
    return f"task {task_id} created, updated, deleted"


READ_CHECKS: list[tuple[str, Check]] = [
    ("discover", check_discover),
    ("resource tasks://list", check_list_resource),
    ("invoke listTasks", check_list_tool),
    ("prompt taskProgressReport", check_prompt),
    ("unknown tool", check_unknown_tool),
    ("malformed line", check_malformed_line),
]

WRITE_CHECKS: list[tuple[str, Check]] = [
    ("create/update/delete", check_crud_cycle),
]


async def run_checks(client: ProbeClient, checks: list[tuple[str, Check]]) -> list[CheckResult]:
    results: list[CheckResult] = []
    for name, check in checks:
        try:
            detail = await check(client)
            results.append(CheckResult(name, True, detail))
        except ProbeFailure as e:
            results.append(CheckResult(name, False, str(e)))
        except (asyncio.TimeoutError, ConnectionError) as e:
            results.append(CheckResult(name, False, f"{e.__class__.__name__}: {e}"))
    return results


def _print_results(results: list[CheckResult]) -> None:
    for r in results:
        mark = "PASS" if r.ok else "FAIL"
        print(f"[{mark}] {r.name}: {r.detail}")
    passed = sum(1 for r in results if r.ok)
    print(f"\n{passed}/{len(results)} checks passed")


async def _amain(args: argparse.Namespace) -> int:
    cmd = args.server_cmd or DEFAULT_SERVER_CMD
    checks = READ_CHECKS + (WRITE_CHECKS if args.write else [])

    client = await ProbeClient.spawn(cmd)
    try:
        results = await run_checks(client, checks)
    finally:
        await client.close()

    _print_results(results)
    return 0 if all(r.ok for r in results) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskwire-probe", description=__doc__.splitlines()[1])
    parser.add_argument(
        "--write",
        action="store_true",
        help="also run a create/update/delete cycle against the task store",
    )
    parser.add_argument(
        "server_cmd",
        nargs=argparse.REMAINDER,
        help="server command to spawn (default: current python -m taskwire)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    sys.exit(asyncio.run(_amain(args)))


if __name__ == "__main__":
    main()
