"""Terminal client for the Apollo Chat WebSocket service."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any

import websockets

DEFAULT_URL = "ws://127.0.0.1:8000/ws"

HELP = """Commands:
  /clear            reset the conversation
  /model <id>       switch model
  /system <text>    replace the system prompt
  /tokens <n>       set the max-token budget (100-8000)
  /copy <n>         print message n verbatim
  /dismiss          hide the current error
  /quit             leave"""

logger = logging.getLogger("chat_client")


def command_to_frame(line: str) -> dict[str, Any] | None:
    """Translate one line of user input into a protocol frame.

    Returns ``None`` for lines that should not be sent (blank input, /help).
    Raises ``ValueError`` for malformed commands.
    """

    if not line.strip():
        return None
    if not line.startswith("/"):
        return {"action": "send", "text": line}

    name, _, arg = line[1:].partition(" ")
    arg = arg.strip()
    if name == "clear":
        return {"action": "clear"}
    if name == "dismiss":
        return {"action": "dismiss_error"}
    if name == "model" and arg:
        return {"action": "configure", "model": arg}
    if name == "system" and arg:
        return {"action": "configure", "system_prompt": arg}
    if name == "tokens" and arg:
        return {"action": "configure", "max_tokens": int(arg)}
    if name == "copy" and arg:
        return {"action": "copy", "index": int(arg)}
    if name == "help":
        return None
    raise ValueError(f"Unknown command: {line}")


class TranscriptPrinter:
    """Prints only the transcript entries not yet shown."""

    def __init__(self) -> None:
        self.shown = 0
        self.in_flight = False

    def render(self, frame: dict[str, Any]) -> list[str]:
        lines: list[str] = []
        messages = frame.get("messages", [])
        if len(messages) < self.shown:
            lines.append("-- conversation cleared --")
            self.shown = 0
        for index in range(self.shown, len(messages)):
            message = messages[index]
            lines.append(f"[{index}] {message['role']}: {message['content']}")
        self.shown = len(messages)

        if frame.get("in_flight") and not self.in_flight:
            lines.append("... thinking")
        self.in_flight = bool(frame.get("in_flight"))
        return lines


async def _receive(websocket: Any, printer: TranscriptPrinter) -> None:
    async for raw in websocket:
        frame = json.loads(raw)
        kind = frame.get("type")
        if kind == "state":
            for line in printer.render(frame):
                print(line)
        elif kind == "copied":
            print(frame["content"])
        elif kind == "error":
            print(f"! {frame.get('error')}: {frame.get('detail')}")


async def run_client(url: str) -> None:
    """Connect to the service and relay stdin lines until /quit."""

    printer = TranscriptPrinter()
    async with websockets.connect(url, ping_interval=None) as websocket:
        logger.info("Connected to %s", url)
        receiver = asyncio.create_task(_receive(websocket, printer))
        try:
            while True:
                line = await asyncio.to_thread(input)
                if line.strip() == "/quit":
                    break
                try:
                    frame = command_to_frame(line)
                except ValueError as exc:
                    print(f"{exc}\n{HELP}")
                    continue
                if frame is None:
                    if line.strip() == "/help":
                        print(HELP)
                    continue
                await websocket.send(json.dumps(frame))
        finally:
            receiver.cancel()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Terminal client for Apollo Chat.")
    parser.add_argument("--url", default=DEFAULT_URL, help="WebSocket URL (default: %(default)s)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    try:
        asyncio.run(run_client(args.url))
    except (KeyboardInterrupt, EOFError):  # pragma: no cover - manual usage only
        pass


if __name__ == "__main__":  # pragma: no cover
    main()
