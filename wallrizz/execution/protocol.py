"""Messages exchanged with isolated extension workers.

Each message is one JSON object per line: `{"type": ..., "data": ...}`.

Caller -> worker: `start` (carries the request) and `abort`.
Worker -> caller: exactly one of `success`, `error` or `systemError`.

Worker replies are decoded here into a closed union of outcomes, so no
string-tagged payload travels further than this module.
"""

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..models import ControlFlow, OperationalError, ScriptError

__all__ = [
    "ExecutionRequest",
    "MessageType",
    "Outcome",
    "ScriptFailure",
    "Success",
    "SystemFailure",
    "decode_command",
    "decode_outcome",
    "encode_abort",
    "encode_outcome",
    "encode_start",
    "outcome_to_error",
    "pack_results",
    "unpack_results",
]


class MessageType(StrEnum):
    """Message kinds."""

    START = "start"
    ABORT = "abort"
    SUCCESS = "success"
    ERROR = "error"
    SYSTEM_ERROR = "systemError"


@dataclass(slots=True)
class ExecutionRequest:
    """Capabilities of a script to call with the same arguments.

    Attributes:
        script_path: The extension script file
        capabilities: Capability name -> optional output path, called in order
        args: Positional arguments for every capability
    """

    script_path: str
    capabilities: dict[str, str | None]
    args: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation."""
        return {"scriptPath": self.script_path, "scriptMethods": self.capabilities, "args": self.args}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExecutionRequest":
        """Build a request from its wire representation."""
        return cls(
            script_path=str(data["scriptPath"]),
            capabilities=dict(data["scriptMethods"]),
            args=list(data.get("args", [])),
        )


@dataclass(frozen=True, slots=True)
class Success:
    """Capabilities ran, `value` maps each invoked capability to its result."""

    value: Any


@dataclass(frozen=True, slots=True)
class ScriptFailure:
    """The extension code raised."""

    source_file: str
    cause: str


@dataclass(frozen=True, slots=True)
class SystemFailure:
    """Operational failure, `body` is a JSON string."""

    name: str
    description: str
    body: str


Outcome = Success | ScriptFailure | SystemFailure


def _encode(message_type: MessageType, data: Any = None) -> str:  # noqa: ANN401
    message: dict[str, Any] = {"type": str(message_type)}
    if data is not None:
        message["data"] = data
    return json.dumps(message, default=str)


def encode_start(request: ExecutionRequest) -> str:
    """Return the message starting `request`."""
    return _encode(MessageType.START, request.to_dict())


def encode_abort() -> str:
    """Return the message asking a worker to stop."""
    return _encode(MessageType.ABORT)


def encode_outcome(outcome: Outcome) -> str:
    """Return the worker reply for `outcome`."""
    match outcome:
        case Success(value=value):
            return json.dumps({"type": str(MessageType.SUCCESS), "data": value}, default=str)
        case ScriptFailure(source_file=source_file, cause=cause):
            return _encode(MessageType.ERROR, [source_file, cause])
        case SystemFailure(name=name, description=description, body=body):
            return _encode(MessageType.SYSTEM_ERROR, [name, description, body])
    msg = f"Unknown outcome: {outcome!r}"
    raise TypeError(msg)


def _parse(line: str | bytes) -> dict[str, Any] | None:
    try:
        message = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(message, dict) or "type" not in message:
        return None
    return message


def decode_outcome(line: str | bytes) -> Outcome | None:
    """Decode a worker reply, None if it isn't a terminal message."""
    message = _parse(line)
    if message is None:
        return None
    data = message.get("data")
    try:
        match message["type"]:
            case MessageType.SUCCESS:
                return Success(data)
            case MessageType.ERROR:
                source_file, cause = data
                return ScriptFailure(str(source_file), str(cause))
            case MessageType.SYSTEM_ERROR:
                name, description, body = data
                return SystemFailure(str(name), str(description), str(body))
    except (TypeError, ValueError):
        return None
    return None


def decode_command(line: str | bytes) -> tuple[MessageType, ExecutionRequest | None] | None:
    """Decode a message sent to a worker, None if it isn't understood."""
    message = _parse(line)
    if message is None:
        return None
    match message["type"]:
        case MessageType.START:
            return MessageType.START, ExecutionRequest.from_dict(message["data"])
        case MessageType.ABORT:
            return MessageType.ABORT, None
    return None


def outcome_to_error(outcome: ScriptFailure | SystemFailure) -> ScriptError | OperationalError:
    """Return the exception matching a failed outcome."""
    if isinstance(outcome, ScriptFailure):
        return ScriptError(outcome.source_file, outcome.cause)
    try:
        body = json.loads(outcome.body)
    except json.JSONDecodeError:
        body = outcome.body
    return OperationalError(outcome.name, outcome.description, body)


def pack_results(results: dict[str, Any]) -> dict[str, Any]:
    """Return the `success` payload for capability results."""
    stopped = []
    values = {}
    for capability, value in results.items():
        if value is ControlFlow.STOP_REQUESTED:
            stopped.append(capability)
        else:
            values[capability] = value
    return {"results": values, "stopped": stopped}


def unpack_results(data: Any) -> dict[str, Any]:  # noqa: ANN401
    """Inverse of `pack_results`."""
    if not isinstance(data, dict) or not isinstance(data.get("results"), dict):
        msg = f"Malformed success payload: {data!r}"
        raise ValueError(msg)
    results = dict(data["results"])
    for capability in data.get("stopped") or []:
        results[capability] = ControlFlow.STOP_REQUESTED
    return results
