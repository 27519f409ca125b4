"""Interactive chat against a llama.cpp server's completion endpoint."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, TextIO

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://127.0.0.1:8080"
SYSTEM_PROMPT = "You are a helpful AI assistant.  Answer concisely and directly."
NUM_PREDICT = 1024

_PROMPT_TEMPLATE = (
    "\n"
    "\t\t<|begin_of_text|><|start_header_id|>system<|end_header_id|>\n"
    "\t\t\n"
    "\t\t{system_prompt}<|eot_id|><|start_header_id|>user<|end_header_id|>\n"
    "\t\t\n"
    "\t\t{prompt}<|eot_id|><|start_header_id|>assistant<|end_header_id|>\n"
    "\t\t"
)

_DATA_PREFIX = b"data: "


class CompletionError(Exception):
    """Raised when a completion request fails or its response is malformed."""


@dataclass
class CompletionRequest:
    """Body of a request to the completion endpoint."""

    prompt: str = ""
    temperature: float = 0.0
    top_k: int = 0
    top_p: float = 0.0
    min_p: float = 0.0
    n_predict: int | None = None
    n_keep: int = 0
    stream: bool = False
    stop: list[str] = field(default_factory=list)
    tfs_z: float = 0.0
    typical_p: float = 0.0
    repeat_penalty: float = 0.0
    repeat_last_n: int = 0
    penalize_nl: bool = False
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0
    mirostat: int = 0
    mirostat_tau: float = 0.0
    mirostat_eta: float = 0.0
    grammar: str = ""
    json_schema: str = ""
    seed: int = 0
    n_probs: int = 0
    id_slot: int = 0
    cache_prompt: bool = False
    system_prompt: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render the JSON body; empty optional fields are left out."""
        out: dict[str, Any] = {}
        if self.prompt:
            out["prompt"] = self.prompt
        out["temperature"] = self.temperature
        out["top_k"] = self.top_k
        out["top_p"] = self.top_p
        if self.min_p:
            out["min_p"] = self.min_p
        out["n_predict"] = self.n_predict
        out["n_keep"] = self.n_keep
        out["stream"] = self.stream
        if self.stop:
            out["stop"] = list(self.stop)
        out["tfs_z"] = self.tfs_z
        out["typical_p"] = self.typical_p
        out["repeat_penalty"] = self.repeat_penalty
        out["repeat_last_n"] = self.repeat_last_n
        out["penalize_nl"] = self.penalize_nl
        out["presence_penalty"] = self.presence_penalty
        out["frequency_penalty"] = self.frequency_penalty
        out["mirostat"] = self.mirostat
        optional = (
            ("mirostat_tau", self.mirostat_tau),
            ("mirostat_eta", self.mirostat_eta),
            ("grammar", self.grammar),
            ("json_schema", self.json_schema),
            ("seed", self.seed),
            ("n_probs", self.n_probs),
            ("id_slot", self.id_slot),
        )
        out.update((key, value) for key, value in optional if value)
        out["cache_prompt"] = self.cache_prompt
        if self.system_prompt is not None:
            out["system_prompt"] = self.system_prompt
        return out


@dataclass
class CompletionResponse:
    """A completion result, or one streamed chunk of it."""

    content: str = ""
    stop: bool = False
    model: str = ""
    stopped_eos: bool = False
    stopped_limit: bool = False
    stopped_word: bool = False
    stopping_word: str = ""
    timings: dict[str, float] = field(default_factory=dict)
    tokens_cached: int = 0
    tokens_evaluated: int = 0
    truncated: bool = False


_RESPONSE_FIELDS = (
    "content",
    "stop",
    "model",
    "stopped_eos",
    "stopped_limit",
    "stopped_word",
    "stopping_word",
    "tokens_cached",
    "tokens_evaluated",
    "truncated",
)


def parse_completion_response(data: bytes | str | Mapping[str, Any]) -> CompletionResponse:
    """Build a CompletionResponse from JSON text or an already decoded mapping."""
    if isinstance(data, (bytes, bytearray, str)):
        try:
            data = json.loads(data)
        except ValueError as err:
            raise CompletionError(f"unmarshalling response body: {err}") from err
    if not isinstance(data, Mapping):
        raise CompletionError(
            f"unmarshalling response body: expected an object, got {type(data).__name__}"
        )
    kwargs: dict[str, Any] = {
        name: data[name] for name in _RESPONSE_FIELDS if data.get(name) is not None
    }
    timings = data.get("timings")
    if timings is not None:
        if not isinstance(timings, Mapping):
            raise CompletionError("unmarshalling response body: timings must be an object")
        kwargs["timings"] = {str(k): float(v) for k, v in timings.items()}
    return CompletionResponse(**kwargs)


def build_prompt(user_says: str) -> str:
    """Wrap the user's text in the chat template with the fixed system prompt."""
    prompt = _PROMPT_TEMPLATE.replace("{system_prompt}", SYSTEM_PROMPT)
    return prompt.replace("{prompt}", user_says)


def _join_url(base_url: str, path: str) -> str:
    parts = urllib.parse.urlsplit(base_url)
    joined = parts.path.rstrip("/") + "/" + path.lstrip("/")
    return urllib.parse.urlunsplit(parts._replace(path=joined))


def _status_text(response: Any) -> str:
    return f"{response.getcode()} {response.reason}"


class LlamaCppClient:
    """Client for the completion endpoint of a llama.cpp server."""

    def __init__(self, base_url: str, timeout: float | None = None) -> None:
        self.base_url = base_url
        self.timeout = timeout

    @property
    def completion_url(self) -> str:
        return _join_url(self.base_url, "/completion")

    def _post(self, url: str, body: Mapping[str, Any]) -> Any:
        payload = json.dumps(body).encode("utf-8")
        request = urllib.request.Request(
            url,
            data=payload,
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        logger.debug("sending request POST %s: %s", url, payload.decode("utf-8"))
        try:
            return urllib.request.urlopen(request, timeout=self.timeout)
        except urllib.error.HTTPError as err:
            return err
        except (urllib.error.URLError, OSError, ValueError) as err:
            raise CompletionError(f"making HTTP request: {err}") from err

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        """Send one completion request and return the whole result."""
        url = self.completion_url
        try:
            with self._post(url, request.to_dict()) as response:
                if response.getcode() != 200:
                    raise CompletionError(
                        f"unexpected status code from POST {url}: {_status_text(response)}"
                    )
                try:
                    body = response.read()
                except OSError as err:
                    raise CompletionError(f"reading response body: {err}") from err
        except CompletionError as err:
            raise CompletionError(f"calling llama.cpp completion: {err}") from err
        logger.debug("response is %s", body.decode("utf-8", errors="replace"))
        try:
            return parse_completion_response(body)
        except CompletionError as err:
            raise CompletionError(f"calling llama.cpp completion: {err}") from err

    def stream_completion(self, request: CompletionRequest) -> Iterator[CompletionResponse]:
        """Send a completion request and yield each streamed chunk until one says stop."""
        with self._post(self.completion_url, request.to_dict()) as response:
            if response.getcode() != 200:
                raise CompletionError(
                    "unexpected status code from completion request: "
                    f"{_status_text(response)}"
                )
            for raw in response:
                if not raw.endswith(b"\n"):
                    break
                line = raw.strip()
                if not line:
                    continue
                logger.debug("response is %s", line.decode("utf-8", errors="replace"))
                if not line.startswith(_DATA_PREFIX):
                    text = line.decode("utf-8", errors="replace")
                    raise CompletionError(f"unexpected response line: {text!r}")
                chunk = parse_completion_response(line[len(_DATA_PREFIX) - 1:])
                yield chunk
                if chunk.stop:
                    return
        raise CompletionError("reading completion response: unexpected end of stream")


def run_chat(
    client: Any,
    initial_prompt: str = "",
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stream: bool = True,
) -> None:
    """Prompt for lines of input and print the model's answers until input ends."""
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    user_says = initial_prompt
    while True:
        if not user_says:
            stdout.write("\n> ")
            stdout.flush()
            line = stdin.readline()
            if not line.endswith("\n"):
                break
            user_says = line

        request = CompletionRequest(
            prompt=build_prompt(user_says),
            stream=True,
            n_predict=NUM_PREDICT,
        )
        try:
            if stream:
                for chunk in client.stream_completion(request):
                    stdout.write(chunk.content)
                    stdout.flush()
            else:
                response = client.complete(request)
                logger.debug("response is %r", response)
                stdout.write(f"{response.content}\n")
        except CompletionError as err:
            raise CompletionError(f"generating with llama.cpp: {err}") from err
        user_says = ""


def main(argv: list[str] | None = None) -> int:
    """Run the interactive chat; returns the process exit status."""
    parser = argparse.ArgumentParser(description="Chat with a llama.cpp server.")
    parser.add_argument(
        "--llm-endpoint",
        default=os.environ.get("LLM_ENDPOINT") or DEFAULT_ENDPOINT,
        help="llama.cpp endpoint to connect to",
    )
    parser.add_argument("--user", default="", help="Initial prompt to use")
    parser.add_argument("-v", "--verbosity", type=int, default=0, help="log level verbosity")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbosity >= 2 else logging.WARNING)

    client = LlamaCppClient(args.llm_endpoint)
    try:
        run_chat(client, args.user, sys.stdin, sys.stdout, stream=True)
    except CompletionError as err:
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())