"""Encoding and decoding of MCP JSON-RPC envelopes for a single HTTP exchange.

Upstreams answer either with a plain JSON body or with a ``text/event-stream``
body carrying one event whose JSON payload is spread over ``data:`` lines.
"""

import json
from typing import Any

from pydantic import ValidationError

from .exceptions import MalformedResponseError, UpstreamProtocolError
from .schemas import JSONRPCRequest, JSONRPCResponse


EVENT_STREAM_MEDIA_TYPE = "text/event-stream"
ACCEPT_HEADER = f"application/json, {EVENT_STREAM_MEDIA_TYPE}"
EVENT_STREAM_DATA_MARKER = "data:"


def parse_event_stream(text: str) -> str:
    """Reassemble the JSON payload of an event-stream body.
    
    Every line starting with the ``data:`` marker contributes its remainder
    (minus one optional leading space); all other lines are ignored.
    
    Args:
        text: Raw event-stream body.
        
    Returns:
        The concatenated payload string.
        
    Raises:
        MalformedResponseError: If the body carries no data lines.
    """
    chunks: list[str] = []
    # Only "\n" ends a line; JSON strings may hold other line separators raw
    for line in text.split("\n"):
        line = line.removesuffix("\r")
        if not line.startswith(EVENT_STREAM_DATA_MARKER):
            continue
        chunk = line[len(EVENT_STREAM_DATA_MARKER):]
        if chunk.startswith(" "):
            chunk = chunk[1:]
        chunks.append(chunk)

    if not chunks:
        raise MalformedResponseError("no data found in event-stream response")

    return "".join(chunks)


class ProtocolCodec:
    """Builds request envelopes and turns raw response bodies into results."""

    def encode_request(
        self,
        method: str,
        params: dict[str, Any] | None,
        request_id: str | int,
    ) -> dict[str, Any]:
        """Build the JSON body of a request.
        
        Args:
            method: JSON-RPC method name.
            params: Method parameters.
            request_id: Correlation identifier.
            
        Returns:
            JSON-serialisable request envelope.
        """
        request = JSONRPCRequest(method=method, params=params or {}, id=request_id)
        return request.model_dump()

    def decode_response(self, body: str, content_type: str = "") -> JSONRPCResponse:
        """Parse a response body into a JSON-RPC response.
        
        Args:
            body: Raw response body text.
            content_type: Value of the response Content-Type header.
            
        Returns:
            The parsed response; its ``result`` is guaranteed to be present.
            
        Raises:
            UpstreamProtocolError: If the response carries an error object.
            MalformedResponseError: If the body is not a valid JSON-RPC response.
        """
        if EVENT_STREAM_MEDIA_TYPE in content_type.lower():
            payload = parse_event_stream(body)
        else:
            payload = body

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MalformedResponseError(f"invalid JSON: {e}") from e

        return self.decode_envelope(data)

    def decode_envelope(self, data: Any) -> JSONRPCResponse:
        """Validate an already-parsed JSON-RPC response envelope.
        
        Raises:
            UpstreamProtocolError: If the response carries an error object.
            MalformedResponseError: If required fields are missing.
        """
        if not isinstance(data, dict):
            raise MalformedResponseError("response is not a JSON object")

        try:
            response = JSONRPCResponse(**data)
        except ValidationError as e:
            raise MalformedResponseError(f"invalid envelope: {e.errors()[0]['msg']}") from e

        if response.error is not None:
            raise UpstreamProtocolError(
                error_code=response.error.code,
                error_message=response.error.message,
                data=response.error.data,
            )

        if "result" not in data:
            raise MalformedResponseError("response has neither 'result' nor 'error'")

        return response
