"""Type-erased handler capabilities bound to native request/response types."""

import asyncio
import inspect
import types
import typing
from typing import Any, Callable, Literal, get_args, get_origin

from pydantic import TypeAdapter, ValidationError

from typedmcp.mcp.errors import InvalidParamsError


def _type_hints(fn: Callable[..., Any]) -> dict[str, Any]:
    target = fn if inspect.isroutine(fn) else type(fn).__call__
    try:
        return typing.get_type_hints(target)
    except (NameError, TypeError):
        return {}


def _single_parameter(fn: Callable[..., Any]) -> inspect.Parameter:
    params = [
        p
        for p in inspect.signature(fn).parameters.values()
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    if len(params) != 1:
        raise TypeError(
            f"Handler {getattr(fn, '__name__', fn)!r} must accept exactly one "
            f"positional argument, got {len(params)}"
        )
    return params[0]


def _matches(value: Any, tp: Any) -> bool:
    """Check that value is an instance of the (possibly generic) type tp."""
    if tp is Any:
        return True
    if typing.is_typeddict(tp):
        return isinstance(value, dict)
    origin = get_origin(tp) or tp
    if origin is typing.Annotated:
        return _matches(value, get_args(tp)[0])
    if origin in (typing.Union, types.UnionType):
        return any(_matches(value, arg) for arg in get_args(tp))
    if origin is Literal:
        return value in get_args(tp)
    if isinstance(origin, type):
        return isinstance(value, origin)
    return True


async def _invoke(fn: Callable[..., Any], argument: Any) -> Any:
    if inspect.iscoroutinefunction(fn):
        return await fn(argument)
    # Plain callables may block; keep them off the event loop
    result = await asyncio.to_thread(fn, argument)
    if inspect.isawaitable(result):
        result = await result
    return result


class ToolHandler:
    """
    A tool callable bound to one request type and one response type.

    Types default to the callable's annotations: the single positional
    parameter gives the request type, the return annotation the response
    type. A callable without a return annotation has no response type.
    """

    def __init__(
        self,
        fn: Callable[[Any], Any],
        request_type: Any = None,
        response_type: Any = None,
    ):
        hints = _type_hints(fn)
        if request_type is None:
            param = _single_parameter(fn)
            request_type = hints.get(param.name, Any)
        if response_type is None:
            response_type = hints.get("return")

        self._fn = fn
        self._request_type = request_type
        self._response_type = response_type
        self._request_adapter: TypeAdapter[Any] = TypeAdapter(request_type)
        self._response_adapter: TypeAdapter[Any] = TypeAdapter(
            Any if response_type is None else response_type
        )

    @property
    def request_type(self) -> Any:
        return self._request_type

    @property
    def response_type(self) -> Any:
        return self._response_type

    def decode(self, payload: Any) -> Any:
        """Validate a raw JSON payload into the bound request type."""
        try:
            return self._request_adapter.validate_python(payload)
        except ValidationError as e:
            raise InvalidParamsError(
                "Invalid arguments",
                data=[
                    {"loc": list(err["loc"]), "msg": err["msg"]}
                    for err in e.errors(include_url=False)
                ],
            ) from e

    async def call(self, request: Any) -> Any:
        """Invoke the handler, rejecting a request of the wrong concrete type."""
        if not _matches(request, self._request_type):
            raise InvalidParamsError(
                f"Expected {self._request_type!r}, got {type(request).__name__}"
            )
        return await _invoke(self._fn, request)

    def encode(self, result: Any) -> Any:
        """Convert a handler result into JSON-compatible Python data."""
        return self._response_adapter.dump_python(result, mode="json")


class ResourceHandler:
    """A resource reader taking the requested URI, bound to one response type."""

    def __init__(self, fn: Callable[[str], Any], response_type: Any = None):
        _single_parameter(fn)
        if response_type is None:
            response_type = _type_hints(fn).get("return")

        self._fn = fn
        self._response_type = response_type
        self._response_adapter: TypeAdapter[Any] = TypeAdapter(
            Any if response_type is None else response_type
        )

    @property
    def response_type(self) -> Any:
        return self._response_type

    async def read(self, uri: str) -> Any:
        return await _invoke(self._fn, uri)

    def encode(self, result: Any) -> str:
        """Serialize a read result to a JSON string."""
        return self._response_adapter.dump_json(result).decode("utf-8")
