"""
Contract base class and call data

Contract code is a plain Python class whose external entry points are
marked with ``@external``. Instances hold no state: everything persistent
lives in the storage of the address the code executes for, which is what
lets the same code run behind a proxy against the proxy's storage.
"""

from typing import TYPE_CHECKING, Any, Callable, TypeVar

from pydantic import BaseModel, Field

from fundme.kernel.errors import NonPayableFunction, UnknownFunction

if TYPE_CHECKING:
    from fundme.kernel.context import ExecutionContext

F = TypeVar("F", bound=Callable[..., Any])


class Call(BaseModel):
    """
    Call data: which function to run and with which arguments

    Call data is opaque to proxies; they forward it without looking
    inside.
    """

    function: str = Field(..., min_length=1)
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


def external(func: F | None = None, *, payable: bool = False) -> Any:
    """
    Mark a contract method as callable from outside

    Usage:
        @external
        def balance_of(self, ctx, account): ...

        @external(payable=True)
        def deposit_funds(self, ctx): ...
    """

    def decorate(f: F) -> F:
        f.__external__ = True  # type: ignore[attr-defined]
        f.__payable__ = payable  # type: ignore[attr-defined]
        return f

    if func is None:
        return decorate
    return decorate(func)


class Contract:
    """
    Base class for contract code

    ``handle`` is the single entry point the chain invokes for every
    message call. Subclasses override ``constructor`` to initialize
    storage at deployment and may override ``handle`` to intercept
    calls before regular dispatch (as proxies do).
    """

    def constructor(self, ctx: "ExecutionContext", *args: Any, **kwargs: Any) -> None:
        """Run once at deployment; default does nothing"""
        if args or kwargs:
            raise TypeError(f"{type(self).__name__} takes no constructor arguments")

    def handle(self, ctx: "ExecutionContext", call: Call) -> Any:
        """
        Dispatch call data to the matching external method

        Raises:
            UnknownFunction: If no external method has that name
            NonPayableFunction: If value is attached to a non-payable method
        """
        method = self._resolve(ctx, call.function)
        if ctx.value and not method.__payable__:
            raise NonPayableFunction(ctx.address, call.function, ctx.value)
        return method(ctx, *call.args, **call.kwargs)

    def _resolve(self, ctx: "ExecutionContext", function: str) -> Any:
        method = None if function.startswith("_") else getattr(self, function, None)
        if method is None or not getattr(method, "__external__", False):
            raise UnknownFunction(ctx.address, function)
        return method

    @classmethod
    def external_functions(cls) -> list[str]:
        """Names of every external entry point, sorted"""
        return sorted(
            name
            for name in dir(cls)
            if not name.startswith("_") and getattr(getattr(cls, name), "__external__", False)
        )
