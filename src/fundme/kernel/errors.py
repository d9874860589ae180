"""
Custom exceptions for FundMe

Two families share the FundMeError root:
- ExecutionError: raised by the execution environment itself
  (unknown functions, missing code, native balance, call depth)
- ContractRevert: raised by contract code to reject a call

Every ContractRevert carries a stable ``selector`` so callers can match
failures without depending on the message text. Reverts are never
rewritten on their way back to the original caller.
"""


class FundMeError(Exception):
    """Base exception for all FundMe errors"""

    pass


# Execution environment errors


class ExecutionError(FundMeError):
    """Base class for errors raised by the execution environment"""

    pass


class UnknownFunction(ExecutionError):
    """Raised when call data names a function the target does not expose"""

    def __init__(self, address: str, function: str) -> None:
        self.address = address
        self.function = function
        super().__init__(f"Contract {address} has no external function '{function}'")


class NonPayableFunction(ExecutionError):
    """Raised when value is attached to a function that does not accept it"""

    def __init__(self, address: str, function: str, value: int) -> None:
        self.address = address
        self.function = function
        self.value = value
        super().__init__(
            f"Function '{function}' of {address} is not payable (value: {value})"
        )


class NoCodeAtAddress(ExecutionError):
    """Raised when a function call targets an address without code"""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"No contract code at {address}")


class InsufficientBalance(ExecutionError):
    """Raised when attached value exceeds the sender's native balance"""

    def __init__(self, address: str, balance: int, required: int) -> None:
        self.address = address
        self.balance = balance
        self.required = required
        super().__init__(
            f"Account {address} balance {balance} is below required value {required}"
        )


class CallDepthExceeded(ExecutionError):
    """Raised when nested calls exceed the configured maximum depth"""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        super().__init__(f"Call depth exceeded maximum of {max_depth}")


class TransactionInProgress(ExecutionError):
    """Raised when a transaction is started while another one is executing"""

    def __init__(self) -> None:
        super().__init__(
            "A transaction is already executing - transactions are processed serially"
        )


# Contract reverts


class ContractRevert(FundMeError):
    """
    Base class for failures signalled by contract code

    Raising a ContractRevert rolls back every state change of the
    current call frame. The selector identifies the failure kind.
    """

    selector: str = "REVERT"


class InputValidationError(ContractRevert):
    """Raised when call arguments or attached value are invalid"""

    pass


class PreconditionFailed(ContractRevert):
    """Raised when contract state does not allow the requested operation"""

    pass


class GuardViolation(ContractRevert):
    """Raised when a one-time or authorization guard rejects the call"""

    pass


class ZeroAddress(InputValidationError):
    """Raised when the zero address is supplied where a real one is required"""

    selector = "UUPSPROXY_ZERO_ADDRESS"

    def __init__(self, argument: str = "address") -> None:
        self.argument = argument
        super().__init__(f"Zero address is not allowed for {argument}")


class InvalidAddress(InputValidationError):
    """Raised when a value is not a 0x-prefixed, 40 hex digit address"""

    selector = "INVALID_ADDRESS"

    def __init__(self, address: object) -> None:
        self.address = address
        super().__init__(f"Invalid address {address!r}")


class AlreadyInitialized(GuardViolation):
    """Raised when the proxy initializer runs a second time"""

    selector = "UUPSPROXY_ALREADY_INITIALIZED"

    def __init__(self, proxy: str, implementation: str) -> None:
        self.proxy = proxy
        self.implementation = implementation
        super().__init__(
            f"Proxy {proxy} already initialized with implementation {implementation}"
        )


class ProxyNotInitialized(PreconditionFailed):
    """Raised when a call is forwarded before an implementation is registered"""

    selector = "UUPSPROXY_NOT_INITIALIZED"

    def __init__(self, proxy: str) -> None:
        self.proxy = proxy
        super().__init__(f"Proxy {proxy} has no implementation registered")


class UnauthorizedUpgrade(GuardViolation):
    """Raised when an implementation refuses an upgrade request"""

    selector = "UUPS_UNAUTHORIZED_UPGRADE"

    def __init__(self, caller: str) -> None:
        self.caller = caller
        super().__init__(f"Caller {caller} is not authorized to upgrade")


class NotDelegated(PreconditionFailed):
    """Raised when a proxy-only function is called on the implementation directly"""

    selector = "UUPS_NOT_DELEGATED"

    def __init__(self, function: str) -> None:
        self.function = function
        super().__init__(f"Function '{function}' must be called through a proxy")


class NotProxiable(PreconditionFailed):
    """Raised when an upgrade target does not use the same implementation slot"""

    selector = "UUPS_UNSUPPORTED_PROXIABLE_UUID"

    def __init__(self, implementation: str) -> None:
        self.implementation = implementation
        super().__init__(f"Implementation {implementation} is not UUPS proxiable")


# Faucet reverts


class ZeroValueExchange(InputValidationError):
    """Raised when a deposit carries no value"""

    selector = "ZERO_VALUE_EXCHANGE"

    def __init__(self, account: str) -> None:
        self.account = account
        super().__init__(f"Deposit from {account} carries no value")


class InsufficientExchangedFunds(PreconditionFailed):
    """Raised when an account has not deposited enough to be eligible"""

    selector = "INSUFFICIENT_EXCHANGED_FUNDS_FOR_FUNDME_TOKEN"

    def __init__(self, account: str, exchanged_value: int, minimum: int) -> None:
        self.account = account
        self.exchanged_value = exchanged_value
        self.minimum = minimum
        super().__init__(
            f"Account {account} exchanged {exchanged_value}, "
            f"minimum for withdrawal is {minimum}"
        )


class InsufficientTimeElapsedSinceLastWithdrawal(PreconditionFailed):
    """Raised when the withdrawal cooldown of an account is still active"""

    selector = "INSUFFICIENT_TIME_ELAPSED_SINCE_LAST_WITHDRAWAL"

    def __init__(self, account: str, last_withdrawal_time: int, available_at: int) -> None:
        self.account = account
        self.last_withdrawal_time = last_withdrawal_time
        self.available_at = available_at
        super().__init__(
            f"Account {account} withdrew at {last_withdrawal_time}, "
            f"next withdrawal available at {available_at}"
        )


class InsufficientFaucetTokenBalance(PreconditionFailed):
    """Raised when the faucet reserve cannot cover a withdrawal"""

    selector = "INSUFFICIENT_BALANCE_IN_FAUCET_FOR_WITHDRAWAL_REQUEST"

    def __init__(self, faucet: str, reserve: int, required: int) -> None:
        self.faucet = faucet
        self.reserve = reserve
        self.required = required
        super().__init__(
            f"Faucet {faucet} holds {reserve} tokens, withdrawal requires {required}"
        )


class FaucetNotInitialized(PreconditionFailed):
    """Raised when a faucet is used before its token and config are set"""

    selector = "FAUCET_NOT_INITIALIZED"

    def __init__(self, faucet: str) -> None:
        self.faucet = faucet
        super().__init__(f"Faucet {faucet} has no token or configuration set")


class FaucetAlreadyInitialized(GuardViolation):
    """Raised when a faucet's token and config are set a second time"""

    selector = "FAUCET_ALREADY_INITIALIZED"

    def __init__(self, faucet: str) -> None:
        self.faucet = faucet
        super().__init__(f"Faucet {faucet} is already initialized")


class TokenTransferFailed(PreconditionFailed):
    """Raised when a token reports a failed transfer instead of raising"""

    selector = "SAFE_ERC20_FAILED_OPERATION"

    def __init__(self, token: str, recipient: str, amount: int) -> None:
        self.token = token
        self.recipient = recipient
        self.amount = amount
        super().__init__(f"Token {token} did not transfer {amount} to {recipient}")


# Token reverts


class InvalidReceiver(InputValidationError):
    """Raised when tokens are sent to the zero address"""

    selector = "ERC20_INVALID_RECEIVER"

    def __init__(self, receiver: str) -> None:
        self.receiver = receiver
        super().__init__(f"Invalid token receiver {receiver}")


class InsufficientTokenBalance(PreconditionFailed):
    """Raised when a token holder transfers more than it owns"""

    selector = "ERC20_INSUFFICIENT_BALANCE"

    def __init__(self, holder: str, balance: int, needed: int) -> None:
        self.holder = holder
        self.balance = balance
        self.needed = needed
        super().__init__(f"Holder {holder} has {balance} tokens, needs {needed}")


# Persistence errors


class EventStoreError(FundMeError):
    """Raised when the event store cannot persist or read events"""

    pass
