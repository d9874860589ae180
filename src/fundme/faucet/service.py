"""
Faucet Service - deposits and token requests

Callers deposit native value to become eligible, then request a fixed
token amount at most once per cooldown period.

request_tokens follows checks-effects-interactions:
1. Run the three gates (threshold, cooldown, reserve)
2. Record the withdrawal time
3. Only then call the token's transfer, and reject a transfer the token
   reports as failed

Because the ledger is updated before control leaves the faucet, a token
that calls back into request_tokens sees the new timestamp and is
rejected by the cooldown gate.

The faucet is usable directly or as the implementation behind an
UpgradeableProxy. A proxy never runs the constructor against its own
storage, so the proxy's token and configuration are set once through
``initialize``.

Metrics and the "Funds deposited" / "Tokens dispensed" logs are
registered as commit hooks and only fire for committed transactions.
"""

from typing import Any

from fundme.faucet.events import FundsDeposited, TokensDispensed
from fundme.faucet.invariants import (
    validate_cooldown_elapsed,
    validate_exchange_threshold,
    validate_faucet_reserve,
    validate_nonzero_exchange,
)
from fundme.faucet.ledger import FaucetLedger
from fundme.faucet.models import FaucetAccount, FaucetConfig, WithdrawalEligibility
from fundme.kernel.context import ExecutionContext
from fundme.kernel.contract import Contract, external
from fundme.kernel.errors import (
    FaucetAlreadyInitialized,
    FaucetNotInitialized,
    TokenTransferFailed,
    ZeroAddress,
)
from fundme.kernel.ids import is_zero_address, normalize_address
from fundme.kernel.logging import get_logger
from fundme.kernel.metrics import faucet_deposits_total, faucet_tokens_dispensed_total

logger = get_logger(__name__)

_TOKEN_KEY = "faucet.token"
_CONFIG_KEY = "faucet.config"


class FaucetService(Contract):
    """Token faucet gated by deposits and a per-account cooldown"""

    def constructor(
        self,
        ctx: ExecutionContext,
        token: str | None = None,
        config: FaucetConfig | dict[str, Any] | None = None,
    ) -> None:
        """
        Bind the faucet to its token and freeze its configuration

        Deploying without a token leaves the faucet uninitialized, which is
        how an implementation meant for a proxy is deployed.

        Args:
            token: Address of the token paid out (None to defer to ``initialize``)
            config: Faucet parameters (defaults if None)

        Raises:
            ZeroAddress: If token is the zero address
        """
        if token is not None:
            self._bind(ctx, token, config)

    @external
    def initialize(
        self,
        ctx: ExecutionContext,
        token: str,
        config: FaucetConfig | dict[str, Any] | None = None,
    ) -> None:
        """
        One-time setup of token and configuration for the executing storage

        Raises:
            FaucetAlreadyInitialized: If a token is already bound
            ZeroAddress: If token is the zero address
        """
        if _TOKEN_KEY in ctx.storage:
            raise FaucetAlreadyInitialized(ctx.address)
        self._bind(ctx, token, config)

        faucet, bound = ctx.address, normalize_address(token)
        ctx.on_commit(lambda: logger.info("Faucet initialized", faucet=faucet, token=bound))

    # ========== State-changing operations ==========

    @external(payable=True)
    def deposit_funds(self, ctx: ExecutionContext) -> int:
        """
        Credit the attached value to the caller's exchanged value

        The value stays in the faucet's native balance.

        Returns:
            The caller's exchanged value after the deposit

        Raises:
            FaucetNotInitialized: If no token is bound yet
            ZeroValueExchange: If no value is attached
        """
        self._token(ctx)
        validate_nonzero_exchange(ctx.sender, ctx.value)

        account = FaucetLedger(ctx.storage).record_deposit(ctx.sender, ctx.value)

        ctx.emit(
            "FundsDeposited",
            FundsDeposited(
                account=account.address,
                amount=ctx.value,
                exchanged_value=account.exchanged_value,
            ),
        )
        faucet, amount = ctx.address, ctx.value

        def committed() -> None:
            faucet_deposits_total.inc()
            logger.info(
                "Funds deposited",
                faucet=faucet,
                account=account.address,
                amount=amount,
                exchanged_value=account.exchanged_value,
            )

        ctx.on_commit(committed)
        return account.exchanged_value

    @external
    def request_tokens(self, ctx: ExecutionContext) -> int:
        """
        Pay the configured withdrawal amount to the caller

        Returns:
            Timestamp at which the caller may request again

        Raises:
            InsufficientExchangedFunds: If the caller deposited too little (gate 1)
            InsufficientTimeElapsedSinceLastWithdrawal: If the cooldown is active (gate 2)
            InsufficientFaucetTokenBalance: If the reserve cannot pay (gate 3)
            TokenTransferFailed: If the token reports the transfer as failed
        """
        config = self._config(ctx)
        ledger = FaucetLedger(ctx.storage)
        account = ledger.get(ctx.sender)

        validate_exchange_threshold(account, config)
        validate_cooldown_elapsed(account, config, ctx.now)
        validate_faucet_reserve(ctx.address, self._reserve(ctx), config)

        # Effects before interaction: a reentrant request sees this timestamp
        account = ledger.record_withdrawal(ctx.sender, ctx.now)
        next_withdrawal_at = account.next_withdrawal_time(config)

        token = self._token(ctx)
        paid = ctx.call(token, "transfer", ctx.sender, config.withdrawal_amount)
        # A token may signal failure by returning False; no return value counts as success
        if paid is not None and not paid:
            raise TokenTransferFailed(token, ctx.sender, config.withdrawal_amount)

        ctx.emit(
            "TokensDispensed",
            TokensDispensed(
                account=account.address,
                amount=config.withdrawal_amount,
                withdrawn_at=ctx.now,
                next_withdrawal_at=next_withdrawal_at,
            ),
        )
        faucet = ctx.address

        def committed() -> None:
            faucet_tokens_dispensed_total.inc(config.withdrawal_amount)
            logger.info(
                "Tokens dispensed",
                faucet=faucet,
                account=account.address,
                amount=config.withdrawal_amount,
                next_withdrawal_at=next_withdrawal_at,
            )

        ctx.on_commit(committed)
        return next_withdrawal_at

    # ========== Views ==========

    @external
    def get_balance(self, ctx: ExecutionContext) -> int:
        """Native value held by the faucet (sum of all deposits)"""
        return ctx.self_balance

    @external
    def token_reserve(self, ctx: ExecutionContext) -> int:
        """Tokens the faucet can still pay out"""
        return self._reserve(ctx)

    @external
    def get_account(self, ctx: ExecutionContext, address: str) -> FaucetAccount:
        return FaucetLedger(ctx.storage).get(address)

    @external
    def eligibility_of(self, ctx: ExecutionContext, address: str) -> WithdrawalEligibility:
        """Eligibility of an account at the current block time"""
        return FaucetLedger(ctx.storage).get(address).eligibility(self._config(ctx), ctx.now)

    @external
    def token(self, ctx: ExecutionContext) -> str:
        return self._token(ctx)

    @external
    def config(self, ctx: ExecutionContext) -> FaucetConfig:
        return self._config(ctx)

    # ========== Internals ==========

    def _bind(
        self,
        ctx: ExecutionContext,
        token: str,
        config: FaucetConfig | dict[str, Any] | None,
    ) -> None:
        if is_zero_address(token):
            raise ZeroAddress("token")
        if config is None:
            config = FaucetConfig()
        elif isinstance(config, dict):
            config = FaucetConfig(**config)

        ctx.storage[_TOKEN_KEY] = normalize_address(token)
        ctx.storage[_CONFIG_KEY] = config.model_dump()

    def _config(self, ctx: ExecutionContext) -> FaucetConfig:
        if _CONFIG_KEY not in ctx.storage:
            raise FaucetNotInitialized(ctx.address)
        return FaucetConfig(**ctx.storage[_CONFIG_KEY])

    def _token(self, ctx: ExecutionContext) -> str:
        if _TOKEN_KEY not in ctx.storage:
            raise FaucetNotInitialized(ctx.address)
        return ctx.storage[_TOKEN_KEY]

    def _reserve(self, ctx: ExecutionContext) -> int:
        return ctx.call(self._token(ctx), "balance_of", ctx.address)
