"""
Vault errors

Every public vault operation fails synchronously with one of these. Nothing
is retried internally; the surrounding Chain.atomic() scope discards any
partial state change.
"""

from typing import Optional


class VaultError(Exception):
    """Base class for vault failures"""


class InvalidConfig(VaultError, ValueError):
    """Threshold, weight or duration validation failed"""


class ZeroInput(VaultError, ValueError):
    """Zero desired amounts, zero shares burned or zero shares minted"""


class InvalidRecipient(VaultError, ValueError):
    """Recipient is empty, the zero address or the vault itself"""


class SlippageExceeded(VaultError):
    """Resulting amount is below the caller's minimum"""

    def __init__(self, token: str, amount: int, minimum: int):
        super().__init__(f"{token}: {amount} < minimum {minimum}")
        self.token = token
        self.amount = amount
        self.minimum = minimum


class ZeroCross(VaultError):
    """Desired amounts are degenerate relative to the vault's token ratio"""


class SupplyCapExceeded(VaultError):
    """Minting would push total supply above max_total_supply"""


class NotEligible(VaultError):
    """Rebalance gate is not satisfied"""

    def __init__(self, reason: str, detail: Optional[str] = None):
        super().__init__(f"{reason}: {detail}" if detail else reason)
        self.reason = reason


class Unauthorized(VaultError, PermissionError):
    """Caller lacks the manager, governance or pending-manager role"""


class ArithmeticOverflow(VaultError, ArithmeticError):
    """Unsigned narrowing overflow or subtraction underflow"""


class ReentrantCall(VaultError, RuntimeError):
    """A mutating vault operation was entered while another was running"""


class InvalidToken(VaultError, ValueError):
    """Token may not be swept because it is one of the vault's pair tokens"""
