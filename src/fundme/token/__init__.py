"""
Token Module - the fungible token the faucet pays out
"""

from fundme.token.contract import TOKEN_DECIMALS, TOKEN_NAME, TOKEN_SYMBOL, FundMeToken

__all__ = ["FundMeToken", "TOKEN_NAME", "TOKEN_SYMBOL", "TOKEN_DECIMALS"]
