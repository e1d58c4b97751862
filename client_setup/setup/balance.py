from __future__ import annotations

import logging
from decimal import Decimal

from web3 import Web3

from client_setup.config.network import MIN_DEPLOY_BALANCE_ETH, get_chain_config, get_rpc_url

logger = logging.getLogger(__name__)


def _build_w3(rpc_url: str) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url))


def get_balance_eth(address: str, rpc_url: str) -> Decimal:
    w3 = _build_w3(rpc_url)
    wei = w3.eth.get_balance(Web3.to_checksum_address(address))
    return Decimal(str(Web3.from_wei(wei, "ether")))


def check_deployer_balance(
    address: str,
    network: str,
    infura_api_key: str | None = None,
    rpc_url: str | None = None,
    minimum_eth: str = MIN_DEPLOY_BALANCE_ETH,
) -> Decimal | None:
    """Warn when the deployer cannot cover migration gas. Never raises for RPC trouble.

    Returns the balance in ETH, or None when it could not be read.
    """
    url = rpc_url or get_rpc_url(network, infura_api_key)
    currency = get_chain_config(network)["currency"]
    try:
        balance = get_balance_eth(address, url)
    except Exception as e:
        logger.warning(f"⚠️  Could not read deployer balance from RPC: {e}")
        return None
    if balance < Decimal(minimum_eth):
        logger.warning(
            f"⚠️  Deployer {address} holds {balance} {currency}; "
            f"at least {minimum_eth} {currency} is recommended for deployment gas."
        )
    else:
        logger.info(f"✅ Deployer balance: {balance} {currency}")
    return balance
