"""Block explorer links for accounts and transactions."""

from typing import Union

from solders.pubkey import Pubkey
from solders.signature import Signature

MAINNET_CLUSTER = "mainnet-beta"


def _cluster_suffix(cluster: str) -> str:
    if not cluster or cluster == MAINNET_CLUSTER:
        return ""
    return f"?cluster={cluster}"


def address_url(address: Union[str, Pubkey], cluster: str,
                explorer_url: str = "https://explorer.solana.com") -> str:
    """Explorer URL for an account address."""
    return f"{explorer_url}/address/{address}{_cluster_suffix(cluster)}"


def transaction_url(signature: Union[str, Signature], cluster: str,
                    explorer_url: str = "https://explorer.solana.com") -> str:
    """Explorer URL for a transaction signature."""
    return f"{explorer_url}/tx/{signature}{_cluster_suffix(cluster)}"
