"""Unit tests for explorer links."""

from solders.keypair import Keypair
from solders.signature import Signature

from solana_minter.utils.explorer import address_url, transaction_url


def test_address_url_includes_cluster():
    address = Keypair().pubkey()
    url = address_url(address, "devnet")
    assert url == f"https://explorer.solana.com/address/{address}?cluster=devnet"


def test_transaction_url_includes_cluster():
    signature = Signature.new_unique()
    url = transaction_url(signature, "testnet")
    assert url == f"https://explorer.solana.com/tx/{signature}?cluster=testnet"


def test_mainnet_links_have_no_cluster_parameter():
    signature = Signature.new_unique()
    assert transaction_url(signature, "mainnet-beta").endswith(f"/tx/{signature}")
    assert "?cluster" not in address_url("abc", "")


def test_custom_explorer_url():
    url = address_url("abc", "devnet", explorer_url="https://solscan.io")
    assert url == "https://solscan.io/address/abc?cluster=devnet"
