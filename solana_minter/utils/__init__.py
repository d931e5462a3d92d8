"""Utility helpers for Solana Minter."""
