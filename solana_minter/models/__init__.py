"""Data models for Solana Minter."""
