"""On-chain program instruction builders."""
