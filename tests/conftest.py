"""Test configuration for pytest.

This module imports fixtures that should be available to all tests.
"""

# Import fixtures
from tests.fixtures.common import (  # noqa
    payer,
    minter_config,
    fake_ledger,
    mock_storage_client,
    token_service,
    metadata_service,
    image_file,
)
