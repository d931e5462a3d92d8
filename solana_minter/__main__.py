"""Command-line entry point for Solana Minter."""

import asyncio
import sys
from typing import Optional

import click

from solana_minter.clients.ledger_client import LedgerClient
from solana_minter.clients.storage_client import StorageClient
from solana_minter.config import AppConfig, get_app_config
from solana_minter.keypair import initialize_keypair
from solana_minter.logging_config import configure_logging, get_logger, log_with_context
from solana_minter.services.metadata_service import MetadataService
from solana_minter.services.token_service import TokenService
from solana_minter.utils.errors import SolanaMinterError
from solana_minter.utils.validation import parse_public_key
from solana_minter.workflow import (
    STEP_ORDER,
    WorkflowOrchestrator,
    WorkflowPlan,
    WorkflowReport,
    parse_steps,
)

logger = get_logger("solana_minter")


async def run_workflow(plan: WorkflowPlan, config: AppConfig) -> WorkflowReport:
    """Open the clients, load the payer and run the plan.

    Args:
        plan: Steps and parameters for this run
        config: Application configuration

    Returns:
        Report of the completed steps

    Raises:
        ValidationError: If the plan is rejected before any step runs
        ConfigurationError: If a metadata step is selected without a storage endpoint
    """
    plan.validate()
    if plan.uses_storage:
        config.storage.require_endpoint()

    async with LedgerClient(config.solana) as ledger, StorageClient(config.storage) as storage:
        payer = await initialize_keypair(ledger, config.minter)
        logger.info(f"PublicKey: {payer.pubkey()}")

        orchestrator = WorkflowOrchestrator(
            TokenService(ledger, config.minter),
            MetadataService(ledger, storage, config.minter),
            payer
        )
        return await orchestrator.run(plan)


class WorkflowCommand(click.Command):
    """Command whose usage errors exit with 1 like every other failure."""

    def main(self, args=None, prog_name=None, complete_var=None, standalone_mode=True, **extra):
        try:
            return super().main(args, prog_name, complete_var, standalone_mode=False, **extra)
        except click.ClickException as e:
            configure_logging()
            logger.error(f"Workflow failed: {type(e).__name__}: {e.format_message()}")
            sys.exit(1)
        except click.Abort:
            configure_logging()
            logger.error("Workflow failed: aborted")
            sys.exit(1)


@click.command(cls=WorkflowCommand)
@click.option(
    "--steps",
    envvar="WORKFLOW_STEPS",
    help=f"Comma separated steps to run, or 'all'. Steps: {', '.join(s.value for s in STEP_ORDER)}",
)
@click.option("--decimals", envvar="TOKEN_DECIMALS", type=int, default=2, show_default=True,
              help="Decimals of a newly created mint")
@click.option("--mint", envvar="TOKEN_MINT", help="Existing mint address, when create_mint is not run")
@click.option("--amount", envvar="MINT_AMOUNT", default="100", show_default=True,
              help="Tokens to mint, in whole-token units")
@click.option("--transfer-amount", envvar="TRANSFER_AMOUNT", default="50", show_default=True,
              help="Tokens to transfer, in whole-token units")
@click.option("--recipient", envvar="TRANSFER_RECIPIENT", help="Owner address receiving the transfer")
@click.option("--name", envvar="TOKEN_NAME", help="Token name for metadata steps")
@click.option("--symbol", envvar="TOKEN_SYMBOL", help="Token symbol for metadata steps")
@click.option("--description", envvar="TOKEN_DESCRIPTION", help="Token description for metadata steps")
@click.option("--image", "image_path", envvar="TOKEN_IMAGE", help="Path of the token image")
@click.option("--image-name", envvar="TOKEN_IMAGE_NAME", help="File name reported to storage")
def main(
    steps: Optional[str],
    decimals: int,
    mint: Optional[str],
    amount: str,
    transfer_amount: str,
    recipient: Optional[str],
    name: Optional[str],
    symbol: Optional[str],
    description: Optional[str],
    image_path: Optional[str],
    image_name: Optional[str],
):
    """Mint an SPL token, manage its metadata and transfer balances."""
    try:
        config = get_app_config()
        configure_logging(config.minter.log_level)

        plan = WorkflowPlan(
            steps=parse_steps(steps or ""),
            decimals=decimals,
            mint=parse_public_key(mint) if mint else None,
            amount=amount,
            transfer_amount=transfer_amount,
            recipient=parse_public_key(recipient) if recipient else None,
            name=name,
            symbol=symbol,
            description=description,
            image_path=image_path,
            image_name=image_name
        )
        asyncio.run(run_workflow(plan, config))
    except Exception as e:
        configure_logging()
        logger.error(f"Workflow failed: {type(e).__name__}: {e}")
        if isinstance(e, SolanaMinterError):
            log_with_context(logger, "debug", "Error details", error=e.to_dict())
        logger.debug("Workflow failure traceback", exc_info=True)
        sys.exit(1)

    logger.info("Finished successfully")


if __name__ == "__main__":
    main()
