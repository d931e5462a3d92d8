"""Token issuance workflow.

The orchestrator runs a caller-selected subset of steps in a fixed
dependency order. Each step delegates to the token or metadata service and
records its outcome in a WorkflowReport. A plan whose steps depend on a
mint or token account nothing provides is rejected with StepOrderError
before the first step runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Union

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from solana_minter.logging_config import get_logger
from solana_minter.services.metadata_service import MetadataService
from solana_minter.services.token_service import TokenService
from solana_minter.utils.errors import StepOrderError, ValidationError
from solana_minter.utils.validation import Amount, validate_amount, validate_decimals

logger = get_logger(__name__)


class Step(str, Enum):
    """Workflow steps, declared in execution order."""

    CREATE_MINT = "create_mint"
    CREATE_TOKEN_ACCOUNT = "create_token_account"
    MINT_TOKENS = "mint_tokens"
    CREATE_METADATA = "create_metadata"
    UPDATE_METADATA = "update_metadata"
    TRANSFER_TOKENS = "transfer_tokens"


STEP_ORDER = list(Step)
METADATA_STEPS = (Step.CREATE_METADATA, Step.UPDATE_METADATA)
# Steps that spend from the token account created by create_token_account
TOKEN_ACCOUNT_STEPS = (Step.MINT_TOKENS, Step.TRANSFER_TOKENS)

MISSING_MINT = "a mint (run create_mint or pass --mint)"
MISSING_TOKEN_ACCOUNT = "a token account (run create_token_account first)"


def parse_steps(steps: Union[str, Iterable[Union[str, Step]]]) -> List[Step]:
    """Parse step names into a de-duplicated list in execution order.

    Args:
        steps: Comma separated names, an iterable of names, or "all"

    Returns:
        Selected steps sorted by STEP_ORDER

    Raises:
        ValidationError: If a name is unknown or nothing is selected
    """
    if isinstance(steps, str):
        names = [name.strip() for name in steps.split(",") if name.strip()]
    else:
        names = [s.value if isinstance(s, Step) else str(s).strip() for s in steps]

    if names == ["all"]:
        return list(STEP_ORDER)

    selected = set()
    for name in names:
        try:
            selected.add(Step(name.lower().replace("-", "_")))
        except ValueError:
            raise ValidationError(
                f"Unknown step '{name}'",
                details={"valid_steps": [s.value for s in STEP_ORDER]}
            )

    if not selected:
        raise ValidationError("No workflow steps selected")

    return [step for step in STEP_ORDER if step in selected]


@dataclass
class WorkflowPlan:
    """Parameters for one workflow run."""

    steps: List[Step]
    decimals: int = 2
    mint: Optional[Pubkey] = None
    amount: Amount = 100
    transfer_amount: Amount = 50
    recipient: Optional[Pubkey] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    description: Optional[str] = None
    image_path: Optional[str] = None
    image_name: Optional[str] = None

    def includes(self, step: Step) -> bool:
        return step in self.steps

    @property
    def uses_storage(self) -> bool:
        """Whether a selected step uploads to the storage provider."""
        return any(self.includes(step) for step in METADATA_STEPS)

    def validate(self) -> None:
        """Check the plan before anything touches the network.

        Raises:
            StepOrderError: If a selected step depends on a mint or token
                account that neither the plan nor an earlier step provides
            ValidationError: If a selected step lacks a required parameter
            InvalidAmountError: If a selected amount is not positive
        """
        self._check_step_order()

        if self.includes(Step.CREATE_MINT):
            validate_decimals(self.decimals)

        if self.includes(Step.MINT_TOKENS):
            validate_amount(self.amount)

        if self.includes(Step.TRANSFER_TOKENS):
            validate_amount(self.transfer_amount)
            if self.recipient is None:
                raise ValidationError("transfer_tokens requires a recipient")

        for step in METADATA_STEPS:
            if not self.includes(step):
                continue
            missing = [
                label for label, value in (
                    ("name", self.name), ("symbol", self.symbol), ("image_path", self.image_path)
                ) if not value
            ]
            if missing:
                raise ValidationError(
                    f"{step.value} requires {', '.join(missing)}",
                    details={"step": step.value, "missing": missing}
                )

    def _check_step_order(self) -> None:
        has_mint = self.mint is not None or self.includes(Step.CREATE_MINT)
        for step in self.steps:
            if step != Step.CREATE_MINT and not has_mint:
                raise StepOrderError(step.value, MISSING_MINT)
            if step in TOKEN_ACCOUNT_STEPS and not self.includes(Step.CREATE_TOKEN_ACCOUNT):
                raise StepOrderError(step.value, MISSING_TOKEN_ACCOUNT)


@dataclass
class StepResult:
    """Outcome of a single step."""

    step: Step
    signature: Optional[str] = None
    address: Optional[str] = None
    uri: Optional[str] = None
    image_uri: Optional[str] = None


@dataclass
class WorkflowReport:
    """Results of the steps completed in a run, in execution order."""

    mint: Optional[Pubkey] = None
    token_account: Optional[Pubkey] = None
    results: List[StepResult] = field(default_factory=list)

    def result(self, step: Step) -> Optional[StepResult]:
        for result in self.results:
            if result.step == step:
                return result
        return None

    @property
    def completed_steps(self) -> List[Step]:
        return [result.step for result in self.results]


class WorkflowOrchestrator:
    """Runs the selected issuance steps for one payer."""

    def __init__(self, token_service: TokenService, metadata_service: MetadataService,
                 payer: Keypair):
        """
        Initialize the orchestrator.

        Args:
            token_service: Service for mint, account, mint-to and transfer steps
            metadata_service: Service for the metadata steps
            payer: Fee payer, also used as mint, freeze and update authority
        """
        self.token_service = token_service
        self.metadata_service = metadata_service
        self.payer = payer
        self._handlers = {
            Step.CREATE_MINT: self._create_mint,
            Step.CREATE_TOKEN_ACCOUNT: self._create_token_account,
            Step.MINT_TOKENS: self._mint_tokens,
            Step.CREATE_METADATA: self._create_metadata,
            Step.UPDATE_METADATA: self._update_metadata,
            Step.TRANSFER_TOKENS: self._transfer_tokens,
        }

    async def run(self, plan: WorkflowPlan) -> WorkflowReport:
        """Run the plan's steps in order.

        Errors propagate unchanged; steps completed before the failure are
        not rolled back.

        Returns:
            Report of the completed steps
        """
        plan.validate()
        report = WorkflowReport(mint=plan.mint)

        for step in STEP_ORDER:
            if not plan.includes(step):
                continue
            logger.info(f"Running step {step.value}")
            result = await self._handlers[step](plan, report)
            report.results.append(result)

        return report

    async def _create_mint(self, plan: WorkflowPlan, report: WorkflowReport) -> StepResult:
        descriptor = await self.token_service.create_mint(
            self.payer, self.payer.pubkey(), self.payer.pubkey(), plan.decimals
        )
        report.mint = descriptor.mint
        return StepResult(Step.CREATE_MINT, address=str(descriptor.mint))

    async def _create_token_account(self, plan: WorkflowPlan, report: WorkflowReport) -> StepResult:
        token_account = await self.token_service.create_token_account(
            self.payer, report.mint, self.payer.pubkey()
        )
        report.token_account = token_account
        return StepResult(Step.CREATE_TOKEN_ACCOUNT, address=str(token_account))

    async def _mint_tokens(self, plan: WorkflowPlan, report: WorkflowReport) -> StepResult:
        signature = await self.token_service.mint_tokens(
            self.payer, report.mint, report.token_account, self.payer, plan.amount
        )
        return StepResult(Step.MINT_TOKENS, signature=str(signature))

    async def _create_metadata(self, plan: WorkflowPlan, report: WorkflowReport) -> StepResult:
        result = await self.metadata_service.create_metadata(
            report.mint, self.payer, plan.name, plan.symbol, plan.description,
            plan.image_path, plan.image_name
        )
        return StepResult(
            Step.CREATE_METADATA,
            signature=str(result.signature),
            address=str(result.metadata_address),
            uri=result.uri,
            image_uri=result.image_uri
        )

    async def _update_metadata(self, plan: WorkflowPlan, report: WorkflowReport) -> StepResult:
        result = await self.metadata_service.update_metadata(
            report.mint, self.payer, plan.name, plan.symbol, plan.description,
            plan.image_path, plan.image_name
        )
        return StepResult(
            Step.UPDATE_METADATA,
            signature=str(result.signature),
            address=str(result.metadata_address),
            uri=result.uri,
            image_uri=result.image_uri
        )

    async def _transfer_tokens(self, plan: WorkflowPlan, report: WorkflowReport) -> StepResult:
        recipient_account = await self.token_service.create_token_account(
            self.payer, report.mint, plan.recipient
        )
        signature = await self.token_service.transfer_tokens(
            self.payer, report.token_account, recipient_account, self.payer,
            plan.transfer_amount, report.mint
        )
        return StepResult(
            Step.TRANSFER_TOKENS,
            signature=str(signature),
            address=str(recipient_account)
        )
