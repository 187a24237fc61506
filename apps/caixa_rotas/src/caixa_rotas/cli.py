"""CLI bootstrap for caixa-rotas."""

import json
from decimal import Decimal
from pathlib import Path

import typer
from pydantic import BaseModel, Field

from caixa_rotas.api.dependencies import build_closing_service
from caixa_rotas.api.schemas.closings import CreateClosingRequest
from caixa_rotas.api.schemas.common import (
    MONEY_PATTERN,
    NON_NEGATIVE_MONEY_PATTERN,
    PERCENTAGE_PATTERN,
)
from caixa_rotas.db.session import get_session_factory
from caixa_rotas.domain.distribution import (
    DistributionResult,
    ShareholderInput,
    distribute,
)
from caixa_rotas.domain.errors import DomainError
from caixa_rotas.domain.money import format_brl

app = typer.Typer(help="CLI for monthly closing of vending routes.")
INPUT_FILE_OPTION = typer.Option(..., exists=True, dir_okay=False)


class PreviewShareholder(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=120)
    percentage: str = Field(pattern=PERCENTAGE_PATTERN)
    participates_in_loss: bool = False
    accumulated_balance: str = Field(default="0.00", pattern=MONEY_PATTERN)
    advances: str = Field(default="0.00", pattern=NON_NEGATIVE_MONEY_PATTERN)


class PreviewDistributionFile(BaseModel):
    """Standalone distribution input, no database involved."""

    net_profit: str = Field(pattern=MONEY_PATTERN)
    retained_amount: str = Field(default="0.00", pattern=NON_NEGATIVE_MONEY_PATTERN)
    shareholders: list[PreviewShareholder]


class CloseMonthFile(CreateClosingRequest):
    location_id: str = Field(min_length=1, max_length=64)
    closed_by: str = Field(min_length=1, max_length=128)


def _echo_distribution(result: DistributionResult) -> None:
    typer.echo(f"Lucro liquido: {format_brl(result.net_profit)}")
    typer.echo(f"Retido: {format_brl(result.retained_amount)}")
    typer.echo(f"Base distribuivel: {format_brl(result.distributable_base)}")
    for item in result.settlements:
        if not item.is_presentable:
            continue
        typer.echo(
            f"{item.shareholder_name}: "
            f"parte {format_brl(item.period_share)} | "
            f"saldo anterior {format_brl(item.prior_balance_carried)} | "
            f"vales {format_brl(item.advances_deducted)} | "
            f"final {format_brl(item.final_amount)}"
        )
    if result.undistributed_amount != 0:
        typer.echo(f"Nao distribuido: {format_brl(result.undistributed_amount)}")


@app.command("healthcheck")
def healthcheck() -> None:
    """Verify that the CLI entrypoint is available."""
    typer.echo("caixa-rotas is ready")


@app.command("preview-distribution")
def preview_distribution(input: Path = INPUT_FILE_OPTION) -> None:
    """Compute a distribution from a JSON input file without persisting."""
    payload = json.loads(input.read_text(encoding="utf-8"))
    request = PreviewDistributionFile.model_validate(payload)
    shareholders = [
        ShareholderInput(
            shareholder_id=item.id,
            name=item.name,
            percentage=Decimal(item.percentage),
            participates_in_loss=item.participates_in_loss,
            accumulated_balance=Decimal(item.accumulated_balance),
            advances_for_period=Decimal(item.advances),
        )
        for item in request.shareholders
    ]
    try:
        result = distribute(
            Decimal(request.net_profit),
            Decimal(request.retained_amount),
            shareholders,
        )
    except DomainError as exc:
        typer.echo(f"{exc.code}: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc

    _echo_distribution(result)


@app.command("close-month")
def close_month(input: Path = INPUT_FILE_OPTION) -> None:
    """Close a month of a location from a JSON input file."""
    payload = json.loads(input.read_text(encoding="utf-8"))
    request = CloseMonthFile.model_validate(payload)
    command = request.to_command(
        location_id=request.location_id, closed_by=request.closed_by
    )

    with get_session_factory()() as session:
        try:
            outcome = build_closing_service(session).close_month(command)
        except DomainError as exc:
            typer.echo(f"{exc.code}: {exc.message}", err=True)
            raise typer.Exit(code=1) from exc

    typer.echo(f"Fechamento {outcome.period.label()} - {outcome.location_id}")
    _echo_distribution(
        DistributionResult(
            net_profit=outcome.net_profit,
            retained_amount=outcome.retained_amount,
            distributable_base=outcome.distributed_amount,
            settlements=outcome.settlements,
        )
    )


def main() -> None:
    """Run the caixa-rotas CLI application."""
    app()


if __name__ == "__main__":
    main()
