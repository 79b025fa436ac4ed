import asyncio
import subprocess
from typing import Annotated

from rich import print
import typer

from mocah.core.config import settings
from mocah.core.services import (
    RedisService,
    RolloutFlags,
    get_rollout_flags,
    get_template_generation_version,
    invalidate_quota_cache,
    rollout_bucket,
)
from mocah.core.services.cache import invalidate_brand_kit_cache

app = typer.Typer()


async def _ensure_redis() -> None:
    """Initialize Redis from settings unless a client is already present."""
    if RedisService.is_available():
        return
    if not await RedisService.init():
        print("[red]Error: Redis is not configured or unreachable[/red]")
        raise typer.Exit(1)


async def rollout_task(
    organization_id: str,
    percentage: int | None,
    enabled: bool | None,
    ignore_overrides: bool,
) -> None:
    """
    Print the rollout bucket and decided pipeline version for an organization.

    Flags not given on the command line are read from the environment.
    """
    current = get_rollout_flags()
    flags = RolloutFlags(
        enabled=current.enabled if enabled is None else enabled,
        rollout_percentage=(
            current.rollout_percentage if percentage is None else percentage
        ),
        fallback_on_error=current.fallback_on_error,
    )

    async def _no_metadata(_: str) -> None:
        return None

    version = await get_template_generation_version(
        organization_id,
        flags=flags,
        metadata_loader=_no_metadata if ignore_overrides else None,
    )

    print(f"[cyan]Organization:[/cyan] {organization_id}")
    print(f"[cyan]Bucket:[/cyan] {rollout_bucket(organization_id)}")
    print(
        f"[cyan]Flags:[/cyan] enabled={flags.enabled} "
        f"percentage={flags.rollout_percentage}"
    )
    print(f"[green]Version:[/green] {version.value}")


async def invalidate_brandkit_task(organization_id: str) -> None:
    await _ensure_redis()
    try:
        await invalidate_brand_kit_cache(organization_id)
        print(f"[green]Brand kit cache invalidated for {organization_id}[/green]")
    finally:
        await RedisService.aclose()


async def reset_quota_task(
    organization_id: str, period: str, user_id: str | None
) -> None:
    await _ensure_redis()
    try:
        await invalidate_quota_cache(organization_id, user_id, period)
        scope = user_id or "organization"
        print(
            f"[green]Quota cache reset for {organization_id} ({scope}) "
            f"in {period}[/green]"
        )
    finally:
        await RedisService.aclose()


@app.command()
def rollout(
    organization_id: Annotated[str, typer.Argument(help="Organization ID")],
    percentage: Annotated[
        int | None,
        typer.Option(
            "--percentage",
            "-p",
            min=0,
            max=100,
            help="Rollout percentage to evaluate instead of AI_V2_ROLLOUT_PERCENTAGE",
        ),
    ] = None,
    enabled: Annotated[
        bool | None,
        typer.Option(
            "--enabled/--disabled",
            help="Override AI_V2_ENABLED for this evaluation",
        ),
    ] = None,
    ignore_overrides: Annotated[
        bool,
        typer.Option(
            "--ignore-overrides",
            help="Skip the organization metadata lookup (no database access)",
        ),
    ] = False,
):
    """
    Show which generation pipeline an organization is routed to.

    Examples:
        python manage.py rollout org_123
        python manage.py rollout org_123 --enabled --percentage 30
    """
    asyncio.run(rollout_task(organization_id, percentage, enabled, ignore_overrides))


@app.command()
def invalidate_brandkit(
    organization_id: Annotated[str, typer.Argument(help="Organization ID")],
):
    """
    Drop an organization's cached brand kit.

    Examples:
        python manage.py invalidate-brandkit org_123
    """
    asyncio.run(invalidate_brandkit_task(organization_id))


@app.command()
def reset_quota(
    organization_id: Annotated[str, typer.Argument(help="Organization ID")],
    period: Annotated[str, typer.Argument(help="Billing period, e.g. 2025-01")],
    user_id: Annotated[
        str | None,
        typer.Option("--user-id", "-u", help="Reset a user quota instead of the organization quota"),
    ] = None,
):
    """
    Delete a cached usage quota so the next read reloads it from the database.

    Examples:
        python manage.py reset-quota org_123 2025-01
        python manage.py reset-quota org_123 2025-01 --user-id user_456
    """
    asyncio.run(reset_quota_task(organization_id, period, user_id))


@app.command()
def runserver():
    try:
        server_command = (
            "uvicorn mocah.main:app --host 127.0.0.1 --port 8000 --reload"
            if settings.DEBUG
            else "uvicorn mocah.main:app --host 0.0.0.0 --port 8000"
        )
        print(f"Running FastAPI server: {server_command}")
        subprocess.run(server_command, shell=True, check=True)
    except subprocess.CalledProcessError as e:
        print(f"[red]Error:[/red] {e}")
        raise


@app.callback()
def main(ctx: typer.Context):
    print(f"Executing the command: {ctx.invoked_subcommand}")


if __name__ == "__main__":
    app()
