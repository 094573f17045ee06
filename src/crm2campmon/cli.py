"""CLI for crm2campmon."""

import logging
import sys

import click

from crm2campmon import __version__
from crm2campmon.campmon.client import CampaignMonitorClient
from crm2campmon.config import Settings, get_settings
from crm2campmon.configuration import ConfigurationService
from crm2campmon.dynamics.client import WebApiOrganizationService
from crm2campmon.operations import OperationContext, run_operation


def _require_settings(ctx: click.Context) -> Settings:
    settings: Settings | None = ctx.obj.get("settings")
    if settings is None:
        click.echo(f"Error loading settings: {ctx.obj.get('settings_error')}", err=True)
        ctx.exit(1)
    return settings


def _run(ctx: click.Context, name: str, payload: str) -> None:
    """Run an operation against live services and print its JSON response."""
    settings = _require_settings(ctx)

    org_service = WebApiOrganizationService(settings)
    campmon_client = CampaignMonitorClient(settings)
    try:
        result = run_operation(name, payload, OperationContext(org_service, campmon_client))
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    finally:
        org_service.close()
        campmon_client.close()

    click.echo(result)


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context) -> None:
    """Sync Dynamics contact configuration with Campaign Monitor."""
    ctx.ensure_object(dict)

    # Load settings
    try:
        settings = get_settings()
        ctx.obj["settings"] = settings
    except Exception as e:
        ctx.obj["settings_error"] = str(e)
        return

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@main.command()
@click.option("--payload", default="{}", help="Serialized request passed to the operation")
@click.pass_context
def metadata(ctx: click.Context, payload: str) -> None:
    """Print the configuration snapshot as JSON.

    Combines the stored configuration with Campaign Monitor clients and
    lists, contact fields and contact views.
    """
    _run(ctx, "load_metadata", payload)


@main.command("save-config")
@click.option("--payload", required=True, help="JSON with the selections to store")
@click.pass_context
def save_config(ctx: click.Context, payload: str) -> None:
    """Store client, list, view and field selections."""
    _run(ctx, "save_configuration", payload)


@main.command()
@click.pass_context
def disconnect(ctx: click.Context) -> None:
    """Clear the stored Campaign Monitor tokens."""
    _run(ctx, "disconnect", "{}")


@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show whether a configuration record exists and is connected."""
    settings = _require_settings(ctx)

    org_service = WebApiOrganizationService(settings)
    try:
        config_service = ConfigurationService(org_service)
        config_id = config_service.get_config_id()
        if config_id is None:
            click.echo("No configuration record.")
            return

        click.echo(f"Configuration: {config_id}")
        config = config_service.load()
        if config is None:
            click.echo("  Connected: no")
            return

        click.echo("  Connected: yes")
        click.echo(f"  Client: {config.client_name or '-'}")
        click.echo(f"  List: {config.list_name or '-'}")
        click.echo(f"  View: {config.sync_view_name or '-'}")
        click.echo(f"  Sync fields: {len(config.sync_fields)}")
        if config.bulk_sync_in_progress:
            click.echo("  Bulk sync in progress")
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    finally:
        org_service.close()


if __name__ == "__main__":
    main()
