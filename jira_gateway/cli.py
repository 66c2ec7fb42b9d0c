"""Operations CLI for the JIRA API gateway."""

from datetime import timedelta
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel

from jira_gateway import __version__

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="jira-gateway")
def cli() -> None:
    """JIRA API gateway: relays JIRA calls on behalf of platform users."""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind address (default: API_HOST setting)")
@click.option("--port", type=int, default=None, help="Bind port (default: API_PORT setting)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the API server."""
    import uvicorn

    from jira_gateway.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "jira_gateway.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_config=None,
    )


@cli.command(name="init-db")
def init_db() -> None:
    """Create the integration store tables."""
    from jira_gateway.db.database import engine
    from jira_gateway.db.models import Base

    Base.metadata.create_all(bind=engine)
    console.print("[green]Integration store tables created.[/green]")


@cli.command()
@click.option("--owner", default=None, help="Owner recorded with the integration settings")
def bootstrap(owner: Optional[str]) -> None:
    """Mark the JIRA integration as configured for this deployment."""
    from jira_gateway.db.database import SessionLocal, engine
    from jira_gateway.db.models import Base
    from jira_gateway.services.integration import DatabaseJiraIntegrationStore

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        DatabaseJiraIntegrationStore(db).bootstrap(owner=owner)
    console.print("[green]JIRA integration bootstrapped.[/green]")


@cli.command(name="register-app")
@click.argument("jira_url")
@click.option("--consumer-key", required=True, help="Consumer key of the JIRA application link")
@click.option(
    "--private-key-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="PEM file with the RSA private key of the application link",
)
def register_app(jira_url: str, consumer_key: str, private_key_file: Path) -> None:
    """Register the application link used to sign requests to JIRA_URL."""
    from jira_gateway.core.exceptions import InvalidJiraURLError
    from jira_gateway.core.messages import get_message_catalog
    from jira_gateway.core.urls import JiraUrlBuilder
    from jira_gateway.db.database import SessionLocal, engine
    from jira_gateway.db.models import Base
    from jira_gateway.services.integration import DatabaseJiraIntegrationStore

    try:
        JiraUrlBuilder(max_results=1, messages=get_message_catalog()).validate_base_url(jira_url)
    except InvalidJiraURLError as e:
        console.print(f"[red]{e.message}[/red]")
        raise click.Abort()

    private_key = private_key_file.read_text()
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        application = DatabaseJiraIntegrationStore(db).register_application(
            jira_url, consumer_key, private_key
        )
        registered_url = application.jira_url

    console.print(
        Panel(
            f"[cyan]JIRA URL:[/cyan] {registered_url}\n[cyan]Consumer key:[/cyan] {consumer_key}",
            title="Application link registered",
            border_style="green",
        )
    )


@cli.command(name="issue-token")
@click.argument("user_id", type=int)
@click.option("--expires-minutes", type=int, default=None, help="Token lifetime in minutes")
def issue_token(user_id: int, expires_minutes: Optional[int]) -> None:
    """Mint a signed caller token for USER_ID (development aid)."""
    from jira_gateway.auth.security import create_access_token
    from jira_gateway.config import get_settings

    settings = get_settings()
    minutes = expires_minutes or settings.access_token_expire_minutes
    token = create_access_token(
        user_id,
        settings.secret_key,
        algorithm=settings.algorithm,
        expires_delta=timedelta(minutes=minutes),
    )
    click.echo(token)


if __name__ == "__main__":
    cli()
