"""CLI for the Aletheia secret resolver."""

from pathlib import Path

import click
from dotenv import load_dotenv

from aletheia import __version__


def _mask(value: str) -> str:
    if len(value) <= 4:
        return "*" * len(value)
    return f"{value[:2]}{'*' * (len(value) - 4)}{value[-2:]}"


def _build_resolver(ctx: click.Context):
    from aletheia.config import ConfigError, ConfigLoader
    from aletheia.secrets import AletheiaInitializationError, SecretResolver

    try:
        config = ConfigLoader(ctx.obj["config_path"]).load()
        return SecretResolver(config)
    except (ConfigError, AletheiaInitializationError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="aletheia")
@click.option("--config", "-c", "config_path", default=None, help="Path to aletheia.yaml")
@click.option("--env-file", default=".env", help="dotenv file to load first")
@click.option("--log-level", default="WARNING", help="Log level (DEBUG/INFO/WARNING)")
@click.pass_context
def cli(ctx: click.Context, config_path: str, env_file: str, log_level: str):
    """Aletheia CLI - resolve secrets from env, files, Vault, AWS and GCP."""
    from aletheia.utils.logging import setup_logging

    setup_logging(level=log_level)
    if env_file and Path(env_file).exists():
        load_dotenv(env_file)

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.pass_context
def config(ctx: click.Context):
    """Show the effective resolver configuration."""
    from aletheia.config import ConfigError, ConfigLoader

    try:
        cfg = ConfigLoader(ctx.obj["config_path"]).load()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"\n{'='*60}")
    click.echo("Resolver Configuration")
    click.echo(f"{'='*60}")
    click.echo(f"\nProviders: {', '.join(cfg.providers)}")
    click.echo(f"Cache TTL: {cfg.cache_ttl_seconds:g}s")

    for name, settings in cfg.backends.items():
        click.echo(f"\n{name}:")
        for key in sorted(settings):
            click.echo(f"  {key}: {'<set>' if 'token' in key or 'secret' in key else settings[key]}")


@cli.command()
@click.pass_context
def providers(ctx: click.Context):
    """List configured backends in priority order."""
    resolver = _build_resolver(ctx)

    click.echo(f"\n{'='*60}")
    click.echo("Secret Backends (first match wins)")
    click.echo(f"{'='*60}\n")

    for index, backend in enumerate(resolver.providers, start=1):
        click.echo(f"  {index}. {backend.name} ({type(backend.delegate).__name__})")

    resolver.shutdown()


@cli.command()
@click.argument("key")
@click.option("--show", is_flag=True, help="Print the full value instead of a masked one")
@click.pass_context
def get(ctx: click.Context, key: str, show: bool):
    """Resolve a single secret."""
    from aletheia.secrets import AletheiaError

    resolver = _build_resolver(ctx)
    try:
        value = resolver.get_secret(key)
    except AletheiaError as e:
        click.echo(f"Error [{e.kind.value}]: {e}", err=True)
        raise SystemExit(1)
    finally:
        resolver.shutdown()

    click.echo(value if show else _mask(value))


@cli.command()
@click.pass_context
def health(ctx: click.Context):
    """Check readiness of every configured backend."""
    resolver = _build_resolver(ctx)

    click.echo(f"\n{'='*60}")
    click.echo("Health Check")
    click.echo(f"{'='*60}\n")

    status = resolver.health_check()
    for name, healthy in status.items():
        click.echo(f"{'✓' if healthy else '✗'} {name}")

    resolver.shutdown()
    click.echo("")

    if not any(status.values()):
        raise SystemExit(1)


def main():
    """Entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
