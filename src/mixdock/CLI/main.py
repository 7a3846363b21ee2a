"""
Command Line Interface for mixdock.
"""
import click
import logging
import os
import sys
from ..BUILDERS.image_builder import ImageBuilder
from ..MODELS.builder_config import BuilderConfig
from ..PARSERS.config_parser import ConfigParser
from ..REGISTRY.image_cache import BaseArchiveCache
from ..REGISTRY.upstream_client import UpstreamClient
from ..RUNNERS.container_runner import ContainerRunner
from ..RUNNERS.process_runner import ProcessRunner
from ..UTILS.config_mounts import get_mounts
from ..errors import MixdockError, format_error_chain

def _load_config(ctx) -> BuilderConfig:
    path = ctx.obj['config_path']
    if os.path.exists(path):
        return ConfigParser().parse(path)
    if ctx.obj['config_explicit']:
        raise click.ClickException(f"{path} not found.")
    return BuilderConfig()

def _fail(err: Exception):
    click.echo(f"Error: {format_error_chain(err)}", err=True)
    sys.exit(1)

@click.group()
@click.option('--config', '-c', 'config_path', default=None, help='Config file path (default: builder.yaml)')
@click.option('--base-dir', default='.', help='Directory holding per-format image build directories')
@click.option('--runtime', default='docker', help='Container runtime executable')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_path, base_dir, runtime, verbose):
    """
    Mixdock - run mixer commands in a container matching the upstream release.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(message)s' if not verbose else '%(levelname)s %(name)s: %(message)s'
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path or 'builder.yaml'
    ctx.obj['config_explicit'] = config_path is not None
    ctx.obj['base_dir'] = base_dir
    ctx.obj['runtime'] = runtime

def _components(ctx):
    try:
        config = _load_config(ctx)
    except MixdockError as e:
        _fail(e)
    upstream = UpstreamClient(config.upstream.url)
    runner = ProcessRunner()
    builder = ImageBuilder(
        BaseArchiveCache(upstream),
        runner=runner,
        base_dir=ctx.obj['base_dir'],
        runtime=ctx.obj['runtime']
    )
    return config, upstream, builder, runner

@cli.command(context_settings={'ignore_unknown_options': True})
@click.argument('command', nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def run(ctx, command):
    """Run COMMAND inside the mixer container."""
    config, upstream, builder, runner = _components(ctx)
    container = ContainerRunner(config, upstream, builder, runner=runner, runtime=ctx.obj['runtime'])
    try:
        container.run_in_container(list(command))
    except MixdockError as e:
        _fail(e)

@cli.command('build-image')
@click.pass_context
def build_image(ctx):
    """Build the mixer image for the configured upstream version."""
    config, upstream, builder, _ = _components(ctx)
    if not config.upstream.version:
        _fail(MixdockError("No upstream version configured"))
    try:
        format_range = upstream.resolve_format_range(config.upstream.version)
        name = builder.ensure_image(format_range.format, format_range.first_version)
    except MixdockError as e:
        _fail(e)
    click.echo(name)

@cli.command()
@click.pass_context
def mounts(ctx):
    """List the directories that would be mounted."""
    config, _, _, _ = _components(ctx)
    for path in get_mounts(config, os.getcwd()):
        click.echo(path)

@cli.command()
@click.pass_context
def formats(ctx):
    """Show the host and upstream formats"""
    config, upstream, _, _ = _components(ctx)
    if not config.upstream.version:
        _fail(MixdockError("No upstream version configured"))
    try:
        host_format, upstream_format = upstream.get_host_and_upstream_formats(config.upstream.version)
    except (MixdockError, OSError) as e:
        _fail(e)
    click.echo(f"{'HOST':10} {host_format or '-'}")
    click.echo(f"{'UPSTREAM':10} {upstream_format}")

def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
