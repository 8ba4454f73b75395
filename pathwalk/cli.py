"""
Command line entry point for pathwalk. Accessed by 'pathwalk' in the command line.
"""
from functools import update_wrapper
import json
import pathlib

import click
import yaml

from pathwalk.core.documents import dump_document, load_document, parse_value
from pathwalk.core.errors import PathWalkerException
from pathwalk.core.keys import KEY_TYPES
from pathwalk.core.path import Path
from pathwalk.core.runtime import build_runtime, Runtime
from pathwalk.core.settings import OUTPUT_FORMATS


def pass_runtime(f):
    """
    Decorator to pass a Runtime to Click commands that need it.
    Ensures a Runtime is created and passed as the first argument.
    """
    @click.pass_context
    def new_func(ctx: click.Context, *args, **kwargs):
        ctx.ensure_object(dict)
        rt = ctx.obj.get('rt')
        if rt is None:
            opts = ctx.obj.get('global_opts', {})  # user overrides
            rt = build_runtime(**opts)
            ctx.obj['rt'] = rt
        # call the function with the Runtime context
        return f(ctx.obj['rt'], *args, **kwargs)
    return update_wrapper(new_func, f)


class WalkError(click.ClickException):
    """A path could not be read or written (strict mode)."""

    def __init__(self, exc: PathWalkerException):
        super().__init__(f"{exc.error_code.value}: {exc.message}")


def _load(document: str):
    try:
        return load_document(document)
    except OSError as e:
        raise click.FileError(document, hint=e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise click.BadParameter(f"not a JSON or YAML document: {e}", param_hint="DOCUMENT") from e


format_option = click.option(
    '--format', 'fmt', type=click.Choice(sorted(OUTPUT_FORMATS)), default=None,
    help="Output format. Defaults to the 'output_format' setting.")


@click.group()
@click.option('--settings-dir', type=click.Path(file_okay=False, path_type=pathlib.Path),
              default=None, help="Directory holding settings.json.")
@click.option('-v', '--verbose', is_flag=True, default=False,
              help="Debug logging, including every path that led nowhere.")
@click.option('--strict/--lenient', default=None,
              help="Fail on the first path that cannot be read or written.")
@click.option('--key-type', type=click.Choice(sorted(KEY_TYPES)), default=None,
              help="How path segments are converted into mapping keys.")
@click.version_option(package_name="pathwalk")
@click.pass_context
def main(ctx, settings_dir, verbose, strict, key_type):
    """pathwalk: read and write values deep inside nested documents."""
    ctx.ensure_object(dict)
    ctx.obj['global_opts'] = {
        'settings_dir': settings_dir,
        'verbose': verbose or None,
        'strict': strict,
        'key_type': key_type,
    }


@main.command()
@pass_runtime
@click.argument("document")
@click.argument("paths", nargs=-1, required=True)
@format_option
def get(rt: Runtime, document: str, paths: tuple[str, ...], fmt: str | None):
    """
    Print the value found at each PATH in DOCUMENT (a JSON or YAML file, or -
    for stdin).

    Example: pathwalk get company.yaml departments.0.name
    """
    data = _load(document)
    walker = rt.walker(*paths)
    try:
        values = walker.read_values(data)
    except PathWalkerException as e:
        raise WalkError(e) from e
    if len(values) == 1:
        output = values[0]
    else:
        output = {str(p): v for p, v in zip(walker.paths, values)}
    click.echo(dump_document(output, fmt or rt.settings.output_format).rstrip("\n"))


@main.command(name="set")
@pass_runtime
@click.argument("document")
@click.argument("path")
@click.argument("value")
@click.option('-o', '--output', type=click.Path(dir_okay=False, path_type=pathlib.Path),
              default=None, help="Write the updated document here instead of stdout.")
@click.option('--in-place', is_flag=True, default=False,
              help="Overwrite DOCUMENT with the updated document.")
@format_option
def set_value(rt: Runtime, document: str, path: str, value: str,
              output: pathlib.Path | None, in_place: bool, fmt: str | None):
    """
    Set PATH in DOCUMENT to VALUE, which is read as YAML (42 is a number,
    "42" a string, [1, 2] a list).

    Example: pathwalk set company.yaml departments.0.name Research -o out.yaml
    """
    if in_place and output is not None:
        raise click.UsageError("--in-place and --output are mutually exclusive")
    if in_place and document == "-":
        raise click.UsageError("Cannot update stdin in place")
    if Path.from_string(path).is_empty():
        raise click.BadParameter("cannot replace the document itself", param_hint="PATH")
    data = _load(document)
    try:
        new_value = parse_value(value)
    except yaml.YAMLError as e:
        raise click.BadParameter(str(e), param_hint="VALUE") from e
    try:
        written = rt.walker(path).write(data, new_value)
    except PathWalkerException as e:
        raise WalkError(e) from e
    if not written:
        raise click.ClickException(f"Nothing written: {path} leads nowhere (use --strict for details)")
    text = dump_document(data, fmt or rt.settings.output_format)
    target = pathlib.Path(document) if in_place else output
    if target is None:
        click.echo(text.rstrip("\n"))
    else:
        target.write_text(text, encoding="utf-8")
        rt.logger.info("Wrote %s", target)


@main.command()
@click.argument("path")
def parse(path: str):
    """Show how PATH splits into segments."""
    p = Path.from_string(path)
    for i, segment in enumerate(p):
        click.echo(f"{i}\t{json.dumps(segment)}")
    click.echo(f"escaped:   {p}")
    click.echo(f"canonical: {p.canonical()}")


@main.command()
@click.argument("segments", nargs=-1, required=True)
@click.option('--null-token', default=None,
              help="Segments equal to this text become the None segment.")
def escape(segments: tuple[str, ...], null_token: str | None):
    """Build an escaped path string from raw SEGMENTS."""
    if null_token is not None:
        segments = tuple(None if s == null_token else s for s in segments)
    click.echo(str(Path.of_segments(segments)))


@main.command()
@pass_runtime
@click.option('--save', is_flag=True, default=False,
              help="Persist the effective settings (including command line overrides).")
def config(rt: Runtime, save: bool):
    """Show the effective settings."""
    click.echo(f"# {rt.settings_dir}")
    click.echo(dump_document(rt.settings.to_dict(), "yaml").rstrip("\n"))
    if save:
        path = rt.save_settings()
        click.echo(f"Saved settings to {path}")
