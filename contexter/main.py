# main.py
import logging
from pathlib import Path
from typing import Tuple
import click

from contexter.api import ApiError, ContexterApi
from contexter.config import load_settings, save_settings, update_settings, default_config_path
from contexter.expansion import filter_by_search
from contexter.ignore import PathFilter
from contexter.models import Project
from contexter.picker.base import DefaultPicker
from contexter.picker.questionary import QuestionaryPicker
from contexter.picker.textuals import TextualPicker
from contexter.renderer import Renderer
from contexter.selection import SelectionStore
from contexter.utils import copy_to_clipboard, format_file_size, truncate_text, write_download

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _open_project(api: ContexterApi, project: str, exclude) -> Tuple[Project, SelectionStore]:
    """
    Fetch a project's file list and load it, minus the excluded paths, into a
    fresh SelectionStore. The unfiltered metadata is returned alongside.
    """
    metadata = api.fetch_project_metadata(project)
    files = PathFilter(exclude).apply(metadata.files)
    if len(files) != len(metadata.files):
        logger.info("Excluded %d of %d files", len(metadata.files) - len(files), len(metadata.files))
    store = SelectionStore()
    store.replace_active_file_list(files)
    return metadata, store


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Settings file (default: ~/.config/contexter/settings.json).")
@click.pass_context
def cli(ctx, verbose, config_path):
    """
    Browse a contexter server's projects, pick files from a tree and
    aggregate their content for LLM prompts.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["settings"] = load_settings(config_path)


def _api(ctx) -> ContexterApi:
    return ContexterApi(ctx.obj["settings"])


@cli.command()
@click.pass_context
def projects(ctx):
    """List the projects the server exposes."""
    try:
        found = _api(ctx).fetch_projects()
    except ApiError as e:
        raise click.ClickException(e.message)
    if not found:
        click.secho("No projects found", fg="yellow", err=True)
        return
    for project in found:
        click.echo(f"{project.name}\t{len(project.files)} files")


@cli.command()
@click.argument("project")
@click.option("-s", "--search", default="", help="Only show files whose name or path contains this text.")
@click.option("-e", "--exclude", multiple=True, help="Gitignore-style pattern to hide (repeatable).")
@click.pass_context
def files(ctx, project, search, exclude):
    """Print the file tree of PROJECT."""
    try:
        _, store = _open_project(_api(ctx), project, exclude)
    except ApiError as e:
        raise click.ClickException(e.message)

    if not store.files:
        click.secho("No files found in this project", fg="yellow", err=True)
        return

    nodes = filter_by_search(store.tree, search)
    if search.strip() and not nodes:
        click.secho("No files match your search", fg="yellow", err=True)
        return
    click.echo(Renderer(nodes).render_tree())


@cli.command()
@click.argument("project")
@click.option("-i", "--interactive", is_flag=True,
              help="Launch interactive tree picker to choose files")
@click.option("-q", "--questionary", "use_questionary", is_flag=True,
              help="Choose files from a flat checkbox list instead of the tree picker.")
@click.option("-p", "--path", "paths", multiple=True,
              help="File or directory to include (repeatable). Default: everything.")
@click.option("-e", "--exclude", multiple=True, help="Gitignore-style pattern to drop (repeatable).")
@click.option("-c", "--copy", "copy_clipboard", is_flag=True,
              help="Copy the final output to clipboard (Linux: wl-copy/xclip/xsel).")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Also write the content to this file.")
@click.option("--download", is_flag=True, help="Write the content to <project>-context.txt.")
@click.pass_context
def fetch(ctx, project, interactive, use_questionary, paths, exclude, copy_clipboard, output, download):
    """
    Aggregate the selected files of PROJECT into one text blob.
    """
    api = _api(ctx)
    try:
        metadata, store = _open_project(api, project, exclude)
    except ApiError as e:
        raise click.ClickException(e.message)

    # Choose picker strategy
    if interactive:
        picker = TextualPicker()
    elif use_questionary:
        picker = QuestionaryPicker()
    else:
        picker = DefaultPicker(paths)

    # seed interactive pickers with any --path arguments
    if paths and (interactive or use_questionary):
        DefaultPicker(paths).pick(store)

    selected = picker.pick(store)
    if not selected:
        raise click.ClickException("No files selected")

    click.secho(Renderer(store.tree, store).render_summary(), err=True)
    try:
        # plan against the server's own list so excluded files are never implied
        content = api.fetch_project_content(project, selected, metadata.files)
    except ApiError as e:
        raise click.ClickException(f"Failed to fetch files: {e.message}")

    if not content:
        raise click.ClickException("No content received from server")
    logger.debug("Content preview: %s", truncate_text(content, 200))

    click.echo(content)
    click.secho(f"[{format_file_size(len(content.encode('utf-8')))} from {len(selected)} files]", err=True)

    if copy_clipboard:
        ok = copy_to_clipboard(content)
        if ok:
            click.secho(f"[Copied {len(selected)} files to clipboard]", err=True)
        else:
            click.secho("[Failed to copy to clipboard - install wl-clipboard or xclip or xsel]",
                        fg="yellow", err=True)

    if output or download:
        written = write_download(content, project, output)
        click.secho(f"[Saved to {written}]", err=True)


@cli.group()
def config():
    """Show or change the client settings."""


@config.command("show")
@click.pass_context
def config_show(ctx):
    settings = ctx.obj["settings"]
    masked = "*" * 8 if settings.api_key else "(not set)"
    click.echo(f"server_url: {settings.server_url}")
    click.echo(f"api_key:    {masked}")
    click.echo(f"theme:      {settings.theme}")
    click.echo(f"file:       {ctx.obj['config_path'] or default_config_path()}")


@config.command("set")
@click.option("--api-key", default=None)
@click.option("--server-url", default=None)
@click.option("--theme", type=click.Choice(["system", "light", "dark"]), default=None)
@click.pass_context
def config_set(ctx, api_key, server_url, theme):
    """Update the stored settings; unspecified values are kept."""
    # start from the file alone; env overrides must not be persisted
    stored = load_settings(ctx.obj["config_path"], apply_env=False)
    settings = update_settings(stored, api_key=api_key, server_url=server_url, theme=theme)
    path = save_settings(settings, ctx.obj["config_path"])
    ctx.obj["settings"] = load_settings(ctx.obj["config_path"])
    click.secho(f"[Settings saved to {path}]", err=True)


@config.command("validate")
@click.pass_context
def config_validate(ctx):
    """Check the API key against the server."""
    if _api(ctx).validate_api_key():
        click.echo("API key is valid")
    else:
        raise click.ClickException("API key was rejected or the server is unreachable")


if __name__ == "__main__":
    cli()
