"""CLI commands for czytaj."""

import asyncio
import logging
from typing import Optional

import click

from .config import Settings
from .controllers import fetch_feed, is_viewed, list_viewed, mark_viewed
from .db import StoreError, ViewedStore
from .fetcher import FetchError
from .models import Article
from .rss import ParseError


@click.group()
@click.version_option(package_name="czytaj")
@click.pass_context
def cli(ctx: click.Context):
    """czytaj - Read RSS/Atom feeds and remember what you opened."""
    try:
        settings = Settings.from_env()
    except ValueError as e:
        raise click.UsageError(str(e))

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    ctx.obj = settings


def _open_store(settings: Settings) -> ViewedStore:
    try:
        return ViewedStore(settings.db_path)
    except StoreError as e:
        _fail(str(e))


def _fail(message: str):
    click.echo(click.style(f"Error: {message}", fg="red"))
    raise SystemExit(1)


@cli.command()
@click.argument("url")
@click.option("--images/--no-images", default=None, help="Show article image URLs")
@click.option("--excerpts/--no-excerpts", default=None, help="Show article excerpts")
@click.pass_obj
def fetch(settings: Settings, url: str, images: Optional[bool], excerpts: Optional[bool]):
    """Fetch a feed and list its articles."""
    show_images = settings.show_images if images is None else images
    show_excerpts = settings.show_excerpts if excerpts is None else excerpts

    try:
        summary = asyncio.run(fetch_feed(url, settings.fetch_timeout))
    except (FetchError, ParseError) as e:
        _fail(str(e))

    store = _open_store(settings)
    try:
        click.echo(click.style(f"{summary.title} ({len(summary.articles)}):", fg="cyan", bold=True))
        click.echo()

        if not summary.articles:
            click.echo("No articles in this feed.")
            return

        for article in summary.articles:
            _print_article(article, is_viewed(store, article.link), show_images, show_excerpts)
    except StoreError as e:
        _fail(str(e))
    finally:
        store.close()


def _print_article(article: Article, viewed: bool, show_images: bool, show_excerpts: bool):
    """Print a single article."""
    status = click.style("[read]", fg="bright_black") if viewed else click.style("[new]", fg="yellow")

    click.echo(f"  {status} {article.title}")
    if article.has_link:
        click.echo(f"       URL: {article.link}")
    if show_images and article.image_url:
        click.echo(f"       Image: {article.image_url}")
    if show_excerpts and article.excerpt:
        click.echo(f"       {article.excerpt}")
    click.echo()


@cli.command("open")
@click.argument("url")
@click.option("--title", default="", help="Article title to store with the view")
@click.pass_obj
def open_article(settings: Settings, url: str, title: str):
    """Mark an article as viewed."""
    store = _open_store(settings)
    try:
        mark_viewed(store, url, title or url)
        click.echo(click.style(f"Marked {url} as viewed", fg="green"))
    except (ValueError, StoreError) as e:
        _fail(str(e))
    finally:
        store.close()


@cli.command()
@click.pass_obj
def viewed(settings: Settings):
    """List viewed articles, most recent first."""
    store = _open_store(settings)
    try:
        urls = list_viewed(store)
    except StoreError as e:
        _fail(str(e))
    finally:
        store.close()

    if not urls:
        click.echo("No articles viewed yet.")
        return

    click.echo(click.style(f"Viewed articles ({len(urls)}):", fg="cyan", bold=True))
    for url in urls:
        click.echo(f"  {url}")


@cli.command("is-viewed")
@click.argument("url")
@click.pass_obj
def is_viewed_command(settings: Settings, url: str):
    """Check whether an article was viewed."""
    store = _open_store(settings)
    try:
        seen = is_viewed(store, url)
    except StoreError as e:
        _fail(str(e))
    finally:
        store.close()

    if seen:
        click.echo("yes")
    else:
        click.echo("no")
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
