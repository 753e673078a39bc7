"""
Command-line interface for Vault Sync.

Run from the blog's project root (where ``setting.toml`` lives):

    vault-sync sync                  # vault -> src/content/posts + public/assets
    vault-sync translate [-f] [-s SLUG]
    vault-sync clean
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from vault_sync import __version__
from vault_sync.config import SETTINGS_FILENAME, ConfigError, Settings, load_settings
from vault_sync.core.cleaner import clean as clean_content
from vault_sync.core.models import SyncResult
from vault_sync.core.sync import SyncReconciler
from vault_sync.log import setup_logging
from vault_sync.transforms.frontmatter import format_local_datetime
from vault_sync.translate import create_translator
from vault_sync.translate.orchestrator import TranslationOrchestrator

app = typer.Typer(
    name="vault-sync",
    help="Sync Obsidian notes into a static blog and translate them.",
    add_completion=False,
)
console = Console()


def posts_dir(project_root: Path) -> Path:
    return project_root / "src" / "content" / "posts"


def assets_dir(project_root: Path) -> Path:
    return project_root / "public" / "assets"


def _load(project_root: Path) -> Settings:
    try:
        return load_settings(project_root / SETTINGS_FILENAME)
    except ConfigError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        console.print(f"   Please check your {SETTINGS_FILENAME} file.")
        raise typer.Exit(code=1)


def version_callback(value: bool):
    if value:
        console.print(f"vault-sync v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
    version: bool = typer.Option(
        False, "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Vault Sync: publish Obsidian notes to a static blog."""
    setup_logging(verbose, console)


def print_sync_report(result: SyncResult, output_dir: Path) -> None:
    console.print()

    if result.removed:
        console.print(f"🗑️  Removed documents ({len(result.removed)}):")
        for slug in result.removed:
            console.print(f"   📄 {slug}")
        console.print()

    if result.synced:
        console.print(f"[green]✅ Synced documents ({len(result.synced)}):[/green]")
        for doc in result.synced:
            console.print(f"   📄 {escape(doc.title)}")
            console.print(f"      Modified: {format_local_datetime(doc.modified)}")
        console.print()

    if result.skipped:
        console.print(f"⏭️  Skipped documents ({len(result.skipped)}):")
        for skipped in result.skipped:
            info = skipped.sync_info
            last_sync = format_local_datetime(info.last_sync_time) if info.last_sync_time else "N/A"
            console.print(f"   📄 {escape(skipped.doc.title)}")
            console.print(f"      Modified: {format_local_datetime(skipped.doc.modified)}")
            console.print(f"      Last sync: {last_sync}")
            console.print(f"      Reason: {info.reason.value}")
        console.print()

    if result.warnings:
        console.print("[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"   {warning}", markup=False)
        console.print()

    if result.cleanup.removed_images or result.cleanup.removed_dirs:
        console.print("🧹 Unused image cleanup:")
        for image in result.cleanup.removed_images:
            console.print(f"   🗑️  {image}", markup=False)
        for directory in result.cleanup.removed_dirs:
            console.print(f"   📁 {directory}/ (folder removed)", markup=False)
        console.print()

    if result.unparsed:
        console.print(f"[yellow]⚠️  {len(result.unparsed)} note(s) could not be parsed (use --verbose to list them)[/yellow]")
        console.print()

    console.print(f"📁 Output path: {output_dir}")


@app.command()
def sync():
    """Sync publishable notes from the vault into the blog."""
    project_root = Path.cwd()
    settings = _load(project_root)

    source_path = settings.source_path
    if not source_path.exists():
        console.print(f"[red]❌ Source path does not exist: {escape(str(source_path))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"✅ Source path: {source_path}")
    console.print("📝 Starting synchronization...")

    output_dir = posts_dir(project_root)
    reconciler = SyncReconciler(
        source_path,
        output_dir,
        assets_dir(project_root),
        exclude_tags=settings.posts.exclude_tags,
    )
    result = reconciler.sync()
    print_sync_report(result, output_dir)


@app.command()
def translate(
    force: bool = typer.Option(False, "--force", "-f", help="Retranslate existing translations"),
    slug: Optional[str] = typer.Option(None, "--slug", "-s", help="Only translate this post"),
):
    """Translate synced posts into the configured target languages."""
    project_root = Path.cwd()
    settings = _load(project_root)
    translate_settings = settings.posts.translate

    if not translate_settings.enabled:
        console.print("[red]❌ Translation is not enabled.[/red]")
        console.print(f"   Set [posts.translate] enabled = true in {SETTINGS_FILENAME}", markup=False)
        raise typer.Exit(code=1)

    if not translate_settings.target_langs:
        console.print("[red]❌ No target languages configured.[/red]")
        console.print("   Set target_langs in [posts.translate] section.", markup=False)
        raise typer.Exit(code=1)

    output_dir = posts_dir(project_root)
    if not output_dir.exists():
        console.print(f"[red]❌ Posts directory not found: {escape(str(output_dir))}[/red]")
        console.print('   Run "vault-sync sync" first.')
        raise typer.Exit(code=1)

    console.print("📝 Translation Settings:")
    console.print(f"   Default language: {settings.locale}")
    console.print(f"   Target languages: {', '.join(translate_settings.target_langs)}")
    console.print()

    try:
        translator = create_translator(translate_settings)
    except ValueError as e:
        console.print(f"[red]❌ {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    orchestrator = TranslationOrchestrator(
        output_dir,
        translator,
        settings.locale,
        translate_settings.target_langs,
    )
    tasks = orchestrator.plan(force=force, slug=slug)

    if not tasks:
        console.print("[green]✅ All posts are already translated.[/green]")
        return

    console.print(f"🔄 Posts to translate: {len(tasks)} (using {translator.name})")
    console.print()

    report = orchestrator.run_tasks(tasks)

    console.print()
    console.print("📊 Translation Summary:")
    console.print(f"   ✅ Success: {report.success_count}")
    console.print(f"   ❌ Failed: {report.error_count}")


@app.command()
def clean():
    """Remove synced posts and copied assets."""
    project_root = Path.cwd()
    console.print("🧹 Cleaning synced content...")
    console.print()

    result = clean_content(posts_dir(project_root), assets_dir(project_root))

    if result.posts:
        console.print(f"📄 Posts: {result.posts} files removed")
    else:
        console.print("📄 Posts: already clean")

    if result.assets:
        console.print(f"🖼️  Assets: {result.assets} directories removed")
    else:
        console.print("🖼️  Assets: already clean")

    console.print()
    console.print("[green]✅ Clean complete![/green]")


if __name__ == "__main__":
    app()
