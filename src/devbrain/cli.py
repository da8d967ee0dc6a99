"""DevBrain CLI."""

import asyncio
import sys
from pathlib import Path

import click

from .config import Settings, get_settings
from .detail import HighlightSession
from .entries import Category, EntryRepository, JsonFileStore, UnknownCategoryError
from .logging_config import setup_colored_logging
from .render.highlight import highlight
from .render.segmenter import RenderBlock, Table, segment


def _load_settings() -> Settings:
    try:
        return get_settings()
    except Exception as e:
        click.echo(f"Error loading settings: {e}", err=True)
        click.echo("Make sure .env file exists with OPENAI_API_KEY", err=True)
        sys.exit(1)


def _repository(settings: Settings) -> EntryRepository:
    return EntryRepository(JsonFileStore(settings.store_path), seed_samples=settings.seed_samples)


def _format_table(table: Table) -> list[str]:
    rows = [table.headers, *table.rows]
    segmented = [table.header_segments, *table.row_segments]
    widths = [max(len(row[i]) for row in rows if i < len(row)) for i in range(table.column_count)]
    lines = []
    for index, (row, cells) in enumerate(zip(rows, segmented)):
        padded = [
            _styled(segments) + " " * (widths[i] - len(text))
            for i, (text, segments) in enumerate(zip(row[: table.column_count], cells))
        ]
        lines.append(" | ".join(padded))
        if index == 0:
            lines.append("-+-".join("-" * w for w in widths))
    return lines


def _styled(segments) -> str:
    return "".join(
        click.style(seg.text, fg="yellow", bold=True) if seg.emphasized else seg.text
        for seg in segments
    )


def _emphasize(text: str, term) -> str:
    return _styled(highlight(text, term))


def _echo_blocks(blocks: list[RenderBlock]) -> None:
    for block in blocks:
        if block.kind == "table":
            for line in _format_table(block):
                click.echo(f"  {line}")
        elif block.kind == "paragraph":
            click.echo(_styled(block.segments))
        else:
            click.echo("")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, verbose):
    """DevBrain - capture, structure, and practice your developer knowledge."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_colored_logging(verbose)


@cli.command()
@click.argument("text", required=False, default="")
@click.option("--file", "text_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Read the notes from a file")
@click.option("--image", "images", multiple=True, type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="Screenshot to include (repeatable)")
def add(text, text_file, images):
    """Analyze notes and screenshots into a new entry."""
    from .capture import KnowledgeCapture, load_images
    from .llm import OpenAIClient

    settings = _load_settings()
    if text_file:
        text = text_file.read_text(encoding="utf-8", errors="ignore")
    if not text.strip() and not images:
        raise click.UsageError("Provide TEXT, --file or at least one --image")

    pipeline = KnowledgeCapture(settings, OpenAIClient(settings), _repository(settings))
    entry = asyncio.run(pipeline.capture(text, load_images(list(images))))

    click.echo(f"Created: {entry.title} [{entry.category.value}]")
    click.echo(f"  id: {entry.id}")
    if entry.tags:
        click.echo(f"  tags: {', '.join(entry.tags)}")


@cli.command("list")
@click.option("--search", "-s", default="", help="Filter by title or tag")
@click.option("--category", "-c", default=None, help="Filter by category")
def list_entries(search, category):
    """List stored entries, newest first."""
    settings = _load_settings()
    try:
        selected = Category.parse(category) if category else None
    except UnknownCategoryError as e:
        raise click.BadParameter(str(e), param_hint="--category")

    entries = _repository(settings).search(search, selected)
    if not entries:
        click.echo("No entries found.")
        return

    for entry in entries:
        tags = " ".join(f"#{t}" for t in entry.tags)
        click.echo(f"{entry.id}  {entry.created_at:%Y-%m-%d}  [{entry.category.value}]  {entry.title}  {tags}")


@cli.command()
@click.argument("entry_id")
@click.option("--term", "-t", default=None, help="Highlight a term (remembered for this entry)")
@click.option("--clear", is_flag=True, help="Clear the remembered highlight term")
def show(entry_id, term, clear):
    """Show an entry with its notes segmented and highlighted."""
    settings = _load_settings()
    entry = _repository(settings).get(entry_id)
    if entry is None:
        click.echo(f"Entry not found: {entry_id}", err=True)
        sys.exit(1)

    session = HighlightSession(JsonFileStore(settings.store_path), entry.id)
    session.load()
    if clear:
        session.clear()
    elif term is not None:
        session.set_term(term)
    active = session.term

    click.echo(click.style(entry.title, bold=True))
    click.echo(f"[{entry.category.value}] {entry.created_at:%Y-%m-%d}  {' '.join('#' + t for t in entry.tags)}")
    click.echo("")
    click.echo(_emphasize(entry.summary, active))

    if entry.steps:
        click.echo("\nProcedure:")
        for number, step in enumerate(entry.steps, start=1):
            click.echo(f"  {number}. {_emphasize(step, active)}")

    for snippet in entry.code_snippets:
        click.echo(f"\n[{snippet.language}] {snippet.description}")
        click.echo(f"  {snippet.code}")

    if entry.mermaid_chart:
        click.echo(f"\nDiagram available: devbrain diagram {entry.id}")

    click.echo("\nOriginal notes:")
    _echo_blocks(segment(entry.raw_content, active))


@cli.command()
@click.argument("entry_id")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Where to write the SVG (default: <id>.svg)")
def diagram(entry_id, output):
    """Render an entry's diagram to an SVG file."""
    from .diagram import DiagramController, MermaidInkRenderer

    settings = _load_settings()
    entry = _repository(settings).get(entry_id)
    if entry is None:
        click.echo(f"Entry not found: {entry_id}", err=True)
        sys.exit(1)

    controller = DiagramController(MermaidInkRenderer(settings.mermaid_url, settings.mermaid_timeout))
    outcome = asyncio.run(controller.render(entry.mermaid_chart))
    if outcome is None:
        click.echo("This entry has no diagram.")
        return
    if not outcome.ok:
        click.echo(outcome.message, err=True)
        sys.exit(1)

    output = output or Path(f"{entry.id}.svg")
    output.write_text(outcome.markup, encoding="utf-8")
    click.echo(f"Wrote {output} ({len(outcome.bindings.labels)} nodes)")


@cli.command()
@click.argument("entry_id")
def practice(entry_id):
    """Practice an entry: answer an AI-generated question."""
    from .llm import OpenAIClient
    from .practice import PracticeSession, PracticeState

    settings = _load_settings()
    entry = _repository(settings).get(entry_id)
    if entry is None:
        click.echo(f"Entry not found: {entry_id}", err=True)
        sys.exit(1)

    session = PracticeSession(OpenAIClient(settings), entry.context)

    async def run():
        while True:
            click.echo("Generating a challenge...")
            begin = session.retry if session.state is PracticeState.RESULT else session.start
            if await begin() is PracticeState.IDLE:
                click.echo(session.error, err=True)
                if not click.confirm("Try again?", default=True):
                    return
                continue

            click.echo(f"\n[{session.challenge.context_type}] {session.challenge.question}\n")
            while session.state is PracticeState.ACTIVE:
                answer = click.prompt("Your answer", default=session.answer or "", show_default=False)
                if not session.can_submit(answer):
                    continue
                click.echo("Evaluating...")
                await session.submit(answer)
                if session.state is PracticeState.ACTIVE:
                    click.echo(session.error, err=True)

            result = session.evaluation
            verdict = click.style("Correct", fg="green") if result.is_correct else click.style("Incorrect", fg="red")
            click.echo(f"\n{verdict}  score: {result.score}/100")
            click.echo(result.feedback)
            click.echo(f"\nSolution:\n{result.correct_solution}\n")

            if not click.confirm("Try another?", default=False):
                return

    asyncio.run(run())


@cli.command()
@click.argument("entry_id")
@click.confirmation_option(prompt="Delete this entry?")
def delete(entry_id):
    """Delete an entry and its highlight state."""
    settings = _load_settings()
    if _repository(settings).delete(entry_id):
        click.echo(f"Deleted: {entry_id}")
    else:
        click.echo(f"Entry not found: {entry_id}", err=True)
        sys.exit(1)


@cli.command()
@click.option("--port", "-p", default=None, type=int, help="Port to run on")
def serve(port):
    """Start the web dashboard."""
    import uvicorn

    from .dashboard import create_app

    settings = _load_settings()
    if port:
        # Allowed origins are derived from the port the page is served on
        settings = settings.model_copy(update={"port": port})
    app = create_app(settings)

    click.echo(f"Starting dashboard at http://{settings.host}:{settings.port}")

    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


if __name__ == "__main__":
    cli()
