"""Typer CLI for reviewplan."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from reviewplan.config import (
    DEFAULT_CONFIG_TEMPLATE,
    OnLimit,
    ReviewplanConfig,
    SortOrder,
)
from reviewplan.models import SessionError

load_dotenv()

app = typer.Typer(
    name="reviewplan",
    help="Score, batch and track incremental code reviews across sessions.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

RepoOption = Annotated[Path, typer.Option("--repo", "-r", help="Path to git repository")]
StateDirOption = Annotated[
    Path | None, typer.Option("--state-dir", help="Override the session state directory")
]
ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to reviewplan.toml")
]
JsonOption = Annotated[bool, typer.Option("--json", help="Print JSON instead of tables")]


def _load(repo: Path, config_path: Path | None, state_dir: Path | None):
    """Resolve the repository, config and session store."""
    from reviewplan.extractors.git_diff import GitError, repo_root
    from reviewplan.sessions import SessionStore

    try:
        root = repo_root(str(repo.resolve()))
    except GitError as e:
        err_console.print(f"[red]error:[/red] not a git repository: {e}")
        raise typer.Exit(1)

    config = ReviewplanConfig.load(config_path)
    config.repo_path = root
    if state_dir is not None:
        config.sessions.state_dir = str(state_dir)

    store = SessionStore(root, config.sessions.resolve_state_dir(root))
    return config, store


def _setup_logging(state_dir: Path, debug: bool) -> None:
    # Always log to file
    file_handler = logging.FileHandler(state_dir / "reviewplan.log", mode="a")
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    reviewplan_logger = logging.getLogger("reviewplan")
    reviewplan_logger.setLevel(logging.DEBUG)
    reviewplan_logger.addHandler(file_handler)

    if debug:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(name)s %(levelname)s %(message)s"))
        reviewplan_logger.addHandler(stream_handler)


@app.command()
def plan(
    repo: RepoOption = Path("."),
    base: Annotated[
        str | None, typer.Option("--base", help="Base branch for comparison")
    ] = None,
    base_commit: Annotated[
        str | None, typer.Option("--base-commit", help="Base commit for comparison")
    ] = None,
    review_type: Annotated[
        str, typer.Option("--type", "-t", help="Review type: all, committed, uncommitted")
    ] = "all",
    max_files: Annotated[
        int | None, typer.Option("--max-files", help="Max files in this session (0 = all)")
    ] = None,
    max_batches: Annotated[
        int | None, typer.Option("--max-batches", help="Review only the top N batches")
    ] = None,
    on_limit: Annotated[
        OnLimit | None, typer.Option("--on-limit", help="When over max-files: continue, stop")
    ] = None,
    sort: Annotated[
        SortOrder | None, typer.Option("--sort", help="Sort files: priority, alpha, none")
    ] = None,
    continue_from: Annotated[
        int, typer.Option("--continue", help="Continue from session N")
    ] = 0,
    state_dir: StateDirOption = None,
    config_path: ConfigOption = None,
    as_json: JsonOption = False,
    debug: Annotated[bool, typer.Option("--debug", help="Log to stderr too")] = False,
) -> None:
    """Score and batch changed files and open a review session."""
    from reviewplan.extractors.git_diff import GitError
    from reviewplan.formatters import format_plan, format_plan_json
    from reviewplan.pipeline import TooManyFilesError, plan_review

    config, store = _load(repo, config_path, state_dir)
    _setup_logging(store.state_dir, debug)

    if max_files is not None:
        config.review.max_files = max_files
    if max_batches is not None:
        config.review.max_batches = max_batches
    if on_limit is not None:
        config.review.on_limit = on_limit
    if sort is not None:
        config.review.sort = sort

    try:
        with err_console.status("[bold green]Scoring changed files..."):
            result = plan_review(
                config,
                store,
                continue_from=continue_from,
                base_commit=base_commit,
                base_branch=base,
                review_type=review_type,
            )
    except (GitError, SessionError, TooManyFilesError) as e:
        err_console.print(f"[red]error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        print(format_plan_json(result))
        return

    if result.session is None:
        console.print("[yellow]No changes to review.[/yellow]")
        return

    for table in format_plan(result):
        console.print(table)

    session = result.session
    if session.files_remaining > 0:
        err_console.print(
            f"\nRun 'reviewplan plan --continue {session.id}' for the next batch "
            f"({session.files_remaining} files remaining)"
        )


@app.command()
def sessions(
    repo: RepoOption = Path("."),
    state_dir: StateDirOption = None,
    config_path: ConfigOption = None,
    as_json: JsonOption = False,
) -> None:
    """List review sessions for the repository."""
    from reviewplan.formatters import format_session_list, format_sessions_json

    _, store = _load(repo, config_path, state_dir)
    all_sessions = store.list()
    if as_json:
        print(format_sessions_json(all_sessions))
        return
    if not all_sessions:
        console.print("[yellow]No sessions found.[/yellow]")
        return
    console.print(format_session_list(all_sessions))


@app.command()
def show(
    session_id: Annotated[int, typer.Argument(help="Session id")],
    repo: RepoOption = Path("."),
    state_dir: StateDirOption = None,
    config_path: ConfigOption = None,
    as_json: JsonOption = False,
) -> None:
    """Show one session's files and findings."""
    from reviewplan.formatters import format_session, format_sessions_json

    _, store = _load(repo, config_path, state_dir)
    try:
        session = store.load(session_id)
    except SessionError as e:
        err_console.print(f"[red]error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        print(format_sessions_json([session]))
        return
    console.print(f"[bold]Files ({session.files_reviewed}):[/bold]")
    for path in session.files:
        console.print(f"  {path}")
    console.print(format_session(session))


@app.command()
def complete(
    session_id: Annotated[int, typer.Argument(help="Session id")],
    findings_path: Annotated[
        Path, typer.Option("--findings", "-f", help="JSON file with review findings")
    ],
    repo: RepoOption = Path("."),
    state_dir: StateDirOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Record findings for a session and mark it completed."""
    from reviewplan.findings import load_findings
    from reviewplan.pipeline import complete_review

    _, store = _load(repo, config_path, state_dir)
    _setup_logging(store.state_dir, debug=False)
    try:
        findings = load_findings(findings_path)
        session = complete_review(store, session_id, findings)
    except (OSError, ValueError, SessionError) as e:
        err_console.print(f"[red]error:[/red] {e}")
        raise typer.Exit(1)
    console.print(
        f"[green]Session {session.id} completed[/green] with {len(session.findings)} findings."
    )


@app.command()
def delete(
    session_id: Annotated[int, typer.Argument(help="Session id")],
    repo: RepoOption = Path("."),
    state_dir: StateDirOption = None,
    config_path: ConfigOption = None,
) -> None:
    """Delete a session."""
    _, store = _load(repo, config_path, state_dir)
    store.delete(session_id)
    console.print(f"Deleted session {session_id}.")


@app.command()
def init(
    path: Annotated[
        Path, typer.Option("--path", "-p", help="Where to create reviewplan.toml")
    ] = Path("."),
) -> None:
    """Create a reviewplan.toml config file."""
    target = path / "reviewplan.toml"
    if target.exists():
        console.print(f"[yellow]{target} already exists.[/yellow]")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    console.print(f"[green]Created {target}[/green]")
