from __future__ import annotations

"""
recstore.cli.main
-----------------

Drive the example stores from the command line against a snapshot file.

Each invocation loads the Env (entries, expiry, ledger position) from the
state file, runs one operation, and writes the state back only if the
operation succeeded. Output is always JSON on stdout.

Examples
--------
python -m recstore.cli books init
python -m recstore.cli books add --title 1984 --author Orwell --year 1949 --price 9.5 --quantity 3
python -m recstore.cli books sell 1984 --n 2
python -m recstore.cli counter inc
python -m recstore.cli --advance 600 expired
"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import typer

from recstore.config import load_config
from recstore.core import codec
from recstore.errors import CodecError, StoreError
from recstore.examples import counter as counter_ex
from recstore.examples import library
from recstore.examples import payroll
from recstore.runtime.context import ContextError, Env
from recstore.version import __version__

log = logging.getLogger(__name__)

app = typer.Typer(
    name="recstore",
    add_completion=False,
    no_args_is_help=True,
    help="Persistent keyed record store: books, staff and counter demos.",
)
books_app = typer.Typer(no_args_is_help=True, help="Library of books keyed by title.")
staff_app = typer.Typer(no_args_is_help=True, help="Payroll of employees keyed by name.")
counter_app = typer.Typer(no_args_is_help=True, help="Single non-negative counter.")
app.add_typer(books_app, name="books")
app.add_typer(staff_app, name="staff")
app.add_typer(counter_app, name="counter")


# -------------------- utils --------------------


def _emit(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, sort_keys=True, default=str))


def _load_env(path: Path) -> Env:
    if not path.exists():
        return Env()
    state = codec.loads(path.read_bytes())
    if not isinstance(state, dict):
        raise CodecError("state file is not a snapshot map", details={"path": str(path)})
    try:
        return Env.from_state(state)
    except (ContextError, TypeError, ValueError) as e:
        raise CodecError(f"corrupt state file: {e}", details={"path": str(path)}) from e


def _save_env(env: Env, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_bytes(codec.dumps(env.to_state()))
    tmp.replace(path)
    log.debug("state saved to %s", path)


@contextmanager
def _session(ctx: typer.Context) -> Iterator[Env]:
    opts: Dict[str, Any] = ctx.obj or {}
    path: Path = opts.get("state") or load_config().state_path
    try:
        env = _load_env(path)
        if opts.get("advance"):
            env.advance(int(opts["advance"]))
        yield env
    except StoreError as e:
        _emit({"ok": False, "error": e.to_dict()})
        raise typer.Exit(1) from e
    _save_env(env, path)


def _ok(result: Any, env: Env) -> None:
    _emit({"ok": True, "result": result, "ledger": env.now})


# -------------------- root --------------------


@app.callback()
def _root(
    ctx: typer.Context,
    state: Optional[Path] = typer.Option(None, "--state", help="Snapshot file (default: RECSTORE_STATE_PATH)."),
    advance: int = typer.Option(0, "--advance", min=0, help="Advance the ledger by N ticks before the command."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    cfg = load_config()
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, cfg.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"state": state or cfg.state_path, "advance": advance}


@app.command("info")
def info() -> None:
    """Show version and effective configuration."""
    _emit({"version": __version__, "config": load_config().as_dict()})


@app.command("expired")
def expired(ctx: typer.Context) -> None:
    """List entries whose TTL has lapsed at the current ledger."""
    with _session(ctx) as env:
        _ok([ref.label() for ref in env.lifecycle.expired(env.now)], env)


# -------------------- books --------------------


@books_app.command("init")
def books_init(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        library.initialize(env)
        _ok(None, env)


@books_app.command("add")
def books_add(
    ctx: typer.Context,
    title: str = typer.Option("", "--title"),
    author: str = typer.Option("", "--author"),
    year: int = typer.Option(0, "--year"),
    price: float = typer.Option(0.0, "--price"),
    quantity: int = typer.Option(1, "--quantity"),
) -> None:
    with _session(ctx) as env:
        rec = library.add_book(env, title, author, year, price=price, quantity=quantity)
        _ok(rec.to_dict(), env)


@books_app.command("get")
def books_get(ctx: typer.Context, title: str = typer.Argument(...)) -> None:
    with _session(ctx) as env:
        _ok(library.get_book(env, title).to_dict(), env)


@books_app.command("remove")
def books_remove(ctx: typer.Context, title: str = typer.Argument(...)) -> None:
    with _session(ctx) as env:
        _ok(library.remove_book(env, title).to_dict(), env)


@books_app.command("list")
def books_list(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        _ok([r.to_dict() for r in library.list_books(env)], env)


@books_app.command("count")
def books_count(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        _ok(library.book_count(env), env)


@books_app.command("by-author")
def books_by_author(ctx: typer.Context, author: str = typer.Argument(...)) -> None:
    with _session(ctx) as env:
        _ok([r.to_dict() for r in library.books_by_author(env, author)], env)


@books_app.command("sell")
def books_sell(ctx: typer.Context, title: str = typer.Argument(...), n: int = typer.Option(1, "--n")) -> None:
    with _session(ctx) as env:
        _ok(library.sell(env, title, n).to_dict(), env)


@books_app.command("restock")
def books_restock(ctx: typer.Context, title: str = typer.Argument(...), n: int = typer.Option(..., "--n")) -> None:
    with _session(ctx) as env:
        _ok(library.restock(env, title, n).to_dict(), env)


@books_app.command("discount")
def books_discount(
    ctx: typer.Context,
    title: str = typer.Argument(...),
    percent: float = typer.Option(..., "--percent"),
) -> None:
    with _session(ctx) as env:
        _ok(library.apply_discount(env, title, percent).to_dict(), env)


# -------------------- staff --------------------


@staff_app.command("init")
def staff_init(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        payroll.initialize(env)
        _ok(None, env)


@staff_app.command("hire")
def staff_hire(
    ctx: typer.Context,
    name: str = typer.Argument(...),
    salary: float = typer.Option(0.0, "--salary"),
    active: bool = typer.Option(True, "--active/--inactive"),
) -> None:
    with _session(ctx) as env:
        _ok(payroll.hire(env, name, salary, active=active).to_dict(), env)


@staff_app.command("get")
def staff_get(ctx: typer.Context, name: str = typer.Argument(...)) -> None:
    with _session(ctx) as env:
        _ok(payroll.get_employee(env, name).to_dict(), env)


@staff_app.command("fire")
def staff_fire(ctx: typer.Context, name: str = typer.Argument(...)) -> None:
    with _session(ctx) as env:
        _ok(payroll.fire(env, name).to_dict(), env)


@staff_app.command("list")
def staff_list(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        _ok([r.to_dict() for r in payroll.staff(env)], env)


@staff_app.command("count")
def staff_count(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        _ok(payroll.headcount(env), env)


@staff_app.command("raise")
def staff_raise(
    ctx: typer.Context,
    name: str = typer.Argument(...),
    amount: float = typer.Option(..., "--amount"),
) -> None:
    with _session(ctx) as env:
        _ok(payroll.give_raise(env, name, amount).to_dict(), env)


@staff_app.command("deactivate")
def staff_deactivate(ctx: typer.Context, name: str = typer.Argument(...)) -> None:
    with _session(ctx) as env:
        _ok(payroll.deactivate(env, name).to_dict(), env)


@staff_app.command("payroll")
def staff_payroll(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        _ok(payroll.total_payroll(env), env)


# -------------------- counter --------------------


@counter_app.command("init")
def counter_init(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        counter_ex.initialize(env)
        _ok(0, env)


@counter_app.command("get")
def counter_get(ctx: typer.Context) -> None:
    with _session(ctx) as env:
        _ok(counter_ex.get(env), env)


@counter_app.command("inc")
def counter_inc(ctx: typer.Context, by: int = typer.Option(1, "--by")) -> None:
    with _session(ctx) as env:
        _ok(counter_ex.increment(env, by), env)


@counter_app.command("reset")
def counter_reset(ctx: typer.Context, value: int = typer.Option(0, "--value")) -> None:
    with _session(ctx) as env:
        _ok(counter_ex.reset(env, value), env)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
