"""CLI commands for gtp using cyclopts."""

import sys
from contextlib import contextmanager
from functools import cache
from pathlib import Path
from typing import Iterator, NoReturn, Optional, Annotated
from getpass import getpass
import cyclopts
from rich.console import Console
from rich.markup import escape

from . import store
from .config import Config, get_default_store_path
from .errors import ConfigError, CorruptStore, EmptySecret, InvalidSecretEncoding, PositionOutOfRange
from .store import Credential, StoreFile
from .totp import generate_code_for_secret, get_time_remaining, get_valid_until_time

app = cyclopts.App(name="gtp", help="Time based one-time passwords from registered secrets")
console = Console()
err_console = Console(stderr=True)

USAGE = (
    "usage: gtp [{number}|list|add|remove|clear]\n\n"
    "  {number}  Show time based one-time password by specified secret\n"
    "  list      All registered OTP secrets\n"
    "  add       Add new OTP secret\n"
    "  remove    Remove the specified secret\n"
    "  clear     Clear all secrets\n"
)
NOTHING_REGISTERED = "¯\\_(ツ)_/¯ Nothing has been registered"

PathOption = Annotated[Optional[Path], cyclopts.Parameter(help="Path to store file")]


def echo(text: str) -> None:
    """Print user data verbatim, without markup or wrapping."""
    console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)


def fail(message: str) -> NoReturn:
    """Print an error to stderr and exit with status 1."""
    err_console.print(f"[red]Error: {escape(message)}[/red]")
    sys.exit(1)


@cache
def read_config() -> Config:
    """Load the config file once per process.

    Raises:
        ConfigError: If the config file is malformed
    """
    return Config.load()


def load_config() -> Config:
    """Get the config, aborting when the file is malformed."""
    try:
        return read_config()
    except ConfigError as exc:
        fail(str(exc))


@contextmanager
def open_store(path: Optional[Path], config: Config) -> Iterator[tuple[StoreFile, list[Credential]]]:
    """Open the store and load its records, aborting on structural errors.

    Yields:
        The open store file and the records it holds
    """
    store_path = get_default_store_path(path, config)
    try:
        with StoreFile(store_path) as store_file:
            records = store_file.load()
            yield store_file, records
    except CorruptStore as exc:
        fail(f"{exc} ({store_path}). The file was left untouched")
    except OSError as exc:
        fail(f"Cannot access store at {store_path}: {exc}")


def print_usage() -> None:
    """Print the usage text."""
    echo(USAGE)


def print_listing(records: list[Credential]) -> None:
    """Print one line per record."""
    echo("\n".join(store.describe(records)))


@app.default
def show(
    token: Annotated[
        Optional[str], cyclopts.Parameter(help="Position of the secret to show a code for")
    ] = None,
    path: PathOption = None,
) -> None:
    """Show the current one-time password for the secret at a position."""
    if token is None:
        print_usage()
        return

    try:
        position = int(token)
    except ValueError:
        print_usage()
        return

    config = load_config()
    with open_store(path, config) as (_, records):
        if not records:
            echo(NOTHING_REGISTERED)
            return

        try:
            credential = store.select(records, position)
        except PositionOutOfRange as exc:
            console.print(f"[red]Error: {escape(str(exc))}[/red]")
            print_usage()
            return

        try:
            code = generate_code_for_secret(credential.secret)
        except (InvalidSecretEncoding, EmptySecret) as exc:
            fail(f"{exc} for {credential.issuer}:{credential.account_name}")

    # Plain output so the code can be piped
    print(code)
    if config.show_valid_until:
        err_console.print(
            f"Valid until: {get_valid_until_time()} UTC ({get_time_remaining()}s left)"
        )


@app.command(name="list")
def list_cmd(path: PathOption = None) -> None:
    """All registered OTP secrets."""
    with open_store(path, load_config()) as (_, records):
        if not records:
            echo(NOTHING_REGISTERED)
            return
        print_listing(records)


@app.command
def add(path: PathOption = None) -> None:
    """Add new OTP secret."""
    with open_store(path, load_config()) as (store_file, records):
        issuer = input("Step 1/3) Issuer: ").strip()
        account_name = input("Step 2/3) Account Name: ").strip()
        secret = getpass("Step 3/3) Secret: ").strip()

        credential = Credential(issuer=issuer, account_name=account_name, secret=secret)
        store_file.save(store.append(records, credential))

    console.print("[green]✨ 🔑 ✨ Completed the addition of new OTP[/green]")


@app.command
def remove(path: PathOption = None) -> None:
    """Remove the specified secret."""
    with open_store(path, load_config()) as (store_file, records):
        if not records:
            echo(NOTHING_REGISTERED)
            return

        print_listing(records)
        answer = input("\nChoose remove target OTP: ")

        try:
            remaining = store.remove_at(records, answer)
        except PositionOutOfRange as exc:
            console.print(f"[red]Error: {escape(str(exc))}[/red]")
            return

        store_file.save(remaining)

    console.print("[green]💨 Removal success[/green]")


@app.command
def clear(path: PathOption = None) -> None:
    """Clear all secrets."""
    with open_store(path, load_config()) as (store_file, records):
        if not records:
            echo(NOTHING_REGISTERED)
            return

        print_listing(records)
        answer = input("\nDo you want clear all?: [y|N] ")
        if answer.strip() not in ("y", "Y"):
            return

        store_file.save(store.clear())

    console.print("[green]🗑 Removed all[/green]")
