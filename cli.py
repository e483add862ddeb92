import logging
from pathlib import Path
from typing import Any, Dict, List

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from modweave.application import Application
from modweave.config import load_config
from modweave.errors import ModweaveError
from modweave.pipeline import Pipeline

app = typer.Typer()
console = Console()

CONFIG_OPTION = typer.Option(Path("example.yaml"), "--config", "-c", help="Path to the configuration file.")


@app.callback()
def main(log_level: str = typer.Option("WARNING", help="Logging level.")):
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _bootstrap(config: Path) -> Application:
    try:
        return Pipeline(load_config(config)).run()
    except ModweaveError as exc:
        console.print(f"✘ {exc}", style="red", markup=False)
        raise typer.Exit(code=1)


def _value(raw: str) -> Any:
    # "3" -> 3, "true" -> True, anything else stays a string
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def _props(pairs: List[str]) -> Dict[str, Any]:
    props: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint="--prop")
        props[key] = _value(raw)
    return props


@app.command()
def run(config: Path = CONFIG_OPTION):
    """Load every configured module and initialize the application."""
    application = _bootstrap(config)
    table = Table(title="Modules")
    table.add_column("Module")
    table.add_column("Namespaces")
    owners: Dict[str, List[str]] = {}
    for namespace in application.registry.namespaces():
        owners.setdefault(application.registry.owner_of(namespace), []).append(namespace)
    for name in application.modules:
        table.add_row(name, ", ".join(owners.get(name, [])) or "-")
    console.print(table)
    console.print(f"Routes: {', '.join(application.context['router'].paths()) or '-'}")


@app.command()
def routes(config: Path = CONFIG_OPTION):
    """List registered routes."""
    application = _bootstrap(config)
    for path in application.context["router"].paths():
        console.print(path)


@app.command()
def render(
    path: str = typer.Argument(..., help="Route to render, e.g. /posts."),
    prop: List[str] = typer.Option([], "--prop", "-p", help="Explicit prop as key=value."),
    config: Path = CONFIG_OPTION,
):
    """Render one route with optional explicit props."""
    props = _props(prop)
    application = _bootstrap(config)
    try:
        output = application.context["router"].dispatch(path, **props)
    except LookupError as exc:
        console.print(f"✘ {exc}", style="red", markup=False)
        raise typer.Exit(code=1)
    console.print(output, markup=False)


@app.command()
def invoke(
    namespace: str,
    action: str,
    args: List[str] = typer.Argument(None, help="Action arguments."),
    config: Path = CONFIG_OPTION,
):
    """Invoke one action by namespace and name."""
    application = _bootstrap(config)
    try:
        result = application.invoke(namespace, action, *[_value(a) for a in args or []])
    except ModweaveError as exc:
        console.print(f"✘ {exc}", style="red", markup=False)
        raise typer.Exit(code=1)
    console.print(result, markup=False)


if __name__ == "__main__":
    app()
