import asyncio
import json
import logging
from logging.handlers import RotatingFileHandler
from typing import Annotated, Optional
import os
import typer
from bidboard.scheduler import scrape, watch as run_watch, write_snapshot
from bidboard.settings import load_settings
from bidboard.timeleft import format_time_left


# ---------------------------------------------------------------------------
# Global logging configuration - set once at import time
# ---------------------------------------------------------------------------
LOG_LEVEL = logging.DEBUG if os.getenv("BIDBOARD_DEBUG", "0") == "1" else logging.INFO
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s -- %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
file_handler = RotatingFileHandler(
    "./bidboard.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
)
file_handler.setLevel(LOG_LEVEL)
file_handler.setFormatter(
    logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s -- %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
)

root = logging.getLogger()  # root logger
root.addHandler(file_handler)

log = logging.getLogger("bidboard")

app = typer.Typer(help="bidboard CLI")


@app.command("scrape")
def scrape_cmd(
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the batch as JSON.")
    ] = False,
    output: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Also write a snapshot file here."),
    ] = None,
):
    """Scrape every listing once."""
    settings = load_settings()
    try:
        result = asyncio.run(scrape(settings))
    except Exception:
        log.exception("Error scraping data")
        raise typer.Exit(code=1)

    if output:
        write_snapshot(result, output)

    if as_json:
        print(json.dumps(result.to_json_dict(), indent=2, ensure_ascii=False))
        return

    for p in result.properties:
        print(
            f"{p.property_number:16} | #{p.id:8} | {p.current_price:>9,}€ | "
            f"{format_time_left(p.minutes_left):10} | {p.status.value}"
        )
    print(f"Total: {result.total:,}€ ({len(result.properties)} properties)")


@app.command()
def watch(
    output: Annotated[
        Optional[str], typer.Option("--output", "-o", help="Snapshot file path.")
    ] = None,
):
    """Re-scrape on an interval and keep the snapshot file fresh."""
    run_watch(output)


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p")] = int(os.getenv("PORT", "3000")),
):
    """Run the web dashboard and JSON API."""
    import uvicorn

    uvicorn.run("bidboard.web.app:app", host=host, port=port)


if __name__ == "__main__":
    app()
