import json
import logging
import os

import requests
import typer

from taixiu.config import settings
from taixiu.session import PredictionSession
from taixiu.sources.upstream import parse_lines

app = typer.Typer()
BASE = os.getenv("API_BASE", "http://127.0.0.1:8000")
API_KEY = os.getenv("API_KEY")


def _headers():
    h = {}
    if API_KEY:
        h["X-API-Key"] = API_KEY
    return h


@app.command()
def ingest(session: int, d1: int, d2: int, d3: int, side: int = typer.Option(None)):
    body = {"session": session, "d1": d1, "d2": d2, "d3": d3, "side": side}
    r = requests.post(f"{BASE}/ingest", json=body, headers=_headers())
    typer.echo(r.json())


@app.command()
def predict():
    r = requests.get(f"{BASE}/predict", headers=_headers())
    typer.echo(r.json())


@app.command()
def stats():
    r = requests.get(f"{BASE}/stats", headers=_headers())
    typer.echo(r.json())


@app.command()
def history(limit: int = 20):
    r = requests.get(f"{BASE}/history", params={"limit": limit}, headers=_headers())
    typer.echo(r.json())


@app.command()
def replay(path: str, warmup: int = 50):
    """Seed a local session from an upstream-format JSON file, then push the rest one by one."""
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    with open(path, encoding="utf-8") as f:
        records = parse_lines(json.load(f))
    if not records:
        typer.echo("no usable records")
        raise typer.Exit(code=1)
    session = PredictionSession(**settings.session_options())
    pred = session.load_initial(records[:warmup])
    for r in records[warmup:]:
        pred = session.push_record(r)
    typer.echo(f"next session {pred.target_session}: {pred.label} ({pred.confidence * 100:.0f}%)")
    typer.echo(session.get_stats())


@app.command()
def serve(host: str = "0.0.0.0", port: int = 8000, poll: bool = True):
    import uvicorn
    from taixiu.api.main import create_app

    uvicorn.run(create_app(poll=poll), host=host, port=port)


if __name__ == "__main__":
    app()
