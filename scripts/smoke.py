"""Smoke test for the hostwatch JSON endpoint against the real host."""

from __future__ import annotations

import json
import sys
import threading
import time
import urllib.request
from dataclasses import replace
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hostwatch.app import build_engine
from hostwatch.core.config import Settings, StorageConfig
from hostwatch.web import create_app


def fetch_json(url: str) -> object:
    with urllib.request.urlopen(url) as response:  # nosec - local smoke test
        payload = response.read().decode("utf-8")
    return json.loads(payload)


def run_smoke() -> None:
    settings = replace(Settings(), storage=StorageConfig(database_url="sqlite:///:memory:"))
    engine = build_engine(settings)
    server = create_app(engine, port=0)
    address = server.server_address()
    print(f"Starting server on {address}")

    engine.start()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        time.sleep(2.5)
        current = fetch_json(f"{address}/api/current")
        history = fetch_json(f"{address}/api/history")
        assert isinstance(current, dict) and "cpu" in current, "current sample without CPU data"
        assert isinstance(history, list) and history, "empty history"
        print("SMOKE_OK", {
            "cpu": current.get("cpu"),
            "health": current.get("healthScore"),
            "history_points": len(history),
        })
    finally:
        server.stop()
        thread.join()
        engine.shutdown()


if __name__ == "__main__":
    run_smoke()
