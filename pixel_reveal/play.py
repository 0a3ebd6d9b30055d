import argparse
import json
import random
import sys

import requests

from .config import load_config


def _hidden_cells(progress: dict, width: int, height: int) -> list[tuple[int, int]]:
    """Return (x, y) of every cell not in progress['current_pixels']."""
    revealed = set(progress.get("current_pixels") or [])
    return [
        (i % width, i // width) for i in range(width * height) if i not in revealed
    ]


def _get_json(url: str, timeout: float) -> dict:
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.json()


def play(
    server: str,
    player: str,
    clicks: int,
    rng: random.Random,
    reset: bool = False,
    timeout: float = 30,
) -> dict:
    """Click `clicks` random hidden cells; return the final snapshot."""
    base = f"{server.rstrip('/')}/api/game/{player}"
    if reset:
        requests.post(f"{base}/reset", timeout=timeout).raise_for_status()

    snapshot = _get_json(base, timeout)
    for _ in range(clicks):
        progress = _get_json(f"{base}/progress", timeout)
        hidden = _hidden_cells(progress, snapshot["width"], snapshot["height"])
        if not hidden:
            break
        x, y = rng.choice(hidden)
        resp = requests.post(f"{base}/click", json={"x": x, "y": y}, timeout=timeout)
        resp.raise_for_status()
        out = resp.json()
        snapshot = out["snapshot"]
        if out.get("level_completed") is not None:
            print(f" {out.get('message') or 'Level complete'} (clicks={snapshot['clicks']})")
    return snapshot


def main() -> None:
    """CLI entrypoint: play random clicks against a running game server."""
    parser = argparse.ArgumentParser(description="Play pixel reveal against a running server")
    parser.add_argument("player", help="Player id ([A-Za-z0-9_-], up to 64 chars)")
    parser.add_argument(
        "--clicks",
        type=int,
        default=10,
        metavar="N",
        help="Number of clicks to play (default: 10)",
    )
    parser.add_argument(
        "--server",
        default=None,
        help="Server base URL (default: server_url from config, else http://127.0.0.1:8000)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the click choices")
    parser.add_argument("--reset", action="store_true", help="Reset the game before playing")
    parser.add_argument("--config", default=None, help="Path to game YAML config")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    server = args.server or config.server_url

    try:
        snapshot = play(server, args.player, args.clicks, random.Random(args.seed), reset=args.reset)
    except requests.HTTPError as e:
        detail = e.response.text if e.response is not None else str(e)
        print(f"Server error: {detail}", file=sys.stderr)
        sys.exit(1)
    except requests.ConnectionError:
        print(f"Could not reach game server at {server}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(snapshot, indent=2))


if __name__ == "__main__":
    main()
