from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict

from rich.console import Console

from dockerfu import __version__
from dockerfu.docker_ops import DockerContainerLister
from dockerfu.errors import DockerfuError
from dockerfu.inspector import RouteInspector, render_table
from dockerfu.log import init_logging
from dockerfu.reconciler import Reconciler
from dockerfu.settings import Settings, load_settings
from dockerfu.store import RouteStore, connect_redis

COMMANDS = ("sync", "show", "serve")

log = logging.getLogger("dockerfu.cli")


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dockerfu",
        description="Sync Hipache routes in Redis with running Docker containers.",
        epilog="Commands run in the order given, e.g. `dockerfu sync show`; the first failure stops the run.",
    )
    p.add_argument("commands", nargs="+", choices=COMMANDS, metavar="{sync,show,serve}")
    p.add_argument("--version", action="version", version=f"dockerfu {__version__}")
    p.add_argument("--config", help="Load settings from a JSON file")
    p.add_argument("--json", action="store_true", help="Print results as JSON")
    p.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    d = p.add_argument_group("docker")
    d.add_argument("--docker-socket-path", help="Docker UNIX socket [default: /var/run/docker.sock]")
    d.add_argument("--docker-host", help="Docker TCP host (takes precedence over the socket)")
    d.add_argument("--docker-port", type=int, help="Docker TCP port [default: 4243]")

    r = p.add_argument_group("redis")
    r.add_argument("--redis-host", help="Redis hostname [default: 127.0.0.1]")
    r.add_argument("--redis-port", type=int, help="Redis port [default: 6376]")
    r.add_argument("--redis-url", help="redis:// URL (overrides host and port)")

    m = p.add_argument_group("routing")
    m.add_argument("--hipache-backend", help="Backend base URL [default: http://127.0.0.1]")
    m.add_argument("--web-ports", help="PORT[,PORT,...] web ports inside containers [default: 8080,80,3000]")
    m.add_argument("--prefix-maps", help="PREFIX:DOMAIN[,PREFIX:DOMAIN,...] image prefix -> domain")
    m.add_argument("--exception-maps", help="IMAGE:FQDN[,IMAGE:FQDN,...] image -> FQDN exceptions")
    m.add_argument("--write-concurrency", type=int, help="Parallel Redis writes during sync [default: 1]")
    m.add_argument(
        "--skip-missing-ports",
        action="store_true",
        help="Skip containers without a published web port instead of aborting sync",
    )

    a = p.add_argument_group("serve")
    a.add_argument("--api-host", help="HTTP bind address [default: 127.0.0.1]")
    a.add_argument("--api-port", type=int, help="HTTP port [default: 8000]")
    return p


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "docker_socket_path": args.docker_socket_path,
        "docker_host": args.docker_host,
        "docker_port": args.docker_port,
        "redis_host": args.redis_host,
        "redis_port": args.redis_port,
        "redis_url": args.redis_url,
        "hipache_backend": args.hipache_backend,
        "web_ports": args.web_ports,
        "prefix_maps": args.prefix_maps,
        "exception_maps": args.exception_maps,
        "write_concurrency": args.write_concurrency,
        "strict_ports": False if args.skip_missing_ports else None,
        "log_level": args.log_level,
        "api_host": args.api_host,
        "api_port": args.api_port,
    }
    return load_settings(args.config, overrides)


def run_sync(settings: Settings, lister, store: RouteStore, as_json: bool) -> None:
    res = Reconciler(settings, lister, store).sync()
    if as_json:
        _print(asdict(res))


def run_show(settings: Settings, lister, store: RouteStore, as_json: bool) -> None:
    rows = RouteInspector(settings, lister, store).show()
    if as_json:
        _print([asdict(r) for r in rows])
        return
    Console().print(render_table(rows))


def run_serve(settings: Settings, lister, store: RouteStore) -> None:
    import uvicorn

    from main import create_app

    app = create_app(settings, lister, store)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_args(args)
        init_logging(settings.log_level)
        store = RouteStore(connect_redis(settings))
    except DockerfuError as e:
        init_logging("info")
        log.error("error: %s", e)
        return 1

    lister = DockerContainerLister(settings)
    try:
        for cmd in args.commands:
            if cmd == "sync":
                run_sync(settings, lister, store, args.json)
            elif cmd == "show":
                run_show(settings, lister, store, args.json)
            elif cmd == "serve":
                run_serve(settings, lister, store)
    except DockerfuError as e:
        log.error("error %s: %s", cmd, e)
        return 1
    finally:
        store.close()
        lister.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
