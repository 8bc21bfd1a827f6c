"""CLI entry point for the CWA weather proxy."""

import argparse
import json
import logging
import sys

from weatherproxy.config.loader import get_config_value, load_config
from weatherproxy.errors import ProxyError
from weatherproxy.ingest.forecast_fetcher import ForecastFetcher
from weatherproxy.reporting.health_checker import HealthChecker

DEFAULT_CONFIG = "ops/configs/default.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weatherproxy",
        description="CWA 36-hour forecast proxy",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )

    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", default=None, help="Bind address")
    serve_p.add_argument("--port", type=int, default=None, help="Listen port")

    # cities / forecast
    sub.add_parser("cities", help="List supported cities")
    forecast_p = sub.add_parser("forecast", help="Fetch one city's forecast")
    forecast_p.add_argument("city", help="City name, e.g. 臺北市")

    # health
    sub.add_parser("health", help="Check API key and upstream reachability")

    # config show / config get
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    get_p = config_sub.add_parser("get", help="Print one config value")
    get_p.add_argument("key", help="Dotted key, e.g. upstream.timeout_seconds")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs each request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    config = load_config(args.config)

    if args.command == "serve":
        return _cmd_serve(config, args)
    elif args.command == "cities":
        return _cmd_cities(config)
    elif args.command == "forecast":
        return _cmd_forecast(config, args)
    elif args.command == "health":
        return _cmd_health(config)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_serve(config, args) -> int:
    import uvicorn

    from weatherproxy.api import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    print(f"Serving on http://{host}:{port}/api/weather/臺北市")
    uvicorn.run(create_app(config), host=host, port=port)
    return 0


def _cmd_cities(config) -> int:
    for city in config.cities:
        print(city)
    return 0


def _cmd_forecast(config, args) -> int:
    fetcher = ForecastFetcher.from_config(config)
    try:
        result = fetcher.fetch(args.city)
    except ProxyError as e:
        body = {"success": False, "error": e.category, "message": e.message}
        print(json.dumps(body, ensure_ascii=False, indent=2))
        return 1
    body = {"success": True, "data": result.to_dict()}
    print(json.dumps(body, ensure_ascii=False, indent=2))
    return 0


def _cmd_health(config) -> int:
    status = HealthChecker(config).check()
    print(f"API key: {'OK' if status.api_key_configured else 'MISSING'}")
    if status.upstream_reachable:
        print(f"CWA API: OK (HTTP {status.upstream_status})")
    else:
        print("CWA API: FAIL")
    print(f"Cities: {status.city_count}")
    return 0 if status.api_key_configured and status.upstream_reachable else 1


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "get":
        try:
            value = get_config_value(config, args.key)
        except (KeyError, IndexError, ValueError):
            print(f"Error: unknown config key {args.key}")
            return 1
        print(value)
        return 0
    else:
        print("Error: use 'config show' or 'config get KEY'")
        return 1


if __name__ == "__main__":
    sys.exit(main())
