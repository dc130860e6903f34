import argparse
import asyncio
import logging
import sys

import aiohttp

from .config import TrackerConfig
from .ingestion import BalloonIngestor, SlotStatus
from .points import HOURS, hour_label
from .viewer import BalloonViewer
from .wind import WindQueryError, fetch_wind

log = logging.getLogger("balloon_tracker")


def _serve(args, config):
    from .server import app

    app.run(host=args.host or config.HOST, port=args.port or config.PORT, debug=args.debug or config.DEBUG)
    return 0


def _ingest(args, config):
    ingestor = BalloonIngestor(args.base_url or config.SNAPSHOT_BASE_URL)
    viewer = BalloonViewer(ingestor)
    snap = asyncio.run(ingestor.run())

    for slot in range(HOURS):
        status = snap.statuses[slot]
        note = "" if status is SlotStatus.LOADED else f" ({status.value})"
        print(f"{hour_label(slot)}.json  {len(snap.slots[slot]):5d} points{note}")
    print(viewer.summary())
    print(viewer.status_line())
    return 1 if snap.error else 0


async def _wind_report(lat, lon, url):
    async with aiohttp.ClientSession() as session:
        return await fetch_wind(session, lat, lon, url)


def _wind(args, config):
    try:
        report = asyncio.run(_wind_report(args.lat, args.lon, config.OPEN_METEO_URL))
    except (WindQueryError, aiohttp.ClientError, ValueError) as e:
        log.error("wind lookup failed: %s", e)
        return 1
    print(f"Ground-level wind (10m): {report.windspeed_10m} m/s from {report.winddir_10m}°")
    if report.windspeed_100m is not None:
        print(f"100m wind: {report.windspeed_100m} m/s from {report.winddir_100m}°")
    print(f"Temperature: {report.temperature_c} °C")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="balloon-tracker", description="WindBorne balloon tracker")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the caching proxy")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.add_argument("--debug", action="store_true")
    serve.set_defaults(func=_serve)

    ingest = sub.add_parser("ingest", help="load the last 24 hourly snapshots")
    ingest.add_argument("--base-url", help="snapshot directory, e.g. http://127.0.0.1:5000/api/wb/treasure")
    ingest.set_defaults(func=_ingest)

    wind = sub.add_parser("wind", help="wind at a position from Open-Meteo")
    wind.add_argument("lat", type=float)
    wind.add_argument("lon", type=float)
    wind.set_defaults(func=_wind)
    return parser


def main(argv=None):
    config = TrackerConfig.from_env()
    logging.basicConfig(level=config.LOG_LEVEL, format="[%(levelname)s] %(asctime)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
