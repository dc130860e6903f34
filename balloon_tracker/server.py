import logging
from urllib.parse import quote

from flask import Flask, Response, jsonify, request
import requests

from .config import TrackerConfig

log = logging.getLogger(__name__)

settings = TrackerConfig.from_env()

app = Flask(__name__)

FORWARD_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]
# characters encodeURIComponent leaves alone besides letters, digits and _.-~
URI_COMPONENT_SAFE = "!*'()"


@app.route("/")
def home():
    return "Proxy is running. Try /api/wb/treasure/00.json"


def _cors(resp):
    resp.headers["Access-Control-Allow-Origin"] = "*"
    return resp


def _relay(upstream_url, headers=None):
    """
    Fetch upstream_url and hand back its status, body and content type
    untouched, with CORS and edge-cache headers layered on top.
    """
    try:
        upstream_response = requests.get(upstream_url, headers=headers, timeout=settings.UPSTREAM_TIMEOUT)
    except requests.RequestException as e:
        log.warning("upstream request to %s failed: %s", upstream_url, e)
        return _cors(jsonify({"error": "Failed to fetch from WindBorne", "details": str(e)})), 502

    resp = Response(
        upstream_response.content,
        status=upstream_response.status_code,
        content_type=upstream_response.headers.get("Content-Type") or "application/json",
    )
    _cors(resp)
    resp.headers["Cache-Control"] = settings.CACHE_CONTROL
    resp.headers["CDN-Cache-Control"] = settings.CACHE_CONTROL
    return resp


@app.route("/api/wb/<path:path>", methods=FORWARD_METHODS + ["OPTIONS"])
def forward_path(path):
    """
    Path proxy: /api/wb/<anything> is fetched from the same path on the
    WindBorne host. Pre-flight requests are answered here without an
    upstream call.
    """
    if request.method == "OPTIONS":
        resp = _cors(Response(status=204))
        resp.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        resp.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return resp

    return _relay(f"{settings.UPSTREAM_BASE_URL}/{path}", headers={"User-Agent": settings.USER_AGENT})


@app.route("/api/wb/treasure", methods=FORWARD_METHODS + ["OPTIONS"])
@app.route("/api/wb/treasure/<file>", methods=FORWARD_METHODS + ["OPTIONS"])
def treasure(file=None):
    """
    Snapshot proxy: one file from WindBorne's /treasure/ directory, named
    either by the path or by the ``file`` query parameter. Every method,
    OPTIONS included, is relayed as an upstream GET.
    """
    if file is None:
        file = request.args.get("file", "")
    return _relay(f"{settings.UPSTREAM_BASE_URL}/treasure/{quote(file, safe=URI_COMPONENT_SAFE)}")


def main():
    app.run(host=settings.HOST, port=settings.PORT, debug=settings.DEBUG)


if __name__ == "__main__":
    main()
