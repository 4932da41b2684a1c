"""HTTP interface for submitting solver jobs and reading their outcome."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from typing import Optional

from flask import Flask, jsonify, request

from groupmixer.models import ApiInput, InputError
from groupmixer.server.jobs import JobManager

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000


def _error(message: str, status: int):
    return message, status, {"Content-Type": "text/plain; charset=utf-8"}


def create_app(job_manager: Optional[JobManager] = None) -> Flask:
    """Build the web application around ``job_manager`` (a fresh one if not given)."""
    manager = job_manager if job_manager is not None else JobManager()
    app = Flask(__name__)
    app.extensions["job_manager"] = manager

    @app.post("/api/v1/jobs")
    def create_job():
        if not request.is_json:
            return _error("Expected request with `Content-Type: application/json`", 415)
        try:
            payload = json.loads(request.get_data(as_text=True))
        except ValueError:
            return _error("Failed to parse the request body as JSON", 400)
        try:
            api_input = ApiInput.from_dict(payload)
        except InputError as exc:
            return _error(f"Failed to deserialize the JSON body: {exc}", 422)
        job_id = manager.create_job(api_input)
        return jsonify(job_id=str(job_id)), 201

    def lookup(job_id_text: str):
        try:
            job_id = uuid.UUID(job_id_text)
        except ValueError:
            return _error(f"Invalid URL: cannot parse {job_id_text!r} as a job id", 400)
        job = manager.get_job(job_id)
        if job is None:
            return "", 404
        return jsonify(job.to_dict())

    @app.get("/api/v1/jobs/<job_id>/status")
    def job_status(job_id: str):
        return lookup(job_id)

    @app.get("/api/v1/jobs/<job_id>/result")
    def job_result(job_id: str):
        return lookup(job_id)

    return app


def main(argv: Optional[list[str]] = None) -> int:
    """Serve the job API."""
    parser = argparse.ArgumentParser(description="Serve the group scheduling job API.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    app = create_app()
    print(f"listening on {args.host}:{args.port}")
    app.run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())