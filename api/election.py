"""JSON command/query endpoint for an Election."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from urllib.parse import urlparse

import httpx

# Add the project root to the path so we can import votecore
sys.path.insert(0, str(Path(__file__).parent.parent))

from votecore.config import Config
from votecore.election import Election
from votecore.errors import ElectionError, InvalidArgument
from votecore.roll_import import RollImportError, import_voter_roll

logger = logging.getLogger(__name__)

CALLER_HEADER = "x-caller-address"

STATUS_BY_KIND = {
    "InvalidArgument": 400,
    "NotAuthorized": 403,
    "NotFound": 404,
    "InvalidState": 409,
    "Conflict": 409,
}


def make_handler(election: Election, config: Config | None = None):
    """Build a request handler serving one election.

    Accepts:
    - POST with JSON body: {"op": "castVote", "params": {"partyIndex": 0}}
    - POST with multipart form: voter roll upload in a 'file' field, with an
      optional 'filename' field

    The caller's address is read from the X-Caller-Address header. Returns
    JSON: {"result": ...} on success, {"error": ..., "kind": ...} on failure.
    """
    config = config or election.config
    logging.basicConfig(format='{asctime} | {name:^20} | [{levelname}] {message}',
                        style='{', level=config.LOG_LEVEL)

    operations = _operations(election, config)

    def handler(request):
        # Handle CORS preflight
        if request.method == "OPTIONS":
            return create_response(
                "",
                status=204,
                headers={
                    "Access-Control-Allow-Origin": "*",
                    "Access-Control-Allow-Methods": "POST, OPTIONS",
                    "Access-Control-Allow-Headers": f"Content-Type, {CALLER_HEADER}",
                },
            )

        if request.method != "POST":
            return create_response(
                {"error": "Method not allowed. Use POST."},
                status=405,
            )

        caller = request.headers.get(CALLER_HEADER)

        try:
            content_type = request.headers.get("content-type", "")

            if "application/json" in content_type:
                body = request.body.decode("utf-8")
                data = json.loads(body)
                op = data.get("op") if isinstance(data, dict) else None

                if not op:
                    return create_response(
                        {"error": "Missing 'op' in request body"},
                        status=400,
                    )
                if op not in operations:
                    return create_response(
                        {"error": f"Unknown operation: {op}"},
                        status=400,
                    )

                params = data.get("params") or {}
                if not isinstance(params, dict):
                    raise InvalidArgument("'params' must be an object")

                result = operations[op](caller, params)

            elif "multipart/form-data" in content_type:
                # Voter roll upload
                file_data = request.files.get("file")
                if not file_data:
                    return create_response(
                        {"error": "Missing 'file' in form data"},
                        status=400,
                    )

                filename = request.form.get("filename", file_data.filename or "upload")
                result = import_voter_roll(election, caller, filename, file_data.read()).to_dict()

            else:
                return create_response(
                    {"error": f"Unsupported content type: {content_type}"},
                    status=400,
                )

            return create_response({"result": result})

        except ElectionError as e:
            return create_response(e.to_dict(), status=STATUS_BY_KIND.get(e.kind, 400))
        except RollImportError as e:
            return create_response(
                {"error": str(e)},
                status=400,
            )
        except json.JSONDecodeError as e:
            return create_response(
                {"error": f"Invalid JSON: {e}"},
                status=400,
            )
        except Exception as e:
            logger.exception("unhandled error")
            return create_response(
                {"error": f"Internal error: {e}"},
                status=500,
            )

    return handler


def _operations(election: Election, config: Config) -> dict:
    """Map operation names to callables taking (caller, params)."""

    def param(params: dict, name: str):
        if name not in params:
            raise InvalidArgument(f"Missing parameter '{name}'")
        return params[name]

    def register_from_url(caller, params):
        source, content = fetch_url(param(params, "url"), timeout=config.FETCH_TIMEOUT)
        return import_voter_roll(election, caller, source, content).to_dict()

    return {
        # commands
        "addParty": lambda caller, p: election.add_party(
            caller, param(p, "name"), param(p, "candidateName")),
        "registerVoter": lambda caller, p: election.register_voter(caller, param(p, "address")),
        "registerMany": lambda caller, p: election.register_many(caller, param(p, "addresses")),
        "registerFromUrl": register_from_url,
        "start": lambda caller, p: _jsonable(election.start(caller, param(p, "durationMinutes"))),
        "castVote": lambda caller, p: election.cast_vote(caller, param(p, "partyIndex")),
        "end": lambda caller, p: election.end(caller),
        "publishResults": lambda caller, p: election.publish_results(caller).to_dict(),
        # queries
        "getParty": lambda caller, p: election.get_party(param(p, "index")).to_dict(),
        "getPartyCount": lambda caller, p: election.get_party_count(),
        "isRegistered": lambda caller, p: election.is_registered(p.get("address", caller)),
        "hasVoted": lambda caller, p: election.has_voted(p.get("address", caller)),
        "getVoteCount": lambda caller, p: election.get_vote_count(param(p, "partyIndex")),
        "getTotalVotes": lambda caller, p: election.get_total_votes(),
        "getRegisteredCount": lambda caller, p: election.get_registered_count(),
        "getState": lambda caller, p: election.get_state().name,
        "computeResult": lambda caller, p: election.compute_result().to_dict(),
        "snapshot": lambda caller, p: election.snapshot(viewer=caller),
    }


def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def fetch_url(url: str, timeout: float = 30.0) -> tuple[str, bytes]:
    """Fetch content from a URL.

    Returns (source_identifier, content_bytes).
    """
    # Validate URL
    parsed = urlparse(url) if isinstance(url, str) else None
    if parsed is None or parsed.scheme not in ("http", "https"):
        raise RollImportError(f"Invalid URL: {url!r}")

    try:
        with httpx.Client(follow_redirects=True, timeout=timeout) as client:
            response = client.get(url)
            response.raise_for_status()
            return url, response.content
    except httpx.HTTPStatusError as e:
        raise RollImportError(f"HTTP error fetching URL: {e.response.status_code}")
    except httpx.RequestError as e:
        raise RollImportError(f"Error fetching URL: {e}")


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object in the serverless runtime's format."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
