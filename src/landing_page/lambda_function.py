"""
Landing page Lambda behind API Gateway (HTTP API v2 or REST v1 proxy events).

GET  /          forecast for the chosen destination, returning-visitor
                greeting and the latest registrations
POST /register  store a registration, set the identity cookie, redirect to /

Weather and registration reads degrade to an emptier page instead of failing
the request; only a failed registration write is reported back to the visitor.
"""
import base64
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, quote, unquote

from src.common.config import AppConfig, load_app_config
from src.common.errors import ConfigurationError, StoreError, UpstreamError
from src.identity.cookie import IdentityCookie
from src.landing_page.views import render_page
from src.registrations.repository import RegistrationRepository
from src.weather.forecast import WeatherClient

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
FLASH_COOKIE = "flash"
CLEAR_FLASH_COOKIE = f"{FLASH_COOKIE}=; Path=/; Max-Age=0; HttpOnly; SameSite=Lax"
HTML_HEADERS = {"Content-Type": "text/html; charset=utf-8"}
TEXT_HEADERS = {"Content-Type": "text/plain"}

MISSING_FIELDS_MESSAGE = "Please fill in all required fields."
INVALID_EMAIL_MESSAGE = "Please enter a valid email address."
REGISTERED_MESSAGE = "Registration successful!"
REGISTER_FAILED_MESSAGE = "Failed to register. Please try again later."


@dataclass
class Request:
    method: str
    path: str
    query: Dict[str, str] = field(default_factory=dict)
    form: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    version: str = "2.0"


@dataclass
class Services:
    config: AppConfig
    registrations: RegistrationRepository
    identity: IdentityCookie
    weather: Optional[WeatherClient] = None


def build_services(config: AppConfig) -> Services:
    """Wire the clients for one invocation from explicit config."""
    try:
        weather = WeatherClient.from_settings(config.weather)
    except ConfigurationError as e:
        logger.warning(f"Weather disabled: {e}")
        weather = None

    if not config.identity.secret:
        logger.warning("IDENTITY_COOKIE_SECRET is not set; returning visitors will not be recognised")

    return Services(
        config=config,
        registrations=RegistrationRepository(
            table_name=config.registrations.table_name,
            max_scan_pages=config.registrations.max_scan_pages,
        ),
        identity=IdentityCookie(
            name=config.identity.cookie_name,
            secret=config.identity.secret,
            max_age_seconds=config.identity.max_age_seconds,
        ),
        weather=weather,
    )


# ============================================================================
# Event parsing
# ============================================================================

def _first_values(parsed: Dict[str, List[str]]) -> Dict[str, str]:
    return {key: values[0] for key, values in parsed.items() if values}


def _headers(event: Dict[str, Any]) -> Dict[str, str]:
    return {str(k).lower(): v for k, v in (event.get("headers") or {}).items()}


def _parse_cookies(event: Dict[str, Any]) -> Dict[str, str]:
    pairs = list(event.get("cookies") or [])
    header = _headers(event).get("cookie")
    if header:
        pairs.extend(header.split(";"))

    cookies: Dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.strip().partition("=")
        if sep and name:
            cookies.setdefault(name, value)
    return cookies


def _load_body(event: Dict[str, Any]) -> str:
    body = event.get("body")
    if not body:
        return ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body).decode("utf-8")
    return body


def parse_event(event: Dict[str, Any]) -> Request:
    """Normalise an API Gateway proxy event (v1 or v2) into a Request."""
    http = (event.get("requestContext") or {}).get("http") or {}
    version = "2.0" if http or event.get("version") == "2.0" else "1.0"
    method = (http.get("method") or event.get("httpMethod") or "GET").upper()
    path = event.get("rawPath") or http.get("path") or event.get("path") or "/"

    if event.get("rawQueryString") is not None:
        query = _first_values(parse_qs(event.get("rawQueryString") or "", keep_blank_values=True))
    else:
        query = {k: v for k, v in (event.get("queryStringParameters") or {}).items() if v is not None}

    form: Dict[str, str] = {}
    content_type = _headers(event).get("content-type", "")
    if method == "POST" and (not content_type or "application/x-www-form-urlencoded" in content_type):
        form = _first_values(parse_qs(_load_body(event), keep_blank_values=True))

    return Request(
        method=method,
        path=path,
        query=query,
        form=form,
        cookies=_parse_cookies(event),
        version=version,
    )


# ============================================================================
# Responses
# ============================================================================

def _response(
    request: Request,
    status_code: int,
    body: str = "",
    headers: Optional[Dict[str, str]] = None,
    cookies: Optional[List[str]] = None,
) -> Dict[str, Any]:
    response: Dict[str, Any] = {
        "statusCode": status_code,
        "headers": dict(headers or {}),
        "body": body,
        "isBase64Encoded": False,
    }
    if cookies:
        if request.version == "2.0":
            response["cookies"] = list(cookies)
        else:
            response["multiValueHeaders"] = {"Set-Cookie": list(cookies)}
    return response


def flash_cookie(message: str) -> str:
    return f"{FLASH_COOKIE}={quote(message)}; Path=/; HttpOnly; SameSite=Lax"


def _redirect(request: Request, location: str, message: str, cookies: Optional[List[str]] = None) -> Dict[str, Any]:
    return _response(
        request,
        302,
        headers={"Location": location},
        cookies=[flash_cookie(message)] + list(cookies or []),
    )


# ============================================================================
# Handlers
# ============================================================================

def build_landing_state(request: Request, services: Services) -> Dict[str, Any]:
    """Everything the landing page shows, with failed lookups left empty."""
    config = services.config
    destination = (request.query.get("destination") or "").strip() or config.default_destination

    registration = None
    claimed_email = services.identity.read(request.cookies)
    if claimed_email:
        registration = services.registrations.find_by_email(claimed_email)

    weather = None
    weather_error = None
    if services.weather is None:
        weather_error = "Weather is not configured"
    else:
        try:
            weather = services.weather.fetch_daily_forecast(
                destination,
                units=config.weather.units,
                days=config.weather.forecast_days,
            )
        except UpstreamError as e:
            logger.warning(f"Weather unavailable for {destination}: {e}")
            weather_error = "Weather data is unavailable"

    flash = request.cookies.get(FLASH_COOKIE)
    return {
        "destination": destination,
        "name": request.query.get("name") or (registration.name if registration else ""),
        "email": request.query.get("email") or (registration.email if registration else ""),
        "registration": registration,
        "weather": weather,
        "weather_error": weather_error,
        "units": config.weather.units,
        "registrations": services.registrations.list(limit=config.registrations.list_limit),
        "flash": unquote(flash) if flash else None,
    }


def handle_index(request: Request, services: Services) -> Dict[str, Any]:
    state = build_landing_state(request, services)
    cookies = [CLEAR_FLASH_COOKIE] if state["flash"] else None
    return _response(request, 200, render_page(state), HTML_HEADERS, cookies)


def handle_register(request: Request, services: Services) -> Dict[str, Any]:
    if request.method != "POST":
        return _response(request, 405, "Method Not Allowed", TEXT_HEADERS)

    name = (request.form.get("name") or "").strip()
    email = (request.form.get("email") or "").strip()
    destination = (request.form.get("destination") or "").strip()

    if not name or not email or not destination:
        return _redirect(request, "/", MISSING_FIELDS_MESSAGE)
    if not EMAIL_PATTERN.match(email):
        return _redirect(request, "/", INVALID_EMAIL_MESSAGE)

    try:
        registration = services.registrations.create(name=name, email=email, destination=destination)
    except StoreError as e:
        logger.error(f"Registration failed: {e}")
        return _redirect(request, "/", REGISTER_FAILED_MESSAGE)

    cookies = []
    if services.identity.enabled:
        cookies.append(services.identity.issue(registration.email))
    return _redirect(request, f"/?destination={quote(destination)}", REGISTERED_MESSAGE, cookies)


def handle_request(event: Dict[str, Any], services: Services) -> Dict[str, Any]:
    request = parse_event(event)
    logger.info(f"Received {request.method} request to {request.path}")

    if request.path == "/" and request.method in ("GET", "HEAD"):
        return handle_index(request, services)
    if request.path == "/register":
        return handle_register(request, services)
    return _response(request, 404, "Not found", TEXT_HEADERS)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda entry point.

    Config is loaded per invocation (YAML defaults + environment) and passed
    down explicitly; nothing below this function reads the environment.
    """
    try:
        config = load_app_config()
        services = build_services(config)
        return handle_request(event, services)
    except Exception as e:
        logger.error(f"Landing page error: {e}", exc_info=True)
        return {
            "statusCode": 500,
            "headers": {"Content-Type": "application/json"},
            "body": json.dumps({"error": "Internal server error"}),
        }
