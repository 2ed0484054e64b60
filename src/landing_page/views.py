"""HTML for the landing page: destination forecast, registration form, latest registrations."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from src.registrations.repository import Registration
from src.weather.aggregate import DailySummary

UNIT_SYMBOLS = {"metric": "°C", "imperial": "°F"}


def _h(x: Any) -> str:
    """Escape and stringify for HTML."""
    if x is None:
        return ""
    s = str(x)
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


def _fmt_temp(x: Optional[float], symbol: str) -> str:
    if x is None:
        return "–"
    return f"{x:.0f}{symbol}"


def _fmt_pop(x: Optional[float]) -> str:
    if x is None:
        return ""
    return f"{x * 100:.0f}%"


def _fmt_ts(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def render_weather(destination: str, weather: Optional[List[DailySummary]], units: str, error: Optional[str] = None) -> str:
    if weather is None:
        return f'<p class="muted">{_h(error or "Weather data is unavailable")} for {_h(destination)}.</p>'
    if not weather:
        return f'<p class="muted">No upcoming forecast for {_h(destination)}.</p>'

    symbol = UNIT_SYMBOLS.get(units, "")
    rows = []
    for day in weather:
        icon = ""
        if day.icon:
            icon = f'<img src="https://openweathermap.org/img/wn/{_h(day.icon)}.png" alt="" width="32" height="32">'
        rows.append(
            f"""
      <tr>
        <td>{_h(day.local_date)}</td>
        <td>{icon} {_h(day.description)}</td>
        <td class="num">{_fmt_temp(day.temperature_min, symbol)} / {_fmt_temp(day.temperature_max, symbol)}</td>
        <td class="num">{_fmt_pop(day.max_precipitation_probability)}</td>
      </tr>"""
        )
    return f"""<table>
    <thead><tr><th>Date</th><th>Conditions</th><th class="num">Min / Max</th><th class="num">Rain</th></tr></thead>
    <tbody>{"".join(rows)}
    </tbody>
  </table>"""


def render_registrations(registrations: List[Registration]) -> str:
    if not registrations:
        return '<p class="muted">No registrations yet.</p>'
    items = "\n".join(
        f"    <li>{_h(r.name)} &rarr; {_h(r.destination)} <span class=\"muted\">{_fmt_ts(r.created_at)}</span></li>"
        for r in registrations
    )
    return f"<ul>\n{items}\n  </ul>"


def render_page(state: Dict[str, Any]) -> str:
    """Full landing page for the state built by the Lambda handler."""
    destination = state.get("destination", "")
    flash = state.get("flash")
    welcome = state.get("registration")

    flash_html = f'<p class="flash">{_h(flash)}</p>' if flash else ""
    welcome_html = ""
    if welcome is not None:
        welcome_html = f"<p>Welcome back, {_h(welcome.name)}! You are registered for {_h(welcome.destination)}.</p>"

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Conference Registration</title>
  <style>
    body {{ font-family: system-ui, sans-serif; margin: 1rem 2rem; max-width: 48rem; }}
    table {{ border-collapse: collapse; width: 100%; font-size: 0.875rem; }}
    th, td {{ border-bottom: 1px solid #ddd; padding: 0.35rem 0.5rem; text-align: left; }}
    .num {{ text-align: right; }}
    .muted {{ color: #777; }}
    .flash {{ background: #eef6ff; border: 1px solid #9cf; padding: 0.5rem; }}
    label {{ display: block; margin-top: 0.5rem; }}
  </style>
</head>
<body>
  <h1>Conference Registration</h1>
  {flash_html}
  {welcome_html}
  <h2>Weather in {_h(destination)}</h2>
  <form method="get" action="/">
    <input type="text" name="destination" value="{_h(destination)}">
    <button type="submit">Show forecast</button>
  </form>
  {render_weather(destination, state.get("weather"), state.get("units", "metric"), state.get("weather_error"))}
  <h2>Register</h2>
  <form method="post" action="/register">
    <label>Name <input type="text" name="name" value="{_h(state.get("name"))}" required></label>
    <label>Email <input type="email" name="email" value="{_h(state.get("email"))}" required></label>
    <label>Destination <input type="text" name="destination" value="{_h(destination)}" required></label>
    <button type="submit">Register</button>
  </form>
  <h2>Latest registrations</h2>
  {render_registrations(state.get("registrations") or [])}
</body>
</html>"""
