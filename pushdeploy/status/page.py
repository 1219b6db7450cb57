"""HTML renderer for the deployment status page.

Builds a self-contained page listing every registered repository with its
latest deployment outcome.  All values are HTML-escaped.

Usage
-----
>>> from pushdeploy.status.page import render_status_page
>>> html = render_status_page(tracker.snapshot(), identifiers=registry.identifiers)

"""

from __future__ import annotations

import html
import typing as typ

from .models import DeploymentStatus

if typ.TYPE_CHECKING:
    import datetime as dt

_EMPTY = "&mdash;"

_HEAD = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Deployments</title>
<style>
body { font-family: sans-serif; margin: 2rem; }
table { border-collapse: collapse; }
th, td { padding: 0.4rem 0.8rem; border-bottom: 1px solid #ddd; text-align: left; }
.ok { color: #1a7f37; }
.failed { color: #cf222e; }
</style>
</head>
<body>
<h1>Deployments</h1>"""

_TAIL = """</body>
</html>
"""

_COLUMNS = ("Repository", "State", "Last attempt", "Last success", "Exit code", "Duration")


def _format_timestamp(value: dt.datetime | None) -> str:
    """Format a timestamp as a human-readable UTC string."""
    if value is None:
        return _EMPTY
    return html.escape(value.strftime("%Y-%m-%d %H:%M:%S UTC"))


def _format_duration(value: dt.timedelta | None) -> str:
    """Format a duration in seconds with one decimal place."""
    if value is None:
        return _EMPTY
    return f"{value.total_seconds():.1f}s"


def _state(status: DeploymentStatus) -> tuple[str, str]:
    """Return the CSS class and label describing ``status``."""
    if status.last_error is not None:
        return ("failed", "failed")
    if status.last_attempt is None:
        return ("", "never deployed")
    if status.last_success is not None and status.last_success >= status.last_attempt:
        return ("ok", "ok")
    return ("", "running")


def _render_row(identifier: str, status: DeploymentStatus) -> str:
    css_class, label = _state(status)
    exit_code = _EMPTY if status.last_exit_code is None else str(status.last_exit_code)
    cells = (
        html.escape(identifier),
        f'<span class="{css_class}">{label}</span>' if css_class else label,
        _format_timestamp(status.last_attempt),
        _format_timestamp(status.last_success),
        exit_code,
        _format_duration(status.last_duration),
    )
    return "<tr>" + "".join(f"<td>{cell}</td>" for cell in cells) + "</tr>"


def render_status_page(
    snapshot: typ.Mapping[str, DeploymentStatus],
    *,
    identifiers: typ.Iterable[str] = (),
) -> str:
    """Render the status page for ``snapshot``.

    Parameters
    ----------
    snapshot
        Current identifier-to-status map.
    identifiers
        Registered identifiers; those without a status record are listed
        as never deployed.

    Returns
    -------
    str
        Complete HTML document.

    """
    keys = sorted(set(snapshot) | set(identifiers))
    lines = [_HEAD]
    if not keys:
        lines.append("<p>No repositories are configured.</p>")
    else:
        lines.append("<table>")
        lines.append("<tr>" + "".join(f"<th>{col}</th>" for col in _COLUMNS) + "</tr>")
        lines.extend(
            _render_row(key, snapshot.get(key) or DeploymentStatus()) for key in keys
        )
        lines.append("</table>")
    lines.append(_TAIL)
    return "\n".join(lines)
