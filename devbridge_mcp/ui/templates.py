# ruff: noqa: E501
"""HTML templates for UI resources."""

import html
import re
from collections.abc import Sequence

from devbridge_mcp.models import CommandLogEntry


def minify_html(page: str) -> str:
    """Minify HTML by removing comments and whitespace between tags.

    Args:
        page: HTML string to minify

    Returns:
        Minified HTML string
    """
    page = re.sub(r'<!--(?!\[if\s).*?-->', '', page, flags=re.DOTALL)
    page = re.sub(r'[ \t]+', ' ', page)
    page = re.sub(r'\n\s*', '\n', page)
    page = re.sub(r'\n+', '\n', page)
    page = re.sub(r'>\s+<', '><', page)
    return page.strip()


def get_base_styles() -> str:
    """Get the shared CSS for devbridge pages."""
    return """
    <style>
        :root {
            --background: 0 0% 100%;
            --foreground: 222.2 84% 4.9%;
            --muted-foreground: 215.4 16.3% 46.9%;
            --border: 214.3 31.8% 91.4%;
            --primary: 221.2 83.2% 53.3%;
            --primary-foreground: 210 40% 98%;
            --radius: 0.5rem;
        }

        * { box-sizing: border-box; margin: 0; padding: 0; }

        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Inter", sans-serif;
            font-size: 14px;
            line-height: 1.5;
            color: hsl(var(--foreground));
            background: hsl(var(--background));
            padding: 24px;
        }

        .container { max-width: 1200px; margin: 0 auto; }

        .header {
            border-bottom: 1px solid hsl(var(--border));
            padding-bottom: 16px;
            margin-bottom: 24px;
        }

        .title { font-size: 24px; font-weight: 600; letter-spacing: -0.025em; }
        .subtitle { font-size: 14px; color: hsl(var(--muted-foreground)); margin-top: 4px; }

        button {
            font-size: 13px;
            font-weight: 500;
            border: none;
            border-radius: var(--radius);
            padding: 6px 12px;
            cursor: pointer;
            background: hsl(var(--primary));
            color: hsl(var(--primary-foreground));
        }
    </style>
    """


def _entry_html(entry: CommandLogEntry, expanded: bool) -> str:
    details = []
    if entry.output:
        details.append(f'<pre class="output">{html.escape(entry.output)}</pre>')
    if entry.error:
        details.append(f'<pre class="error">{html.escape(entry.error)}</pre>')
    if entry.exit_code is not None:
        details.append(f'<div class="exit">Exit code: {entry.exit_code}</div>')

    hidden = "" if expanded else " hidden"
    body = f'<div class="details{hidden}">{"".join(details)}</div>' if details else ""
    return (
        f'<div class="entry {entry.status_css_class}" data-status="{entry.status.value}">'
        f'<div class="summary" onclick="toggleEntry(this)">'
        f'<span class="time">{entry.display_time}</span>'
        f'<span class="status">{entry.status_display}</span>'
        f'<code class="command">{html.escape(entry.command)}</code>'
        f'<span class="duration">{entry.execution_time_display}</span>'
        f"</div>{body}</div>"
    )


def get_command_log_html(entries: Sequence[CommandLogEntry], expanded: bool = True) -> str:
    """Generate the command history page, newest command first.

    Args:
        entries: Log entries, oldest first
        expanded: Whether output/error details start unfolded

    Returns:
        Complete HTML page
    """
    rows = "\n".join(_entry_html(entry, expanded) for entry in reversed(entries))
    if not rows:
        rows = '<div class="empty">No commands recorded</div>'

    page = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>Device bridge commands</title>
        {get_base_styles()}
        <style>
            .controls {{ display: flex; gap: 8px; margin-bottom: 16px; }}
            .entry {{
                border-left: 3px solid #6b7280;
                background: #111827;
                color: #e5e7eb;
                margin-bottom: 4px;
                border-radius: 4px;
                font-family: 'Monaco', 'Menlo', 'Consolas', monospace;
                font-size: 13px;
            }}
            .summary {{ display: flex; gap: 12px; padding: 6px 10px; cursor: pointer; }}
            .time {{ color: #9ca3af; }}
            .status {{ min-width: 90px; font-weight: 600; }}
            .command {{ flex: 1; white-space: pre-wrap; word-break: break-all; }}
            .duration {{ color: #9ca3af; }}
            .details {{ padding: 0 10px 8px 10px; }}
            .details pre {{ white-space: pre-wrap; margin-top: 4px; }}
            .error {{ color: #fca5a5; }}
            .exit {{ color: #9ca3af; margin-top: 4px; }}
            .status-starting {{ border-left-color: #3b82f6; }}
            .status-success {{ border-left-color: #16a34a; }}
            .status-failed {{ border-left-color: #dc2626; }}
            .status-timeout {{ border-left-color: #f59e0b; }}
            .status-exception {{ border-left-color: #a855f7; }}
            .hidden {{ display: none !important; }}
            .empty {{ color: #6b7280; padding: 32px; text-align: center; }}
            .stats {{ font-size: 12px; color: #6b7280; margin-top: 8px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <div class="title">Device bridge commands</div>
                <div class="subtitle">{len(entries)} recent command(s)</div>
            </div>

            <div class="controls">
                <button onclick="setAll(false)">Expand all</button>
                <button onclick="setAll(true)">Collapse all</button>
                <button onclick="onlyFailures()" id="btn-failures">Failures only</button>
            </div>

            <div id="log">
                {rows}
            </div>

            <div class="stats" id="stats"></div>
        </div>

        <script>
            let failuresOnly = false;

            function toggleEntry(summary) {{
                const details = summary.nextElementSibling;
                if (details) details.classList.toggle('hidden');
            }}

            function setAll(hide) {{
                document.querySelectorAll('.details').forEach(d => d.classList.toggle('hidden', hide));
            }}

            function onlyFailures() {{
                failuresOnly = !failuresOnly;
                let visible = 0;
                const entries = document.querySelectorAll('.entry');
                entries.forEach(e => {{
                    const ok = ['success', 'starting'].includes(e.dataset.status);
                    const show = !failuresOnly || !ok;
                    e.classList.toggle('hidden', !show);
                    if (show) visible++;
                }});
                document.getElementById('stats').textContent =
                    `Showing ${{visible}} of ${{entries.length}} commands`;
            }}
        </script>
    </body>
    </html>
    """

    return minify_html(page)
