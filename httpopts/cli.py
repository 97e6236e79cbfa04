from __future__ import annotations

import json
import os
import sys
import typing

import click
import httpx

# ---------------------------------------------------------------------------
# Rich output helpers (graceful fallback when rich is not installed)
# ---------------------------------------------------------------------------

try:
    from rich.console import Console
    from rich.syntax import Syntax
    from rich.text import Text

    HAS_RICH = True
except ImportError:  # pragma: no cover
    HAS_RICH = False


def _status_color(status_code: int) -> str:
    """Return a rich color name based on HTTP status category."""
    if status_code < 200:
        return "cyan"
    elif status_code < 300:
        return "green"
    elif status_code < 400:
        return "yellow"
    elif status_code < 500:
        return "red"
    else:
        return "bold red"


def is_binary_content_type(content_type: str) -> bool:
    text_types = (
        "text/",
        "application/json",
        "application/xml",
        "application/x-www-form-urlencoded",
    )
    ct = content_type.lower().split(";")[0].strip()
    return not any(ct.startswith(t) for t in text_types) and ct != ""


def _body_lines(response: httpx.Response) -> list[str]:
    content = response.content
    if not content:
        return []
    content_type = response.headers.get("content-type", "")
    if is_binary_content_type(content_type) or b"\0" in content:
        return [f"<{len(content)} bytes of binary data>"]
    if "application/json" in content_type:
        try:
            return [json.dumps(json.loads(response.text), indent=4, ensure_ascii=False)]
        except (json.JSONDecodeError, TypeError):
            pass
    return [response.text]


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_response_plain(response: httpx.Response) -> str:
    status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}"
    lines: list[str] = [status_line.rstrip()]
    for key, value in response.headers.items():
        lines.append(f"{key}: {value}")
    lines.append("")
    lines.extend(_body_lines(response))
    return "\n".join(lines)


def print_response_rich(console: Console, response: httpx.Response) -> None:
    color = _status_color(response.status_code)

    status_line = Text()
    status_line.append(f"{response.http_version} ", style="bold dim")
    status_line.append(f"{response.status_code}", style=f"bold {color}")
    if response.reason_phrase:
        status_line.append(f" {response.reason_phrase}", style=color)
    console.print(status_line)

    for key, value in response.headers.items():
        header_text = Text()
        header_text.append(f"{key}", style="dim cyan")
        header_text.append(": ", style="dim")
        header_text.append(value)
        console.print(header_text)

    console.print()

    content_type = response.headers.get("content-type", "")
    for line in _body_lines(response):
        if "application/json" in content_type and not line.startswith("<"):
            console.print(Syntax(line, "json", theme="monokai"))
        else:
            console.print(line)


# ---------------------------------------------------------------------------
# Argument parsing helpers
# ---------------------------------------------------------------------------


def parse_header(header: str) -> tuple[str, str]:
    """Parse a 'Key: Value' header string."""
    if ":" not in header:
        raise click.BadParameter(
            f"Invalid header format: '{header}'. Expected 'Key: Value'."
        )
    key, _, value = header.partition(":")
    return key.strip(), value.strip()


def parse_pair(pair: str) -> tuple[str, str]:
    """Parse a 'key=value' string."""
    if "=" not in pair:
        raise click.BadParameter(f"Invalid format: '{pair}'. Expected 'key=value'.")
    key, _, value = pair.partition("=")
    return key, value


def parse_file_field(spec: str) -> tuple[str, str]:
    """Parse a curl-style 'field=@path' string."""
    field, value = parse_pair(spec)
    if not value.startswith("@"):
        raise click.BadParameter(f"Invalid file field: '{spec}'. Expected 'field=@path'.")
    return field, value[1:]


def build_options(
    *,
    headers: tuple[str, ...] = (),
    params: tuple[str, ...] = (),
    data: tuple[str, ...] = (),
    json_body: str | None = None,
    form_files: tuple[str, ...] = (),
    cookies: tuple[str, ...] = (),
    auth: tuple[str, str] | None = None,
    max_redirects: int | None = None,
    timeout: float | None = None,
) -> list[typing.Any]:
    """Translate command line flags into request options."""
    import httpopts

    options: list[typing.Any] = []
    if params:
        options.append(httpopts.params(dict(parse_pair(p) for p in params)))
    if headers:
        options.append(httpopts.headers(dict(parse_header(h) for h in headers)))
    if cookies:
        options.append(httpopts.cookies(dict(parse_pair(c) for c in cookies)))
    if auth is not None:
        options.append(httpopts.auth(*auth))
    if json_body is not None:
        try:
            options.append(httpopts.json(json.loads(json_body)))
        except json.JSONDecodeError as exc:
            raise click.BadParameter(f"Invalid JSON: {exc}") from exc
    if data:
        options.append(httpopts.data(dict(parse_pair(d) for d in data)))
    try:
        if max_redirects is not None:
            options.append(httpopts.redirect_limit(max_redirects))
        if timeout is not None:
            options.append(httpopts.timeout(timeout))
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    uploads: list[httpopts.FileField] = []
    for field, path in [parse_file_field(spec) for spec in form_files]:
        try:
            stream = open(path, "rb")
        except OSError as exc:
            for upload in uploads:
                upload.content.close()
            raise click.BadParameter(f"Cannot open '{path}': {exc}") from exc
        uploads.append(httpopts.FileField(field, os.path.basename(path), stream))
    if uploads:
        options.append(httpopts.files(*uploads))
    return options


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------


@click.command(help="Send an HTTP request built from composable options.")
@click.argument("url")
@click.option("-m", "--method", default="GET", help="HTTP method.")
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    help='Add a header, e.g. -H "Accept: application/json".',
)
@click.option("-p", "--param", "params", multiple=True, help="Query parameter key=value.")
@click.option("-d", "--data", "data", multiple=True, help="Form field key=value.")
@click.option("-j", "--json-data", "json_body", default=None, help="JSON data to send.")
@click.option(
    "-F", "--form-file", "form_files", multiple=True, help="Upload a file, field=@path."
)
@click.option("--cookie", "cookies", multiple=True, help="Cookie key=value.")
@click.option("--auth", nargs=2, default=None, help="Username and password.", type=str)
@click.option("--max-redirects", type=int, default=None, help="Redirect limit.")
@click.option("--timeout", type=float, default=None, help="Timeout in seconds.")
@click.option(
    "--no-color", is_flag=True, default=False, help="Disable colored output."
)
def main(
    url: str,
    method: str,
    headers: tuple[str, ...],
    params: tuple[str, ...],
    data: tuple[str, ...],
    json_body: str | None,
    form_files: tuple[str, ...],
    cookies: tuple[str, ...],
    auth: tuple[str, str] | None,
    max_redirects: int | None,
    timeout: float | None,
    no_color: bool,
) -> None:
    import httpopts

    use_rich = HAS_RICH and not no_color and sys.stdout.isatty()

    options = build_options(
        headers=headers,
        params=params,
        data=data,
        json_body=json_body,
        form_files=form_files,
        cookies=cookies,
        auth=auth,
        max_redirects=max_redirects,
        timeout=timeout,
    )

    try:
        response = httpopts.send(method.upper(), url, *options)
    except (httpopts.HTTPOptsError, httpx.HTTPError) as exc:
        if use_rich:
            console = Console(stderr=True)
            console.print(f"[bold red]{type(exc).__name__}[/bold red]: {exc}")
        else:
            click.echo(f"{type(exc).__name__}: {exc}")
        sys.exit(1)

    if use_rich:
        console = Console()
        for hist_resp in response.history:
            print_response_rich(console, hist_resp)
            console.print()
        print_response_rich(console, response)
    else:
        for hist_resp in response.history:
            click.echo(format_response_plain(hist_resp))
            click.echo()
        click.echo(format_response_plain(response))

    if response.status_code >= 300:
        sys.exit(1)
