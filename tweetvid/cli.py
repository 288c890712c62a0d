import argparse
import asyncio
import sys
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from tweetvid.client.api import ApiClient, ApiError
from tweetvid.client.formatting import format_duration, format_option_label
from tweetvid.client.session import BEST, DownloaderSession, SessionState, open_in_new_tab
from tweetvid.config.settings import load_config

console = Console()


def render_metadata(session: DownloaderSession) -> None:
    info = session.video_info
    lines = [f"[bold]{info.title}[/bold]"]
    if info.uploader:
        lines.append(f"👤 {info.uploader}")
    lines.append(f"⏱️ Duration: {format_duration(info.duration)}")
    if info.thumbnail:
        lines.append(f"[dim]{info.thumbnail}[/dim]")
    console.print(Panel("\n".join(lines), title="🐦 Twitter / X Video"))

    table = Table(title="Select Quality")
    table.add_column("Value", style="cyan")
    table.add_column("Option")
    table.add_row(BEST, "Best Quality")
    for fmt in info.formats:
        if fmt.height:
            table.add_row(str(fmt.height), format_option_label(fmt))
    console.print(table)


def print_url(url: str) -> None:
    console.print(f"[green]⬇️ {url}[/green]")


async def run_fetch(args: argparse.Namespace) -> int:
    async with ApiClient(args.api_url, timeout=args.timeout) as client:
        opener = print_url if args.no_open else open_in_new_tab
        session = DownloaderSession(client, opener=opener)

        with console.status("⏳ Processing..."):
            await session.submit(args.url)
        if session.state == SessionState.EXTRACT_ERROR:
            console.print(f"[red]❌ {session.error}[/red]")
            return 1

        render_metadata(session)

        quality = args.quality
        if quality is None:
            quality = Prompt.ask("Quality", choices=session.quality_options(), default=BEST)
        try:
            session.select_quality(quality)
        except ValueError as e:
            console.print(f"[red]❌ {e}[/red]")
            return 2

        with console.status("⏳ Getting link..."):
            response = await session.download()
        if response is None:
            console.print(f"[red]❌ {session.error}[/red]")
            return 1

        if not args.no_open:
            console.print(f"[green]✓ Opened {response.download_url}[/green]")
        console.print("[dim]💡 Tip: The video opens in a new tab. Right-click and \"Save as\" to download.[/dim]")
        return 0


async def run_check(args: argparse.Namespace) -> int:
    async with ApiClient(args.api_url, timeout=args.timeout) as client:
        try:
            status = await client.check_dependencies()
        except ApiError as e:
            console.print(f"[red]❌ {e.message}[/red]")
            return 1
    if status.error:
        console.print(f"yt-dlp: [red]{status.ytdlp}[/red] ({status.error})")
        return 1
    console.print(f"yt-dlp: [green]{status.ytdlp}[/green] {status.version or ''}")
    return 0


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from tweetvid.main import create_app

    config = load_config()
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    config = load_config()
    parser = argparse.ArgumentParser(prog="tweetvid", description="Twitter / X video downloader")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    for name, help_text in (("fetch", "Extract a tweet and resolve a download link"),
                            ("check", "Ask the server whether yt-dlp is installed")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--api-url", default=config.client.api_url)
        cmd.add_argument("--timeout", type=float, default=config.client.timeout_seconds)
        if name == "fetch":
            cmd.add_argument("url")
            cmd.add_argument("--quality", default=None, help='Pixel height or "best"')
            cmd.add_argument("--no-open", action="store_true", help="Print the link instead of opening it")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return run_serve(args)
    if args.command == "fetch":
        return asyncio.run(run_fetch(args))
    return asyncio.run(run_check(args))


if __name__ == "__main__":
    sys.exit(main())
