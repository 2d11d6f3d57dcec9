"""CLI interface for ideaforge with live Markdown streaming."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
import httpx
import yaml
from rich.console import Console, Group
from rich.live import Live
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from ideaforge.config import IdeaforgeConfig, load_config
from ideaforge.ideas import split_ideas
from ideaforge.llm.client import IdeaClient
from ideaforge.prompts import build_idea_prompt, build_market_prompt
from ideaforge.types import IdeaParams, RequestFailed

console = Console()

_logger = logging.getLogger(__name__)

# Lines of the reasoning trace kept on screen while streaming
_THINKING_TAIL = 12


class StreamView:
    """Caller-side state for one streamed reply.

    Owns the content and thinking buffers and the live display; the
    stream driver only ever sees the three callbacks.
    """

    def __init__(self, con: Console | None, title: str) -> None:
        self.con = con
        self.title = title
        self.content: list[str] = []
        self.thinking: list[str] = []
        self.done = False
        self._live: Live | None = None

    def __enter__(self) -> StreamView:
        self._live = Live(self._render(), console=self.con, refresh_per_second=8)
        self._live.__enter__()
        return self

    def __exit__(self, *exc) -> None:
        self.on_done()
        if self._live is not None:
            self._live.__exit__(*exc)
            self._live = None

    @property
    def text(self) -> str:
        return "".join(self.content)

    def on_content(self, chunk: str) -> None:
        self.content.append(chunk)
        self._refresh()

    def on_thinking(self, chunk: str) -> None:
        self.thinking.append(chunk)
        self._refresh()

    def on_done(self) -> None:
        if self.done:
            return
        self.done = True
        _logger.info("Streaming finished: %s", self.title)
        self._refresh()

    def _render(self):
        parts = []
        if self.thinking:
            tail = "\n".join("".join(self.thinking).splitlines()[-_THINKING_TAIL:])
            parts.append(Panel(Text(tail, style="dim"), title="Thinking", border_style="dim"))
        if self.content:
            parts.append(Markdown(self.text))
        elif not self.done:
            parts.append(Text(f"{self.title}...", style="dim"))
        return Group(*parts)

    def _refresh(self) -> None:
        if self._live is not None:
            self._live.update(self._render())


async def _stream_into_view(
    client: IdeaClient, model: str, prompt: str, title: str, think: bool,
) -> str:
    with StreamView(console, title) as view:
        await client.stream(
            model, prompt,
            view.on_content, view.on_thinking, view.on_done,
            reasoning=think,
        )
    return view.text


async def _run(
    config: IdeaforgeConfig,
    model: str,
    params: IdeaParams,
    count: int,
    think: bool,
    analyze: int | None,
    output: str | None,
    list_models: bool,
) -> None:
    client = IdeaClient.from_config(config)
    try:
        if list_models:
            for name in await client.list_models():
                console.print(name)
            return

        prompt = build_idea_prompt(params, count=count, template=config.idea_template)
        text = await _stream_into_view(client, model, prompt, "Generating ideas", think)

        ideas = split_ideas(text)
        if ideas:
            console.rule("[bold]Ideas[/bold]")
            for idx, idea in enumerate(ideas, 1):
                console.print(Panel(
                    Markdown(idea.body), title=f"{idx}. {idea.title}",
                    title_align="left", border_style="blue",
                ))

        sections = [text]
        if analyze is not None:
            if not 1 <= analyze <= len(ideas):
                raise click.UsageError(
                    f"--analyze {analyze}: response contained {len(ideas)} idea(s)"
                )
            idea = ideas[analyze - 1]
            console.rule(f"[bold]Market analysis: {idea.title}[/bold]")
            market = await _stream_into_view(
                client, model,
                build_market_prompt(idea.markdown, template=config.market_template),
                "Analyzing market", think,
            )
            sections.append(f"## Market analysis: {idea.title}\n\n{market}")

        if output:
            Path(output).write_text("\n\n".join(s.strip() for s in sections) + "\n")
            console.print(f"[dim]Saved to {output}[/dim]")
    finally:
        await client.close()


def _format_body(body) -> str:
    if isinstance(body, str):
        return body
    return json.dumps(body, indent=2)


@click.command()
@click.option("--config", "-c", "config_path", default=None,
              help="Path to ideaforge.yaml (auto-detected from CWD or ~/.config/ideaforge/)")
@click.option("--provider", "-p", default=None, help="Profile name from the config")
@click.option("--model", "-m", default=None, help="Model name (defaults to the profile's first model)")
@click.option("--problem", default="", help="Problem statement the ideas should address")
@click.option("--budget", default="1000", show_default=True, help="Budget in dollars")
@click.option("--complexity", default="Intermediate", show_default=True,
              help="Beginner, Intermediate or Advanced")
@click.option("--innovation", type=click.IntRange(1, 10), default=5, show_default=True,
              help="1=safe/proven, 10=cutting-edge/risky")
@click.option("--tech", "technologies", multiple=True, help="Preferred technology (repeatable)")
@click.option("--count", type=click.IntRange(1, 8), default=None, help="Number of ideas")
@click.option("--think/--no-think", default=None, help="Request reasoning output (self-hosted only)")
@click.option("--analyze", type=int, default=None, help="Run a market analysis for idea N")
@click.option("--output", "-o", default=None, help="Save the Markdown to this file")
@click.option("--list-models", is_flag=True, help="List models on the provider and exit")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
def main(config_path: str | None, provider: str | None, model: str | None,
         problem: str, budget: str, complexity: str, innovation: int,
         technologies: tuple[str, ...], count: int | None, think: bool | None,
         analyze: int | None, output: str | None, list_models: bool, verbose: bool):
    """ideaforge - stream project ideas from an LLM."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        config = load_config(config_path)
    except (ValueError, OSError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid config: {e}") from e

    if provider:
        if provider not in config.profiles:
            raise click.BadParameter(
                f"unknown profile {provider!r} (have: {', '.join(config.profiles)})",
                param_hint="--provider",
            )
        config.provider = provider

    if not list_models and not problem.strip():
        raise click.UsageError("--problem is required")

    profile = config.active_profile
    model = model or profile.default_model
    params = IdeaParams(
        problem=problem,
        budget=budget,
        complexity=complexity,
        innovation=innovation,
        technologies=list(technologies),
    )
    console.print(f"[dim]Model: {model} @ {config.provider} ({profile.kind.value})[/dim]")

    try:
        asyncio.run(_run(
            config, model, params,
            count or config.idea_count,
            config.think if think is None else think,
            analyze, output, list_models,
        ))
    except RequestFailed as e:
        status = e.status if e.status is not None else "network error"
        console.print(Panel(
            _format_body(e.body), title=f"Request failed ({status})", border_style="red",
        ))
        sys.exit(1)
    except httpx.HTTPError as e:
        # Raised after the stream opened (read timeout, dropped connection)
        console.print(Panel(
            str(e) or type(e).__name__,
            title=f"Stream failed ({type(e).__name__})", border_style="red",
        ))
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
