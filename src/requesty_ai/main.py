"""CLI for the Requesty client."""

import asyncio
import sys
from collections.abc import Awaitable, Callable

import click

from requesty_ai.chat.client import CompletionClient, Message
from requesty_ai.costs.estimator import CostEstimator
from requesty_ai.credentials import RequestyError, SettingsCredentialProvider
from requesty_ai.logging import get_logger, setup_logging
from requesty_ai.models.catalog import CatalogError, ModelCatalog

log = get_logger("requesty_ai.main")

Action = Callable[[ModelCatalog, CompletionClient], Awaitable[None]]


async def list_models(catalog: ModelCatalog) -> None:
    """Print every purchasable model with its price."""
    for identifier in await catalog.list_models():
        pricing = catalog.get_pricing(identifier)
        label = pricing.label if pricing else ""
        click.echo(f"{identifier}\t{label}")


async def chat(
    catalog: ModelCatalog,
    client: CompletionClient,
    model: str,
    prompt: str,
    system: str | None,
) -> None:
    """Send one prompt and print the reply with its estimated cost."""
    messages: list[Message] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    # Pricing needs the catalog loaded; without it the cost is shown as zero
    try:
        await catalog.list_models()
    except CatalogError as e:
        log.warning("catalog_unavailable", model=model, error=str(e))

    reply = await client.complete(model, messages)
    click.echo(reply)

    input_text = "".join(m["content"] for m in messages)
    cost = CostEstimator(catalog).estimate(input_text, reply, model)
    click.echo(f"\n(estimated cost: ${cost.total:.6f})", err=True)


async def _execute(command: str, action: Action) -> int:
    """Run an action with fresh clients, mapping library errors to exit code 1."""
    credentials = SettingsCredentialProvider()
    catalog = ModelCatalog(credentials)
    client = CompletionClient(credentials)
    try:
        await action(catalog, client)
    except RequestyError as e:
        log.error("command_failed", command=command, error=str(e))
        click.echo(f"Error: {e}", err=True)
        return 1
    finally:
        await catalog.close()
        await client.close()
    return 0


@click.group()
def main() -> None:
    """Requesty router client: list models and chat."""
    setup_logging()


@main.command()
def models() -> None:
    """List purchasable models with prices."""

    async def action(catalog: ModelCatalog, client: CompletionClient) -> None:
        await list_models(catalog)

    sys.exit(asyncio.run(_execute("models", action)))


@main.command("chat")
@click.argument("model")
@click.argument("prompt")
@click.option("--system", default=None, help="Optional system prompt")
def chat_command(model: str, prompt: str, system: str | None) -> None:
    """Send a single PROMPT to MODEL, e.g. openai/gpt-4o."""

    async def action(catalog: ModelCatalog, client: CompletionClient) -> None:
        await chat(catalog, client, model, prompt, system)

    sys.exit(asyncio.run(_execute("chat", action)))


if __name__ == "__main__":
    main()
