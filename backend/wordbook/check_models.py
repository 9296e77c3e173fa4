"""List the models the configured API key can see.

Usage: python -m wordbook.check_models
"""
from __future__ import annotations

import asyncio
import sys

from .config import settings
from .core.llm_provider import LLMError, build_provider


async def main() -> int:
    provider = build_provider(settings)
    if not provider.available:
        print("No LLM API key configured (set DEEPSEEK_API_KEY or GEMINI_API_KEY)")
        return 1

    print(f"Querying {provider.name} at {provider.base_url} ...")
    try:
        names = await provider.list_models()
    except LLMError as exc:
        print(f"Listing models failed: {exc}")
        return 1
    finally:
        await provider.aclose()

    print(f"=== {len(names)} models ===")
    for name in names:
        marker = "*" if name.endswith(provider.model) else " "
        print(f"{marker} {name}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
