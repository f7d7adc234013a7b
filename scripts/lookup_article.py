"""Manual MediaWiki lookup against a live wiki.

Prints the merged article fragment (or the prefix matches) for a word.
Not collected by pytest (manual use only).

Usage:
    PYTHONPATH=src uv run python scripts/lookup_article.py cat --alt cats
    PYTHONPATH=src uv run python scripts/lookup_article.py cat --prefix
    PYTHONPATH=src uv run python scripts/lookup_article.py Katze --url https://de.wiktionary.org/w
"""

import asyncio
import argparse
import time
from dotenv import load_dotenv

load_dotenv()

from adapter.audio.link_registry import InMemoryAudioLinkRegistry
from adapter.external.httpx_transport import HttpxTransport
from services.mediawiki_dictionary import MediaWikiDictionary


async def run(args: argparse.Namespace) -> None:
    transport = HttpxTransport()
    audio_links = InMemoryAudioLinkRegistry()
    dictionary = MediaWikiDictionary("cli", args.url, args.url, transport, audio_links)

    start = time.perf_counter()
    try:
        if args.prefix:
            request = dictionary.prefix_match(args.word, args.max_results)
            await request.wait_finished()
            for title in request.matches():
                print(title)
        else:
            request = dictionary.get_article(args.word, args.alt)
            request.add_update_listener(
                lambda r: print(f"[update] {r.data_size()} bytes after {time.perf_counter() - start:.2f}s")
            )
            await request.wait_finished()
            print(request.get_data().decode("utf-8"))
            links = audio_links.links_for("cli")
            if links:
                print(f"\n[audio] {len(links)} link(s), first: {audio_links.first_link()}")
    finally:
        await transport.aclose()

    elapsed = time.perf_counter() - start
    error = request.error_string()
    print(f"\n[done] {elapsed:.2f}s" + (f", error: {error}" if error else ""))


def main() -> None:
    parser = argparse.ArgumentParser(description="Look up a word on a MediaWiki site")
    parser.add_argument("word", help="Headword")
    parser.add_argument("--alt", action="append", default=[], help="Alternate spelling (repeatable)")
    parser.add_argument("--url", default="https://en.wiktionary.org/w", help="Directory holding api.php")
    parser.add_argument("--prefix", action="store_true", help="Run a prefix search instead")
    parser.add_argument("--max-results", type=int, default=40)
    asyncio.run(run(parser.parse_args()))


if __name__ == "__main__":
    main()
