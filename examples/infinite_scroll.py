"""Infinite scroll example: page through image results and resolve sources.

Start the server first (``imagegrid serve``) with GOOGLE_API_KEY and
GOOGLE_SEARCH_ENGINE_ID set in the environment or a .env file.
"""

import asyncio

from imagegrid.browse import (
    ContinuationTrigger,
    SearchApiClient,
    SearchController,
    View,
)

API_URL = "http://localhost:8000"


async def main():
    async with SearchApiClient(API_URL) as client:
        controller = SearchController(client, proxy_base_url=API_URL)
        trigger = ContinuationTrigger(controller)

        session = await controller.start_search("northern lights")

        # Pretend the user scrolls to the bottom three times
        for _ in range(3):
            await trigger.on_visible()

        print(f"{len(session.items)} images, next offset {session.next_offset}")
        if session.error:
            print(f"Search error: {session.error}")

        first = session.items[0] if session.items else None
        if first:
            print("grid:", controller.images.source(first, View.GRID).url)

            # The thumbnail failed to load in the browser: retry via the proxy
            print("retry:", controller.images.on_error(first, View.GRID).url)

            # The proxy failed too: show a placeholder naming the host
            placeholder = controller.images.on_error(first, View.GRID)
            print("placeholder for host:", placeholder.host)


if __name__ == "__main__":
    asyncio.run(main())
