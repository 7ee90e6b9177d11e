"""Minimal console demonstration of the donor chat assistant."""

import asyncio

from relay_core.api.service import open_chat_session, session_transcript


async def main() -> None:
    session = open_chat_session()
    for question in ("How do I donate?", "What programs do you run?"):
        await session.asubmit(question)
    for item in session_transcript(session):
        print(f"{item['role']}: {item['text']}")


if __name__ == "__main__":
    asyncio.run(main())
