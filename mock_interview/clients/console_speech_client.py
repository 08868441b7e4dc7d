import asyncio

from rich.console import Console
from rich.text import Text


class ConsoleSpeechClient:
    """Prints utterances instead of speaking them (text-only mode)."""

    backend = "console"

    def __init__(self, console: Console = None, words_per_second: float = 0.0):
        self.console = console or Console()
        # Non-zero simulates speaking time so cancellation behaves like real playback
        self.words_per_second = words_per_second

    async def say(self, text: str) -> bool:
        if not text or not text.strip():
            return True
        self.console.print(Text(f"🤖 AI: {text}", style="bright_blue"))
        if self.words_per_second > 0:
            await asyncio.sleep(len(text.split()) / self.words_per_second)
        return True

    def stop_playback(self):
        pass

    async def test_connection(self) -> bool:
        return True

    def cleanup(self):
        pass
