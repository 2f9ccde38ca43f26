#!/usr/bin/env python3
from telegram import Bot
from telegram.error import TelegramError

from constants import C_RED, C_RESET


class TelegramNotifier:
    """Pushes alert lines to a Telegram chat."""

    def __init__(self, bot: Bot, chat_id: str) -> None:
        self.bot = bot
        self.chat_id = chat_id

    @classmethod
    def from_token(cls, token: str, chat_id: str) -> "TelegramNotifier":
        return cls(Bot(token=token), chat_id)

    async def start(self) -> None:
        await self.bot.initialize()

    async def close(self) -> None:
        await self.bot.shutdown()

    async def send_alert(self, text: str) -> bool:
        """Sends ``text``; failures are reported and never raised."""
        try:
            await self.bot.send_message(chat_id=self.chat_id, text=text)
        except TelegramError as exc:
            print(f"{C_RED}Error sending Telegram alert: {exc}{C_RESET}")
            return False
        return True
