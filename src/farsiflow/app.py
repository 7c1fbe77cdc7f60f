"""Main application entry point."""
import logging
from typing import Optional

from telegram.ext import Application, CallbackQueryHandler, CommandHandler

from farsiflow.bot import (
    handle_callback,
    handle_error,
    handle_lesson,
    handle_play,
    handle_start,
    show_alphabet,
    show_leaderboard,
    show_levels,
    show_statistics,
    show_vocabulary,
)
from farsiflow.config import ensure_directories, settings
from farsiflow.logging_config import setup_logging
from farsiflow.models.base import init_db
from farsiflow.monitoring import start_monitoring


class FarsiFlowBot:
    """Main application class."""

    def __init__(self):
        """Initialize the application."""
        self.application: Optional[Application] = None
        self.logger = logging.getLogger(__name__)

    def build(self) -> Application:
        """Create the Telegram application and register handlers."""
        application = Application.builder().token(settings.bot.token).build()

        application.add_handler(CommandHandler("start", handle_start))
        application.add_handler(CommandHandler("play", handle_play))
        application.add_handler(CommandHandler("lesson", handle_lesson))
        application.add_handler(CommandHandler("levels", show_levels))
        application.add_handler(CommandHandler("stats", show_statistics))
        application.add_handler(CommandHandler("vocab", show_vocabulary))
        application.add_handler(CommandHandler("leaderboard", show_leaderboard))
        application.add_handler(CommandHandler("alphabet", show_alphabet))
        application.add_handler(CallbackQueryHandler(handle_callback))
        application.add_error_handler(handle_error)
        self.logger.info("Handlers added")

        return application

    def run(self) -> None:
        """Run the bot until interrupted."""
        settings.validate_bot()

        init_db()
        self.logger.info("Database initialized")

        if settings.bot.metrics_port:
            start_monitoring(settings.bot.metrics_port)
            self.logger.info(f"Metrics exported on port {settings.bot.metrics_port}")

        self.application = self.build()
        self.logger.info("Application started")
        self.application.run_polling()
        self.logger.info("Application stopped")


def main() -> None:
    """Main entry point."""
    ensure_directories()
    setup_logging("Starting FarsiFlow ...")

    bot = FarsiFlowBot()
    bot.run()


if __name__ == "__main__":
    main()
