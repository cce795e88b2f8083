"""Main application entry point for the locdog watchdog."""

import argparse
import asyncio
import signal
import sys

from .config.loader import ConfigLoader
from .config.models import WatchdogConfig
from .config.settings import Settings
from .supervisor import Supervisor
from .utils.logger import setup_logger


LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


class WatchdogApp:
    """
    Main watchdog application.

    Loads configuration, runs the supervisor until a signal or a fatal
    component error, and turns fatal conditions into a non-zero exit.
    """

    def __init__(self, config_path: str, log_level: str = "INFO"):
        """
        Initialize watchdog application.

        Args:
            config_path: Path to configuration file
            log_level: Logging level name

        Raises:
            SystemExit: If configuration is invalid
        """
        self.config_path = config_path
        self.logger = setup_logger("locdog", log_level)
        self.supervisor = None

        self.config = self._load_config()

    def _load_config(self) -> WatchdogConfig:
        """
        Load and validate configuration.

        Returns:
            WatchdogConfig: Loaded configuration

        Raises:
            SystemExit: If configuration is missing or invalid
        """
        try:
            self.logger.info(f"Loading configuration from {self.config_path}")
            config = ConfigLoader.load_from_file(self.config_path)
            self.logger.info(
                f"Configuration loaded with {len(config.targets)} target(s)"
            )
            return config

        except FileNotFoundError:
            self.logger.error(f"Configuration file not found: {self.config_path}")
            sys.exit(1)

        except Exception as e:
            self.logger.error(f"Failed to load configuration: {e}", exc_info=True)
            sys.exit(1)

    def log_effective_config(self) -> None:
        """Log every target as it will run, defaults applied."""
        for target in self.config.effective_targets():
            self.logger.info(
                f"Target {target.name}",
                extra={"target": target.model_dump()}
            )

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for signum in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(signum, self._signal_handler, signum)
            except NotImplementedError:
                signal.signal(
                    signum,
                    lambda s, frame: loop.call_soon_threadsafe(self._signal_handler, s)
                )

    def _signal_handler(self, signum: int) -> None:
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, initiating graceful shutdown...")
        if self.supervisor is not None:
            self.supervisor.stop()

    async def run(self) -> None:
        """
        Run the watchdog until stopped.

        Raises:
            Exception: Any fatal component error
        """
        if not self.config.targets:
            self.logger.warning("No targets configured, nothing to watch")

        self.supervisor = Supervisor(self.config, self.logger)
        self._install_signal_handlers(asyncio.get_running_loop())
        await self.supervisor.run()


def main():
    """
    CLI entry point.

    Parses command-line arguments and starts the watchdog.
    """
    parser = argparse.ArgumentParser(
        description='Local health watchdog driven by external probe commands',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with the default config (~/.config/locdog/config.yaml or $LOCDOG_CONFIG)
  locdog

  # Validate a config and print the effective per-target settings
  locdog --config config/config.example.yaml --check-config
        """
    )

    parser.add_argument(
        '--config',
        default=Settings.config_path(),
        help='Path to configuration file (default: $LOCDOG_CONFIG, else ~/.config/locdog/config.yaml or config.json)'
    )

    parser.add_argument(
        '--log-level',
        default=Settings.log_level(),
        choices=LOG_LEVELS,
        help='Logging level (default: INFO or LOG_LEVEL env var)'
    )

    parser.add_argument(
        '--check-config',
        action='store_true',
        help='Validate configuration, log effective targets and exit'
    )

    args = parser.parse_args()

    # argparse does not check defaults (from LOG_LEVEL) against choices
    if args.log_level not in LOG_LEVELS:
        setup_logger("locdog").error(
            f"Invalid log level: {args.log_level}. Expected one of {', '.join(LOG_LEVELS)}"
        )
        sys.exit(1)

    app = WatchdogApp(config_path=args.config, log_level=args.log_level)

    if args.check_config:
        app.log_effective_config()
        sys.exit(0)

    try:
        asyncio.run(app.run())
    except Exception as e:
        app.logger.error(f"Watchdog terminated: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0)


if __name__ == '__main__':
    main()
