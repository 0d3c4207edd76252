"""Entry point for Breach."""

from breach.app import BreachApp, configure_logging


def main() -> None:
    configure_logging()
    app = BreachApp()
    app.run()


if __name__ == "__main__":
    main()
