"""Main entry point for the mtp_tickler package."""
from mtp_tickler.cli import cli


def main():
    """Main entry point function."""
    cli()


if __name__ == "__main__":
    main()
