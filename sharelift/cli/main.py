"""
sharelift CLI - Command-line interface for artifact migration.

Usage:
    sharelift migrate abc123 --source /mnt/recordings --destination s3://recordings
    sharelift plan abc123
    sharelift serve --port 8080

This creates the 'sharelift' command via entry point in pyproject.toml.
"""


def main():
    """Main entry point for the sharelift CLI."""
    from sharelift.cli.app import cli

    cli()


if __name__ == "__main__":
    main()
