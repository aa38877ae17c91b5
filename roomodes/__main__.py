"""Allow ``python -m roomodes``."""

from roomodes.validate import cli

if __name__ == "__main__":
    cli()
