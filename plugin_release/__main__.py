"""console script entrypoint for the plugin-release CLI."""


def run() -> None:
    from .cli import app

    app()


def main() -> None:
    """Console entrypoint used by setuptools script hooks."""
    run()


if __name__ == "__main__":
    run()
