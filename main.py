from agentgate.cli import app


def main() -> None:
    # Same options and settings handling as the `agentgate` console script.
    app()


if __name__ == "__main__":
    main()
