"""Entry point for `python -m claude_usage_tracker`."""


def main():
    from claude_usage_tracker.app import run
    run()


if __name__ == "__main__":
    main()
