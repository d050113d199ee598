"""Allow running trace-opener as a module: python -m trace_opener."""

from trace_opener.cli import main

if __name__ == "__main__":
    main()
