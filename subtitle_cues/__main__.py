"""Package entry point for ``python -m subtitle_cues``."""

from subtitle_cues.cli import main

if __name__ == "__main__":
    main()
