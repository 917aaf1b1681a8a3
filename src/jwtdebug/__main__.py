"""Allow ``python -m jwtdebug``."""

from .cli import main

if __name__ == "__main__":
    main()
