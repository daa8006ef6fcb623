"""Entry point for 'python -m userservice'."""

from userservice.cli import main

if __name__ == "__main__":
    main()
