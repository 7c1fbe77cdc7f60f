"""Main entry point for the bot."""
from farsiflow.app import main

if __name__ == "__main__":
    main()
