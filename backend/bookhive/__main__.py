"""Allows `python -m bookhive` to start the server process."""

from bookhive.server import main

main()
