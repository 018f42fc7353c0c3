"""Allow ``python -m privacy_guard`` to start the server."""

from privacy_guard.main import main

main()
