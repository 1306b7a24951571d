"""Allow ``python -m ntpclient``."""

from .main import main

main()
