"""Allow ``python -m lingopop``."""

from lingopop.cli.main import main

main()
