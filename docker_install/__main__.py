"""Allow ``python -m docker_install``."""

from docker_install.main import main

main()
