"""
docker-install — provision Docker Engine and Compose from the vendor repository.
"""

__version__ = "0.1.0"
