"""
Packagist client — published versions and their metadata for a package.
"""

from __future__ import annotations

import logging
import urllib.error
from typing import Any

from eddev.core.errors import RecipeNotFound, RegistryError
from eddev.core.services.http_json import get_json

logger = logging.getLogger(__name__)

PACKAGIST_URL = "https://packagist.org"


class PackagistClient:
    """Read-only view of packagist.org."""

    def __init__(self, base_url: str = PACKAGIST_URL):
        self.base_url = base_url.rstrip("/")

    def get_versions(self, package: str) -> dict[str, dict[str, Any]]:
        """Map of version string → version metadata (``require`` etc).

        Raises:
            RecipeNotFound: The package does not exist on Packagist.
            RegistryError: Packagist could not be reached or replied badly.
        """
        url = f"{self.base_url}/packages/{package}.json"
        try:
            payload = get_json(url)
        except urllib.error.HTTPError as e:
            if e.code == 404:
                raise RecipeNotFound(package) from e
            raise RegistryError(f"Packagist returned HTTP {e.code} for '{package}'") from e
        except urllib.error.URLError as e:
            raise RegistryError(f"Could not reach Packagist: {e.reason}") from e
        except ValueError as e:
            raise RegistryError(f"Packagist sent an unreadable response for '{package}'") from e

        details = payload.get("package") if isinstance(payload, dict) else None
        if not details or details.get("name", package) != package:
            raise RecipeNotFound(package)
        versions = details.get("versions") or {}
        logger.debug("Packagist lists %d version(s) of %s", len(versions), package)
        return versions
