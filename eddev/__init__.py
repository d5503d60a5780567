"""eddev — opinionated DDEV environments for Silverstripe CMS development."""

__version__ = "0.1.0"
